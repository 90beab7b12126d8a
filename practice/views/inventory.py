"""
Medicine inventory endpoints.

Clinical staff can read stock; nurses and administrators maintain it.
``PUT /api/inventory/<id>`` with only a ``quantity`` is a quick stock
edit; any other body replaces the item's details.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from practice.models import InventoryItem
from practice.permissions import require
from practice.serializers.inventory import InventoryItemSerializer, StockUpdateSerializer, serialize_item
from practice.services.audit import log_action


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, *require('inventory.view', 'inventory.manage')])
def inventory_list(request):
    if request.method == 'GET':
        return Response([serialize_item(i) for i in InventoryItem.objects.order_by('name', 'id')])
    s = InventoryItemSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    item = InventoryItem.objects.create(**s.to_model_kwargs())
    log_action(user=request.user, action='inventory_create', object_type='inventory', object_id=item.id,
               detail={'quantity': item.quantity})
    return Response(serialize_item(item), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, *require('inventory.view', 'inventory.manage')])
def inventory_detail(request, pk: int):
    item = get_object_or_404(InventoryItem, pk=pk)
    if request.method == 'GET':
        return Response(serialize_item(item))
    if request.method == 'DELETE':
        item.delete()
        log_action(user=request.user, action='inventory_delete', object_type='inventory', object_id=pk)
        return Response({'ok': True, 'message': 'Item deleted successfully'})
    # PUT
    previous = item.quantity
    if set(request.data.keys()) == {'quantity'}:
        s = StockUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        item.quantity = s.validated_data['quantity']
    else:
        s = InventoryItemSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        for field, value in s.to_model_kwargs().items():
            setattr(item, field, value)
    item.updated_at = timezone.now()
    item.save()
    log_action(user=request.user, action='inventory_update', object_type='inventory', object_id=item.id,
               detail={'from': previous, 'to': item.quantity})
    return Response(serialize_item(item))
