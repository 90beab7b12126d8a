"""
Medical record endpoints.

Doctors and nurses write records; administrators may read and delete
them; patients see only the records the ownership predicate links to
their account.  Creating or editing a record's prescription moves
medicine stock through :mod:`practice.services.inventory`.
"""
from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from rest_framework.exceptions import PermissionDenied

from practice.exceptions import error_response
from practice.models import MedicalRecord
from practice.permissions import PATIENT, patient_can_view_record, records_visible_to, require
from practice.serializers.records import MedicalRecordSerializer, serialize_record
from practice.services import records as record_service
from practice.services.audit import log_action
from practice.services.inventory import InsufficientStock, UnknownMedicine

logger = logging.getLogger(__name__)


def _stock_error(e: Exception) -> Response:
    if isinstance(e, InsufficientStock):
        return error_response(str(e), code='insufficient_stock', status=status.HTTP_400_BAD_REQUEST,
                              details=e.as_dict())
    return error_response(str(e), code='unknown_medicine', status=status.HTTP_400_BAD_REQUEST,
                          details={'medicineId': e.item_id})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, *require('record.view', 'record.write')])
def records(request):
    if request.method == 'GET':
        qs = records_visible_to(request.user, MedicalRecord.objects.all())
        return Response([serialize_record(r) for r in qs.order_by('-created_at', '-id')])
    # POST
    s = MedicalRecordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        record, updates = record_service.create_record(s.to_model_kwargs(), user=request.user)
    except record_service.DuplicatePatient as e:
        logger.info('duplicate patient: existing record #%s', e.existing.id)
        return error_response(
            'Patient already has a medical record', code='duplicate_patient', status=status.HTTP_409_CONFLICT,
            message='Edit the existing record instead of creating a new one.',
            existingRecord=record_service.summary(e.existing),
        )
    except (InsufficientStock, UnknownMedicine) as e:
        return _stock_error(e)
    return Response({**serialize_record(record), 'inventoryUpdates': updates}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, *require('record.search')])
def search_records(request, name: str):
    qs = MedicalRecord.objects.filter(patient_name__icontains=name.strip())
    return Response([serialize_record(r) for r in qs.order_by('-created_at', '-id')])


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, *require(GET='record.view', HEAD='record.view', OPTIONS='record.view',
                                               PUT='record.write', DELETE='record.delete')])
def record_detail(request, pk: int):
    record = get_object_or_404(MedicalRecord, pk=pk)
    if request.method == 'GET':
        if request.user.role == PATIENT and not patient_can_view_record(request.user, record):
            raise PermissionDenied('You can only view your own medical records')
        return Response(serialize_record(record))

    if request.method == 'DELETE':
        record.delete()
        log_action(user=request.user, action='record_delete', object_type='medical_record', object_id=pk)
        return Response({'ok': True, 'message': 'Medical record deleted successfully'})

    # PUT
    s = MedicalRecordSerializer(record, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    try:
        record, updates = record_service.update_record(record, s.to_model_kwargs(), user=request.user)
    except (InsufficientStock, UnknownMedicine) as e:
        return _stock_error(e)
    return Response({'record': serialize_record(record), 'inventoryUpdates': updates})
