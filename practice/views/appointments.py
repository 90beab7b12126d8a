"""
Appointment book endpoints.

Nurses and administrators book and cancel appointments; any signed-in
user can read them, patients only their own.  Booking refuses a start
time less than an hour from an existing appointment on the same day
and answers 409 with up to three free slots to choose from instead.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from practice.exceptions import error_response
from practice.models import Appointment
from practice.permissions import PATIENT, require
from practice.serializers.appointments import AppointmentCreateSerializer, SlotQuerySerializer, serialize_appointment
from practice.services.audit import log_action
from practice.services.scheduling import NO_SLOTS_MESSAGE, SchedulingConflict, ensure_slot_free, suggest_slots_on

logger = logging.getLogger(__name__)


def _visible(user, qs):
    if getattr(user, 'role', None) == PATIENT:
        return qs.filter(email__iexact=user.email)
    return qs


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, *require('appointment.view', 'appointment.create')])
def appointments(request):
    if request.method == 'GET':
        qs = _visible(request.user, Appointment.objects.all())
        return Response([serialize_appointment(a) for a in qs.order_by('-date', '-time')])
    # POST
    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.to_model_kwargs()
    try:
        with transaction.atomic():
            ensure_slot_free(data['date'], data['time'])
            appt = Appointment.objects.create(**data)
    except SchedulingConflict as e:
        logger.info('booking refused on %s: %s', data['date'], e)
        return error_response(
            str(e), code='scheduling_conflict', status=status.HTTP_409_CONFLICT,
            conflictingAppointment=serialize_appointment(e.conflicting),
            suggestedTimes=e.suggested_times or [NO_SLOTS_MESSAGE],
        )
    log_action(user=request.user, action='appointment_create', object_type='appointment', object_id=appt.id)
    return Response(serialize_appointment(appt), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, *require('appointment.view')])
def available_slots(request):
    """Free on-the-hour starts for ``?date=YYYY-MM-DD``."""
    q = SlotQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    date = q.validated_data['date']
    slots = suggest_slots_on(date)
    return Response({
        'date': date.isoformat(),
        'suggestedTimes': slots,
        'message': None if slots else NO_SLOTS_MESSAGE,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_appointments(request, identifier: str):
    """Appointments for one patient, looked up by email or ID number.

    Patients only ever get their own bookings back.
    """
    identifier = identifier.strip()
    if '@' in identifier:
        qs = Appointment.objects.filter(email__iexact=identifier)
    else:
        qs = Appointment.objects.filter(id_number=identifier)
    qs = _visible(request.user, qs)
    return Response([serialize_appointment(a) for a in qs.order_by('-date', '-time')])


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, *require('appointment.view', 'appointment.delete')])
def appointment_detail(request, pk: int):
    appt = get_object_or_404(_visible(request.user, Appointment.objects.all()), pk=pk)
    if request.method == 'GET':
        return Response(serialize_appointment(appt))
    appt.delete()
    log_action(user=request.user, action='appointment_delete', object_type='appointment', object_id=pk)
    return Response({'ok': True, 'message': 'Appointment deleted successfully'})
