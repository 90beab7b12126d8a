import bleach
from rest_framework import serializers

from practice.models import Appointment


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class AppointmentCreateSerializer(serializers.Serializer):
    date = serializers.DateField()
    time = serializers.TimeField(input_formats=['%H:%M', '%H:%M:%S'])
    clientName = serializers.CharField(max_length=255)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    idNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    service = serializers.CharField(max_length=255)

    def validate_clientName(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('clientName is required')
        return v

    def validate_service(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('service is required')
        return v

    def validate_idNumber(self, v):
        return _clean(v) or None

    def to_model_kwargs(self) -> dict:
        vd = self.validated_data
        return {
            'date': vd['date'],
            'time': vd['time'],
            'client_name': vd['clientName'],
            'email': vd.get('email') or None,
            'id_number': vd.get('idNumber') or None,
            'service': vd['service'],
        }


class SlotQuerySerializer(serializers.Serializer):
    date = serializers.DateField()


def serialize_appointment(appt: Appointment) -> dict:
    return {
        'id': appt.id,
        'date': appt.date.isoformat(),
        'time': appt.time.strftime('%H:%M'),
        'clientName': appt.client_name,
        'email': appt.email,
        'idNumber': appt.id_number,
        'service': appt.service,
        'createdAt': appt.created_at.isoformat() if appt.created_at else None,
    }
