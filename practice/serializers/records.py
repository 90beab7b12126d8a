import bleach
from rest_framework import serializers

from practice.models import Appointment, MedicalRecord

# request key -> model field
FIELD_MAP = {
    'patientName': 'patient_name',
    'email': 'email',
    'idNumber': 'id_number',
    'age': 'age',
    'gender': 'gender',
    'symptoms': 'symptoms',
    'diagnosis': 'diagnosis',
    'treatment': 'treatment',
    'medications': 'medications',
    'allergies': 'allergies',
    'bloodPressure': 'blood_pressure',
    'heartRate': 'heart_rate',
    'temperature': 'temperature',
    'notes': 'notes',
    'followUpDate': 'follow_up_date',
    'labResults': 'lab_results',
    'xrayNotes': 'xray_notes',
}

TEXT_FIELDS = {'medications', 'allergies', 'notes', 'labResults', 'xrayNotes'}


class PrescribedMedicineSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False, min_value=1)
    inventoryItemId = serializers.IntegerField(required=False, min_value=1)
    quantity = serializers.IntegerField(min_value=1)

    def validate(self, attrs):
        item_id = attrs.get('id') or attrs.get('inventoryItemId')
        if not item_id:
            raise serializers.ValidationError('medicine id is required')
        return {'id': item_id, 'quantity': attrs['quantity']}


class MedicalRecordSerializer(serializers.Serializer):
    appointmentId = serializers.IntegerField(required=False, allow_null=True)
    patientName = serializers.CharField(max_length=255)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    idNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    age = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=150)
    gender = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=16)
    symptoms = serializers.CharField()
    diagnosis = serializers.CharField()
    treatment = serializers.CharField()
    medications = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    prescribedMedicines = PrescribedMedicineSerializer(many=True, required=False, allow_null=True)
    allergies = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    bloodPressure = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    heartRate = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    temperature = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    followUpDate = serializers.DateField(required=False, allow_null=True)
    labResults = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    xrayNotes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_patientName(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('patientName is required')
        return v

    def validate_appointmentId(self, v):
        if v is None:
            return None
        appt = Appointment.objects.filter(id=v).first()
        if appt is None:
            raise serializers.ValidationError('appointment not found')
        linked = MedicalRecord.objects.filter(appointment=appt)
        if self.instance is not None:
            linked = linked.exclude(pk=self.instance.pk)
        if linked.exists():
            raise serializers.ValidationError('appointment already has a medical record')
        return v

    def to_model_kwargs(self) -> dict:
        """Validated data keyed by model field; only keys present in the request."""
        vd = self.validated_data
        out = {}
        for key, field in FIELD_MAP.items():
            if key not in vd:
                continue
            value = vd[key]
            if key in TEXT_FIELDS:
                value = value or ''
            elif isinstance(value, str):
                value = value.strip() or None
            out[field] = value
        if 'appointmentId' in vd:
            out['appointment_id'] = vd['appointmentId']
        if 'prescribedMedicines' in vd:
            out['prescribed_medicines'] = list(vd['prescribedMedicines'] or [])
        return out


def serialize_record(record: MedicalRecord) -> dict:
    return {
        'id': record.id,
        'appointmentId': record.appointment_id,
        'patientName': record.patient_name,
        'email': record.email,
        'idNumber': record.id_number,
        'age': record.age,
        'gender': record.gender,
        'symptoms': record.symptoms,
        'diagnosis': record.diagnosis,
        'treatment': record.treatment,
        'medications': record.medications,
        'prescribedMedicines': record.prescribed_medicines or [],
        'allergies': record.allergies,
        'bloodPressure': record.blood_pressure,
        'heartRate': record.heart_rate,
        'temperature': record.temperature,
        'notes': record.notes,
        'followUpDate': record.follow_up_date.isoformat() if record.follow_up_date else None,
        'labResults': record.lab_results,
        'xrayNotes': record.xray_notes,
        'createdAt': record.created_at.isoformat() if record.created_at else None,
        'updatedAt': record.updated_at.isoformat() if record.updated_at else None,
    }
