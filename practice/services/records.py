import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from practice.models import MedicalRecord
from practice.services import inventory
from practice.services.audit import log_action

logger = logging.getLogger(__name__)


class DuplicatePatient(Exception):
    def __init__(self, existing: MedicalRecord):
        self.existing = existing
        super().__init__(f"A medical record already exists for this patient (record #{existing.id})")


def find_duplicate(id_number: Optional[str], email: Optional[str]) -> Optional[MedicalRecord]:
    """Return an existing record sharing ``id_number`` or ``email``.

    Matching is exact.  An idNumber match wins over an email match;
    within one identifier the oldest record wins.  When the two
    identifiers point at different records the ambiguity is logged,
    since it usually means two people share a contact.
    """
    by_id = by_email = None
    if id_number:
        by_id = MedicalRecord.objects.filter(id_number=id_number).order_by('id').first()
    if email:
        by_email = MedicalRecord.objects.filter(email=email).order_by('id').first()
    if by_id and by_email and by_id.pk != by_email.pk:
        logger.warning('idNumber and email match different records (#%s, #%s)', by_id.pk, by_email.pk)
    return by_id or by_email


def summary(record: MedicalRecord) -> dict:
    return {
        'id': record.id,
        'patientName': record.patient_name,
        'idNumber': record.id_number,
        'email': record.email,
        'diagnosis': record.diagnosis,
        'createdAt': record.created_at.isoformat() if record.created_at else None,
    }


@transaction.atomic
def create_record(data: dict, *, user=None) -> tuple[MedicalRecord, list[dict]]:
    """Create a record after the duplicate check, dispensing its prescription."""
    existing = find_duplicate(data.get('id_number'), data.get('email'))
    if existing is not None:
        raise DuplicatePatient(existing)
    prescribed = data.pop('prescribed_medicines', None) or []
    snapshots, updates = inventory.dispense(prescribed, user=user)
    record = MedicalRecord.objects.create(prescribed_medicines=snapshots, **data)
    log_action(user=user, action='record_create', object_type='medical_record', object_id=record.id,
               detail={'inventoryUpdates': len(updates)})
    return record, updates


@transaction.atomic
def update_record(record: MedicalRecord, data: dict, *, user=None) -> tuple[MedicalRecord, list[dict]]:
    """Update a record; a supplied prescription is reconciled against the stored one."""
    updates: list[dict] = []
    if 'prescribed_medicines' in data:
        prescribed = data.pop('prescribed_medicines') or []
        record.prescribed_medicines, updates = inventory.reconcile(record.prescribed_medicines, prescribed, user=user)
    for field, value in data.items():
        setattr(record, field, value)
    record.updated_at = timezone.now()
    record.save()
    log_action(user=user, action='record_update', object_type='medical_record', object_id=record.id,
               detail={'inventoryUpdates': len(updates)})
    return record, updates
