"""Dump appointments, inventory and medical records to a JSON file."""
import json
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from practice.models import Appointment, InventoryItem, MedicalRecord
from practice.serializers.appointments import serialize_appointment
from practice.serializers.inventory import serialize_item
from practice.serializers.records import serialize_record


def build_export() -> dict:
    return {
        'appointments': [serialize_appointment(a) for a in Appointment.objects.order_by('id')],
        'inventory': [serialize_item(i) for i in InventoryItem.objects.order_by('id')],
        'medicalRecords': [serialize_record(r) for r in MedicalRecord.objects.order_by('id')],
        'exportedAt': timezone.now().isoformat(),
    }


class Command(BaseCommand):
    help = "Export all clinic data to JSON."

    def add_arguments(self, parser):
        parser.add_argument("--output", help="target file (default: CLINIC_EXPORT_DIR/export-<timestamp>.json)")

    def handle(self, *args, **opts):
        data = build_export()
        if opts.get("output"):
            path = Path(opts["output"])
        else:
            stamp = timezone.now().strftime('%Y%m%dT%H%M%S')
            path = Path(settings.CLINIC_EXPORT_DIR) / f"export-{stamp}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding='utf-8')
        self.stdout.write(self.style.SUCCESS(f"Data exported to: {path}"))
