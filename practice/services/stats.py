from decimal import Decimal

from django.db.models import DecimalField, ExpressionWrapper, F, Sum

from practice.models import Appointment, InventoryItem, MedicalRecord


def counts() -> dict:
    return {
        'appointments': Appointment.objects.count(),
        'inventory': InventoryItem.objects.count(),
        'medicalRecords': MedicalRecord.objects.count(),
    }


def inventory_value() -> Decimal:
    """Total stock value, ``sum(quantity * price)``."""
    total = InventoryItem.objects.aggregate(
        total=Sum(ExpressionWrapper(F('quantity') * F('price'), output_field=DecimalField(max_digits=14, decimal_places=2)))
    )['total']
    return (total or Decimal('0')).quantize(Decimal('0.01'))
