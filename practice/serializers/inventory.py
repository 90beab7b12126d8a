import bleach
from rest_framework import serializers

from practice.models import InventoryItem


class InventoryItemSerializer(serializers.Serializer):
    """Full create/update payload."""
    name = serializers.CharField(max_length=255)
    dosage = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    unit = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=16)
    quantity = serializers.IntegerField(min_value=0)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('name is required')
        return v

    def to_model_kwargs(self) -> dict:
        vd = self.validated_data
        return {
            'name': vd['name'],
            'dosage': vd.get('dosage') or '',
            'unit': vd.get('unit') or 'mg',
            'quantity': vd['quantity'],
            'price': vd['price'],
        }


class StockUpdateSerializer(serializers.Serializer):
    """Quantity-only quick edit."""
    quantity = serializers.IntegerField(min_value=0)


def serialize_item(item: InventoryItem) -> dict:
    return {
        'id': item.id,
        'name': item.name,
        'dosage': item.dosage,
        'unit': item.unit,
        'quantity': item.quantity,
        'price': float(item.price),
        'createdAt': item.created_at.isoformat() if item.created_at else None,
        'updatedAt': item.updated_at.isoformat() if item.updated_at else None,
    }
