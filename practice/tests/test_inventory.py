from decimal import Decimal

import pytest

from practice.models import AuditEvent, InventoryItem
from practice.services.inventory import (
    InsufficientStock,
    UnknownMedicine,
    dispense,
    net_deltas,
    reconcile,
)

pytestmark = pytest.mark.django_db


def _item(name='Amoxicillin', quantity=5, **kw):
    return InventoryItem.objects.create(name=name, quantity=quantity, price=Decimal('2.50'), dosage='500', **kw)


def test_net_deltas_merge_old_and_new():
    old = [{'id': 1, 'quantity': 3}, {'id': 2, 'quantity': 1}]
    new = [{'id': 1, 'quantity': 5}, {'id': 3, 'quantity': 2}]
    assert dict(net_deltas(old, new)) == {1: -2, 2: 1, 3: -2}


def test_net_deltas_skip_unchanged_and_sum_repeats():
    old = [{'id': 1, 'quantity': 2}]
    new = [{'id': 1, 'quantity': 1}, {'id': 1, 'quantity': 1}]
    assert dict(net_deltas(old, new)) == {}


def test_dispense_deducts_and_snapshots():
    x = _item(quantity=5)
    snapshots, updates = dispense([{'id': x.id, 'quantity': 2}])
    x.refresh_from_db()
    assert x.quantity == 3
    assert snapshots == [{'id': x.id, 'name': 'Amoxicillin', 'dosage': '500', 'unit': 'mg', 'quantity': 2}]
    assert updates[0]['previousQuantity'] == 5 and updates[0]['newQuantity'] == 3 and updates[0]['change'] == -2
    assert AuditEvent.objects.filter(action='inventory_adjust', object_id=x.id).exists()


def test_dispense_refuses_shortage_without_touching_stock():
    x = _item(quantity=5)
    with pytest.raises(InsufficientStock) as info:
        dispense([{'id': x.id, 'quantity': 6}])
    msg = str(info.value)
    assert 'Currently available: 5' in msg
    assert 'Short by: 1' in msg
    x.refresh_from_db()
    assert x.quantity == 5


def test_dispense_is_all_or_nothing():
    a = _item('A', quantity=10)
    b = _item('B', quantity=1)
    with pytest.raises(InsufficientStock) as info:
        dispense([{'id': a.id, 'quantity': 4}, {'id': b.id, 'quantity': 2}])
    assert info.value.item.pk == b.pk
    a.refresh_from_db()
    assert a.quantity == 10


def test_dispense_unknown_medicine():
    with pytest.raises(UnknownMedicine):
        dispense([{'id': 9999, 'quantity': 1}])


def test_reconcile_shortage_on_increase():
    x = _item(quantity=4)
    with pytest.raises(InsufficientStock) as info:
        reconcile([{'id': x.id, 'quantity': 3}], [{'id': x.id, 'quantity': 5}])
    assert info.value.required == 5
    assert info.value.shortage == 1
    assert 'Additional needed: 2' in str(info.value)
    assert 'Short by: 1' in str(info.value)
    assert info.value.as_dict()['additionalNeeded'] == 2
    x.refresh_from_db()
    assert x.quantity == 4


def test_reconcile_increase_covered_exactly_by_stock():
    x = _item(quantity=5)
    _, updates = reconcile([{'id': x.id, 'quantity': 3}], [{'id': x.id, 'quantity': 5}])
    x.refresh_from_db()
    assert x.quantity == 3
    assert updates[0]['change'] == -2


def test_reconcile_consumes_net_increase():
    x = _item(quantity=10)
    _, updates = reconcile([{'id': x.id, 'quantity': 3}], [{'id': x.id, 'quantity': 5}])
    x.refresh_from_db()
    assert x.quantity == 8
    assert updates == [{'id': x.id, 'name': x.name, 'previousQuantity': 10, 'newQuantity': 8, 'change': -2}]


def test_reconcile_returns_removed_medicine_to_stock():
    x = _item('X', quantity=1)
    y = _item('Y', quantity=3)
    snapshots, _ = reconcile([{'id': x.id, 'quantity': 4}], [{'id': y.id, 'quantity': 3}])
    x.refresh_from_db()
    y.refresh_from_db()
    assert (x.quantity, y.quantity) == (5, 0)
    assert [s['name'] for s in snapshots] == ['Y']


def test_reconcile_keeps_snapshot_of_deleted_unchanged_medicine():
    x = _item('Gone', quantity=1)
    old = [{'id': x.id, 'name': 'Gone', 'dosage': '500', 'unit': 'mg', 'quantity': 2}]
    x.delete()
    snapshots, updates = reconcile(old, [{'id': old[0]['id'], 'quantity': 2}])
    assert updates == []
    assert snapshots[0]['name'] == 'Gone'
