"""
Prescription / inventory reconciliation.

Prescribing a medicine on a medical record consumes stock; editing a
record's prescription returns or consumes the difference.  Every change
for one request is checked against current stock before anything is
written, and the whole batch runs in one transaction with the affected
rows locked, so stock never goes negative and a failed check leaves the
inventory untouched.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Iterable, Optional

from django.db import transaction
from django.utils import timezone

from practice.models import InventoryItem
from practice.services.audit import log_action

logger = logging.getLogger(__name__)


class InsufficientStock(Exception):
    def __init__(self, item: InventoryItem, required: int, *, additional: Optional[int] = None):
        self.item = item
        self.available = item.quantity
        self.required = required
        self.shortage = required - item.quantity
        self.additional = additional
        extra = f", Additional needed: {additional}" if additional else ''
        super().__init__(
            f"Insufficient stock for {item.name}. Currently available: {self.available}, "
            f"Required: {required}{extra}, Short by: {self.shortage}"
        )

    def as_dict(self) -> dict:
        out = {
            'medicineId': self.item.id,
            'medicineName': self.item.name,
            'available': self.available,
            'required': self.required,
            'shortage': self.shortage,
        }
        if self.additional:
            out['additionalNeeded'] = self.additional
        return out


class UnknownMedicine(Exception):
    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Medicine not found in inventory: {item_id}")


def _quantities(prescribed: Optional[Iterable[dict]]) -> 'OrderedDict[int, int]':
    """Sum quantities per inventory id, keeping first-seen order."""
    totals: OrderedDict[int, int] = OrderedDict()
    for entry in prescribed or []:
        item_id = int(entry['id'])
        totals[item_id] = totals.get(item_id, 0) + int(entry.get('quantity') or 0)
    return totals


def net_deltas(old: Optional[Iterable[dict]], new: Optional[Iterable[dict]]) -> 'OrderedDict[int, int]':
    """Per-item stock change implied by replacing ``old`` with ``new``.

    Positive values return stock, negative values consume it.  Items
    whose quantity did not change are omitted.
    """
    before = _quantities(old)
    after = _quantities(new)
    deltas: OrderedDict[int, int] = OrderedDict()
    for item_id in list(before) + [i for i in after if i not in before]:
        delta = before.get(item_id, 0) - after.get(item_id, 0)
        if delta:
            deltas[item_id] = delta
    return deltas


def _lock_items(ids: list[int]) -> dict[int, InventoryItem]:
    items = {i.id: i for i in InventoryItem.objects.select_for_update().filter(id__in=ids)}
    for item_id in ids:
        if item_id not in items:
            raise UnknownMedicine(item_id)
    return items


def _apply(items: dict[int, InventoryItem], deltas: 'OrderedDict[int, int]', *, user=None, reason: str) -> list[dict]:
    now = timezone.now()
    updates: list[dict] = []
    for item_id, delta in deltas.items():
        item = items[item_id]
        previous = item.quantity
        item.quantity = previous + delta
        item.updated_at = now
        item.save(update_fields=['quantity', 'updated_at'])
        updates.append({
            'id': item.id,
            'name': item.name,
            'previousQuantity': previous,
            'newQuantity': item.quantity,
            'change': delta,
        })
        log_action(user=user, action='inventory_adjust', object_type='inventory', object_id=item.id,
                   detail={'reason': reason, 'from': previous, 'to': item.quantity})
    return updates


@transaction.atomic
def dispense(prescribed: Iterable[dict], *, user=None) -> tuple[list[dict], list[dict]]:
    """Deduct a new prescription from stock.

    Returns ``(snapshots, updates)``: the prescription entries enriched
    with the medicine's name/dosage/unit for storage on the record, and
    the inventory changes applied.  Raises :class:`InsufficientStock`
    naming the first item that cannot be covered.
    """
    prescribed = list(prescribed or [])
    wanted = _quantities(prescribed)
    items = _lock_items(list(wanted))
    for item_id, qty in wanted.items():
        item = items[item_id]
        if item.quantity - qty < 0:
            logger.info('prescription refused: %s has %s, needs %s', item.name, item.quantity, qty)
            raise InsufficientStock(item, qty)
    updates = _apply(items, OrderedDict((i, -q) for i, q in wanted.items() if q), user=user, reason='prescribe')
    return snapshot(prescribed, items), updates


@transaction.atomic
def reconcile(old: Optional[Iterable[dict]], new: Iterable[dict], *, user=None) -> tuple[list[dict], list[dict]]:
    """Apply the difference between an edited prescription and its previous version.

    A medicine whose prescribed quantity goes up must have its full new
    quantity in stock; only the net difference is then taken from stock.
    """
    old = list(old or [])
    new = list(new or [])
    deltas = net_deltas(old, new)
    wanted = _quantities(new)
    # Unchanged entries may reference medicines removed from inventory since.
    items = _lock_items(list(deltas))
    unchanged = [i for i in wanted if i not in items]
    items.update({i.id: i for i in InventoryItem.objects.filter(id__in=unchanged)})
    for item_id, delta in deltas.items():
        item = items[item_id]
        if delta < 0 and item.quantity < wanted[item_id]:
            logger.info('prescription update refused: %s has %s, prescription needs %s',
                        item.name, item.quantity, wanted[item_id])
            raise InsufficientStock(item, wanted[item_id], additional=-delta)
    updates = _apply(items, deltas, user=user, reason='prescription_update')
    return snapshot(new, items, previous=old), updates


def snapshot(prescribed: Iterable[dict], items: dict[int, InventoryItem], previous: Iterable[dict] = ()) -> list[dict]:
    """Freeze name/dosage/unit of each prescribed medicine onto the entry."""
    known = {int(e['id']): e for e in previous}
    out = []
    for entry in prescribed:
        item_id = int(entry['id'])
        item = items.get(item_id)
        fallback = known.get(item_id, entry)
        out.append({
            'id': item_id,
            'name': item.name if item else fallback.get('name', ''),
            'dosage': item.dosage if item else fallback.get('dosage', ''),
            'unit': item.unit if item else fallback.get('unit', ''),
            'quantity': int(entry.get('quantity') or 0),
        })
    return out
