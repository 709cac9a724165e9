"""
Batch allocation — FIFO with expiry override.

Given a requested quantity and a snapshot list of pool records for one item,
decide which batches to take from and how much. Pure: nothing is mutated and
no reference to the candidates outlives the call, apart from the records held
by the returned plan.

Order:
1. Both have an expiry: earlier expiry first.
2. Only one has an expiry: that one first.
3. Neither has an expiry: earlier arrival first.
Remaining ties break by arrival, then batch id, then record id.

Usage:
    allocation = allocate(Quantity.parse('6'), shelf_records)
    if allocation.shortfall:
        raise InsufficientStockError(...)
    for entry in allocation.plan:
        entry.record.sell(entry.quantity, user)
"""

from dataclasses import dataclass, field
from datetime import date

from storekeeper.exceptions import ValidationError
from storekeeper.values import Quantity


@dataclass(frozen=True)
class PlanEntry:
    """Take `quantity` units from `record`."""

    record: object
    quantity: Quantity

    @property
    def batch_id(self):
        return self.record.batch_id

    @property
    def key(self) -> tuple:
        """(record id, batch id, quantity): used to compare plans."""
        return (self.record.id, self.record.batch_id, self.quantity)


@dataclass(frozen=True)
class Allocation:
    requested: Quantity
    plan: tuple[PlanEntry, ...] = field(default_factory=tuple)
    shortfall: Quantity = field(default_factory=Quantity.zero)

    @property
    def allocated(self) -> Quantity:
        result = Quantity.zero()
        for entry in self.plan:
            result = result + entry.quantity
        return result

    @property
    def is_satisfied(self) -> bool:
        return self.shortfall.is_zero

    def batch_quantities(self) -> list[tuple]:
        """[(batch_id, quantity)] in allocation order."""
        return [(entry.batch_id, entry.quantity) for entry in self.plan]

    def same_plan_as(self, other: 'Allocation') -> bool:
        return [e.key for e in self.plan] == [e.key for e in other.plan]


def sort_key(record) -> tuple:
    """
    Total order over pool records.

    Records with an expiry sort before records without one; among records
    with an expiry, earlier expiry wins. Arrival, batch id and record id
    settle the rest so the order is deterministic.
    """
    expiry = record.expiry_date
    return (
        expiry is None,
        expiry or date.max,
        record.arrived_at,
        record.batch_id if record.batch_id is not None else 0,
        record.id if record.id is not None else 0,
    )


def _check_single_item(candidates) -> None:
    codes = {record.item_code for record in candidates}
    if len(codes) > 1:
        raise ValidationError('MIXED_ITEMS', item_codes=sorted(codes))


def eligible(candidates, today: date | None = None) -> list:
    """Candidates that can be allocated from, in allocation order."""
    _check_single_item(candidates)
    usable = [record for record in candidates if record.is_allocatable(today)]
    return sorted(usable, key=sort_key)


def allocate(requested, candidates, today: date | None = None) -> Allocation:
    """
    Plan which records satisfy `requested`.

    Args:
        requested: Quantity (or anything Quantity.positive accepts), > 0
        candidates: pool records of one item (warehouse, shelf or web)
        today: Reference date for expiry (default: local date)

    Returns:
        Allocation with the plan taken so far and the unfilled shortfall.
        Callers decide whether a shortfall is acceptable.

    Raises:
        ValidationError: requested is not positive, or candidates mix items
    """
    requested = Quantity.positive(requested)
    remaining = requested
    plan = []

    for record in eligible(candidates, today):
        if remaining.is_zero:
            break
        taken = remaining.min(record.available)
        plan.append(PlanEntry(record=record, quantity=taken))
        remaining = remaining - taken

    return Allocation(requested=requested, plan=tuple(plan), shortfall=remaining)


def available_quantity(candidates, today: date | None = None) -> Quantity:
    """Sum of what could be allocated right now."""
    result = Quantity.zero()
    for record in eligible(candidates, today):
        result = result + record.available
    return result
