"""
Ledger — StockMove rows for every pool change.

Called by the services inside their transaction, right after the pool row was
saved, so a rolled-back operation leaves no move behind.
"""

from django.db import DatabaseError

from storekeeper.exceptions import PersistenceError
from storekeeper.models.move import StockMove


def record_move(record, delta, reason, user, reference='', **metadata) -> StockMove:
    """
    Append one move for a pool record.

    Args:
        record: Saved warehouse, shelf or web record (must have an id)
        delta: Signed Decimal, positive = into the pool
        reason: MoveReason value
        user: Acting user
        reference: Bill/order number, shelf code, ...
    """
    try:
        return StockMove.objects.create(
            batch_id=record.batch_id,
            item_code=record.item_code,
            pool=record.pool,
            record_id=record.id,
            delta=delta,
            reason=reason,
            reference=str(reference),
            metadata=metadata,
            user=user,
        )
    except DatabaseError as e:
        raise PersistenceError(
            model='StockMove', item_code=record.item_code, batch_id=record.batch_id, error=str(e),
        ) from e
