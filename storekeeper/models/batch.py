"""
Batch model — a received lot of one item, with its own expiry.

Every pool row (warehouse, shelf, web) points at a Batch. The batch keeps the
received quantity forever and the quantity still in the store, which only
goes down when units are sold.

Usage:
    batch = Batch.objects.create(
        item_code="MILK-1L",
        batch_number="LOT-2026-0223-A",
        quantity_received=Decimal("100"),
        quantity_available=Decimal("100"),
        expiry_date=date.today() + timedelta(days=10),
        received_by="clerk",
    )
"""

from datetime import date

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class BatchQuerySet(models.QuerySet):
    """Custom QuerySet for Batch with convenience filters."""

    def for_item(self, item_code: str):
        return self.filter(item_code=item_code)

    def active(self):
        """Batches with units still in the store."""
        return self.filter(quantity_available__gt=0)

    def expiring_before(self, day: date):
        """Batches expiring on or before the given date."""
        return self.filter(expiry_date__lte=day, expiry_date__isnull=False)

    def expired(self, today: date | None = None):
        """Batches past their expiry date."""
        today = today or timezone.localdate()
        return self.filter(expiry_date__lt=today, expiry_date__isnull=False)


class Batch(models.Model):
    """
    Lot received into the warehouse.

    Invariants (checked by BatchRecord):
    - quantity_received > 0, never changes
    - 0 <= quantity_available <= quantity_received
    - expiry_date > manufacture_date when both are set
    """

    item_code = models.CharField(
        max_length=64,
        db_index=True,
        verbose_name=_('Item code'),
    )
    batch_number = models.CharField(
        max_length=64,
        verbose_name=_('Batch number'),
        help_text=_('Supplier or internal lot identifier.'),
    )

    quantity_received = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Quantity received'),
    )
    quantity_available = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Quantity available'),
        help_text=_('Units of this batch still in the store, across all pools.'),
    )

    manufacture_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Manufacture date'),
    )
    expiry_date = models.DateField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Expiry date'),
        help_text=_('Last day the batch may be sold.'),
    )

    received_at = models.DateTimeField(default=timezone.now, verbose_name=_('Received at'))
    received_by = models.CharField(max_length=150, verbose_name=_('Received by'))

    objects = BatchQuerySet.as_manager()

    class Meta:
        verbose_name = _('Batch')
        verbose_name_plural = _('Batches')
        ordering = ['item_code', 'received_at']
        constraints = [
            models.UniqueConstraint(
                fields=['item_code', 'batch_number'],
                name='storekeeper_batch_unique_number',
            ),
        ]

    @property
    def is_expired(self) -> bool:
        if self.expiry_date is None:
            return False
        return timezone.localdate() > self.expiry_date

    def __str__(self) -> str:
        expiry = f" (exp:{self.expiry_date})" if self.expiry_date else ""
        return f"{self.item_code} / {self.batch_number}{expiry}"
