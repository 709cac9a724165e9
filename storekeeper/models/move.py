"""
StockMove model — Immutable ledger of pool quantity changes.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from storekeeper.models.enums import MoveReason, Pool


class StockMove(models.Model):
    """
    Immutable record of one pool row changing quantity.

    Rules:
    - NEVER update() or delete()
    - One move per pool row touched: a transfer writes two (out and in)
    - delta is signed: positive = into the pool, negative = out of it
    """

    batch = models.ForeignKey(
        'storekeeper.Batch',
        on_delete=models.PROTECT,
        related_name='moves',
        verbose_name=_('Batch'),
    )
    item_code = models.CharField(max_length=64, db_index=True, verbose_name=_('Item code'))

    pool = models.CharField(max_length=16, choices=Pool.choices, verbose_name=_('Pool'))
    record_id = models.PositiveBigIntegerField(
        verbose_name=_('Pool row'),
        help_text=_('Primary key of the warehouse, shelf or web row.'),
    )
    delta = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Delta'),
        help_text=_('Positive = in, Negative = out'),
    )
    reason = models.CharField(max_length=16, choices=MoveReason.choices, verbose_name=_('Reason'))
    reference = models.CharField(
        max_length=64,
        blank=True,
        default='',
        verbose_name=_('Reference'),
        help_text=_('Bill or order number, shelf code, etc.'),
    )
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))

    user = models.CharField(max_length=150, verbose_name=_('User'))
    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Timestamp'))

    class Meta:
        verbose_name = _('Stock move')
        verbose_name_plural = _('Stock moves')
        ordering = ['timestamp', 'pk']
        indexes = [
            models.Index(fields=['item_code', 'timestamp'], name='storekeeper_item_co_5a2c8e_idx'),
            models.Index(fields=['pool', 'record_id'], name='storekeeper_pool_7d41b3_idx'),
        ]

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValueError(
                "Stock moves are immutable. "
                "To correct one, record a new move with the inverse delta."
            )
        if not self.user:
            raise ValueError("User is required")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion — moves are immutable."""
        raise ValueError(
            "Stock moves are immutable. "
            "To reverse one, record a new move with the inverse delta."
        )

    def __str__(self) -> str:
        signal = '+' if self.delta > 0 else ''
        return f"{self.pool} {signal}{self.delta} | {self.get_reason_display()}"
