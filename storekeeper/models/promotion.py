"""
Promotion model — discounts for an item, optionally for one batch only.

Used by adapters.promotions.PromotionDiscount. A batch-specific promotion wins
over an item-wide one.
"""

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from storekeeper.models.enums import PromotionKind


class PromotionQuerySet(models.QuerySet):

    def active(self, at=None):
        """Enabled promotions whose window contains `at` (default: now)."""
        at = at or timezone.now()
        return self.filter(is_active=True, starts_at__lte=at).filter(
            Q(ends_at__isnull=True) | Q(ends_at__gte=at)
        )

    def applicable(self, item_id, batch_id=None, at=None):
        """Active promotions for an item, batch-specific ones first."""
        qs = self.active(at).filter(item_id=str(item_id))
        if batch_id is None:
            qs = qs.filter(batch__isnull=True)
        else:
            qs = qs.filter(Q(batch__isnull=True) | Q(batch_id=batch_id))
        return qs.order_by(
            models.F('batch').asc(nulls_last=True),
            '-starts_at',
            'pk',
        )


class Promotion(models.Model):
    code = models.CharField(max_length=32, unique=True, verbose_name=_('Code'))
    name = models.CharField(max_length=200, verbose_name=_('Name'))

    kind = models.CharField(max_length=16, choices=PromotionKind.choices, verbose_name=_('Kind'))
    value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        verbose_name=_('Value'),
        help_text=_('Percent (0-100) or amount per unit, depending on kind.'),
    )

    item_id = models.CharField(max_length=64, db_index=True, verbose_name=_('Catalog item id'))
    batch = models.ForeignKey(
        'storekeeper.Batch',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='promotions',
        verbose_name=_('Batch'),
        help_text=_('Leave empty to apply to every batch of the item.'),
    )

    starts_at = models.DateTimeField(default=timezone.now, verbose_name=_('Starts at'))
    ends_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Ends at'))
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))

    objects = PromotionQuerySet.as_manager()

    class Meta:
        verbose_name = _('Promotion')
        verbose_name_plural = _('Promotions')
        ordering = ['-starts_at']

    def __str__(self) -> str:
        return f"{self.code} ({self.get_kind_display()} {self.value})"
