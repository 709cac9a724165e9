"""
Pool models — per-batch quantity ledgers for warehouse, shelf and web.

Rows are never deleted: a row whose quantity reached zero is retired and kept
for history. Quantities only change through the services, which go through
the immutable records in storekeeper.records and log a StockMove per change.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class PoolQuerySet(models.QuerySet):
    """Filters shared by the three pools."""

    quantity_field = 'quantity'

    def for_item(self, item_code: str):
        return self.filter(item_code=item_code)

    def in_stock(self):
        return self.filter(**{f'{self.quantity_field}__gt': 0})

    def unexpired(self, today=None):
        today = today or timezone.localdate()
        return self.filter(
            models.Q(expiry_date__isnull=True) | models.Q(expiry_date__gte=today)
        )


class WarehouseQuerySet(PoolQuerySet):
    quantity_field = 'quantity_available'

    def available(self, today=None):
        """Positive, unexpired and not reserved."""
        return self.in_stock().unexpired(today).filter(is_reserved=False)


class ShelfQuerySet(PoolQuerySet):

    def available(self, today=None):
        """Positive, unexpired and on display."""
        return self.in_stock().unexpired(today).filter(is_displayed=True)

    def needing_restock(self):
        return self.filter(min_level__isnull=False, quantity__lt=models.F('min_level'))


class WebQuerySet(PoolQuerySet):

    def available(self, today=None):
        """Positive, unexpired and published."""
        return self.in_stock().unexpired(today).filter(is_published=True)


class WarehouseStock(models.Model):
    """Units of one batch held in the warehouse."""

    batch = models.ForeignKey(
        'storekeeper.Batch',
        on_delete=models.PROTECT,
        related_name='warehouse_stock',
        verbose_name=_('Batch'),
    )
    item_code = models.CharField(max_length=64, db_index=True, verbose_name=_('Item code'))
    location = models.CharField(
        max_length=64,
        default='MAIN-WAREHOUSE',
        verbose_name=_('Location'),
    )

    quantity_received = models.DecimalField(
        max_digits=12, decimal_places=3, verbose_name=_('Quantity received'),
    )
    quantity_available = models.DecimalField(
        max_digits=12, decimal_places=3, verbose_name=_('Quantity available'),
    )
    expiry_date = models.DateField(null=True, blank=True, verbose_name=_('Expiry date'))

    received_at = models.DateTimeField(default=timezone.now, verbose_name=_('Received at'))
    received_by = models.CharField(max_length=150, verbose_name=_('Received by'))

    # Reservation: one at a time
    is_reserved = models.BooleanField(default=False, verbose_name=_('Reserved'))
    reserved_by = models.CharField(max_length=150, blank=True, default='', verbose_name=_('Reserved by'))
    reserved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Reserved at'))

    updated_by = models.CharField(max_length=150, verbose_name=_('Updated by'))
    updated_at = models.DateTimeField(default=timezone.now, verbose_name=_('Updated at'))

    objects = WarehouseQuerySet.as_manager()

    class Meta:
        verbose_name = _('Warehouse stock')
        verbose_name_plural = _('Warehouse stock')
        ordering = ['item_code', 'received_at']
        indexes = [
            models.Index(fields=['item_code', 'is_reserved'], name='storekeeper_item_co_0b6f1d_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.item_code} @ {self.location}: {self.quantity_available}"


class ShelfStock(models.Model):
    """Units of one batch on a store shelf."""

    batch = models.ForeignKey(
        'storekeeper.Batch',
        on_delete=models.PROTECT,
        related_name='shelf_stock',
        verbose_name=_('Batch'),
    )
    item_code = models.CharField(max_length=64, db_index=True, verbose_name=_('Item code'))
    shelf_code = models.CharField(max_length=64, verbose_name=_('Shelf code'))

    quantity = models.DecimalField(max_digits=12, decimal_places=3, verbose_name=_('Quantity on shelf'))
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_('Unit price'))
    expiry_date = models.DateField(null=True, blank=True, verbose_name=_('Expiry date'))

    is_displayed = models.BooleanField(default=True, verbose_name=_('Displayed'))
    display_position = models.CharField(max_length=64, blank=True, default='', verbose_name=_('Display position'))
    min_level = models.DecimalField(
        max_digits=12, decimal_places=3, null=True, blank=True,
        verbose_name=_('Minimum level'),
        help_text=_('Below this the shelf needs restocking.'),
    )
    max_level = models.DecimalField(
        max_digits=12, decimal_places=3, null=True, blank=True,
        verbose_name=_('Maximum level'),
        help_text=_('Restocking and transfers cannot go above this.'),
    )

    placed_at = models.DateTimeField(default=timezone.now, verbose_name=_('Placed at'))
    placed_by = models.CharField(max_length=150, verbose_name=_('Placed by'))
    updated_by = models.CharField(max_length=150, verbose_name=_('Updated by'))
    updated_at = models.DateTimeField(default=timezone.now, verbose_name=_('Updated at'))

    objects = ShelfQuerySet.as_manager()

    class Meta:
        verbose_name = _('Shelf stock')
        verbose_name_plural = _('Shelf stock')
        ordering = ['item_code', 'placed_at']
        constraints = [
            models.UniqueConstraint(
                fields=['batch', 'shelf_code'],
                name='storekeeper_shelf_unique_batch',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.item_code} @ {self.shelf_code}: {self.quantity}"


class WebInventory(models.Model):
    """Units of one batch published to the online store."""

    batch = models.OneToOneField(
        'storekeeper.Batch',
        on_delete=models.PROTECT,
        related_name='web_inventory',
        verbose_name=_('Batch'),
    )
    item_code = models.CharField(max_length=64, db_index=True, verbose_name=_('Item code'))

    quantity = models.DecimalField(max_digits=12, decimal_places=3, verbose_name=_('Quantity available'))
    web_price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_('Web price'))
    expiry_date = models.DateField(null=True, blank=True, verbose_name=_('Expiry date'))

    is_published = models.BooleanField(default=True, verbose_name=_('Published'))
    is_featured = models.BooleanField(default=False, verbose_name=_('Featured'))
    stock_level = models.PositiveSmallIntegerField(
        default=50,
        verbose_name=_('Stock level'),
        help_text=_('Display indicator, 0 to 100.'),
    )

    added_at = models.DateTimeField(default=timezone.now, verbose_name=_('Added at'))
    added_by = models.CharField(max_length=150, verbose_name=_('Added by'))
    updated_by = models.CharField(max_length=150, verbose_name=_('Updated by'))
    updated_at = models.DateTimeField(default=timezone.now, verbose_name=_('Updated at'))

    objects = WebQuerySet.as_manager()

    class Meta:
        verbose_name = _('Web inventory')
        verbose_name_plural = _('Web inventory')
        ordering = ['item_code', 'added_at']

    def __str__(self) -> str:
        return f"{self.item_code} (web): {self.quantity}"
