"""
Sale models — durable record of a completed checkout.

A Sale (header) and its SaleLines are written once, in the same transaction
as the stock decrement, and never changed afterwards. Voids and returns are
not supported.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from storekeeper.models.enums import Channel, PaymentMethod


class SaleQuerySet(models.QuerySet):

    def pos(self):
        return self.filter(channel=Channel.POS)

    def web(self):
        return self.filter(channel=Channel.WEB)

    def for_customer(self, customer: str):
        return self.filter(channel=Channel.WEB, customer=customer)


class _WriteOnce:
    """Mixin refusing updates and deletes."""

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValueError(f"{type(self).__name__} records are never modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError(f"{type(self).__name__} records are never deleted.")


class Sale(_WriteOnce, models.Model):
    """
    Transaction header.

    number is sequential per channel: bill number for POS, order number for
    the web store.
    """

    channel = models.CharField(max_length=8, choices=Channel.choices, verbose_name=_('Channel'))
    number = models.PositiveIntegerField(verbose_name=_('Number'))
    payment_method = models.CharField(
        max_length=8, choices=PaymentMethod.choices, verbose_name=_('Payment method'),
    )

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, verbose_name=_('Subtotal'))
    discount_total = models.DecimalField(max_digits=14, decimal_places=2, verbose_name=_('Discount'))
    net_total = models.DecimalField(max_digits=14, decimal_places=2, verbose_name=_('Net total'))

    # Cash sales
    cash_tendered = models.DecimalField(
        max_digits=14, decimal_places=2, null=True, blank=True, verbose_name=_('Cash tendered'),
    )
    change = models.DecimalField(
        max_digits=14, decimal_places=2, null=True, blank=True, verbose_name=_('Change'),
    )
    personal_purchase = models.BooleanField(default=False, verbose_name=_('Personal purchase'))

    # Card sales
    customer = models.CharField(max_length=150, blank=True, default='', db_index=True, verbose_name=_('Customer'))
    card_last4 = models.CharField(max_length=4, blank=True, default='', verbose_name=_('Card (last 4)'))

    created_by = models.CharField(max_length=150, verbose_name=_('Created by'))
    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Created at'))

    objects = SaleQuerySet.as_manager()

    class Meta:
        verbose_name = _('Sale')
        verbose_name_plural = _('Sales')
        ordering = ['-created_at', '-number']
        constraints = [
            models.UniqueConstraint(
                fields=['channel', 'number'],
                name='storekeeper_sale_unique_number',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_channel_display()} #{self.number}: {self.net_total}"


class SaleLine(_WriteOnce, models.Model):
    """One (item, batch) allocation of a sale."""

    sale = models.ForeignKey(
        Sale,
        on_delete=models.PROTECT,
        related_name='lines',
        verbose_name=_('Sale'),
    )
    batch = models.ForeignKey(
        'storekeeper.Batch',
        on_delete=models.PROTECT,
        related_name='sale_lines',
        verbose_name=_('Batch'),
    )
    item_code = models.CharField(max_length=64, verbose_name=_('Item code'))
    item_id = models.CharField(max_length=64, verbose_name=_('Catalog item id'))
    item_name = models.CharField(max_length=200, verbose_name=_('Item name'))

    quantity = models.DecimalField(max_digits=12, decimal_places=3, verbose_name=_('Quantity'))
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_('Unit price'))
    discount = models.DecimalField(max_digits=14, decimal_places=2, default=0, verbose_name=_('Discount'))
    line_total = models.DecimalField(
        max_digits=14, decimal_places=2,
        verbose_name=_('Line total'),
        help_text=_('unit price × quantity − discount'),
    )

    class Meta:
        verbose_name = _('Sale line')
        verbose_name_plural = _('Sale lines')
        ordering = ['sale', 'pk']

    def __str__(self) -> str:
        return f"{self.item_code} x{self.quantity} @ {self.unit_price}"


class SaleCounter(models.Model):
    """
    Last number handed out per channel.

    Locked with SELECT ... FOR UPDATE while a sale is numbered, so concurrent
    checkouts of one channel take numbers one after another.
    """

    channel = models.CharField(max_length=8, choices=Channel.choices, unique=True, verbose_name=_('Channel'))
    last_number = models.PositiveIntegerField(default=0, verbose_name=_('Last number'))

    class Meta:
        verbose_name = _('Sale counter')
        verbose_name_plural = _('Sale counters')

    def __str__(self) -> str:
        return f"{self.get_channel_display()}: {self.last_number}"
