"""
Storekeeper Admin with Unfold theme.

This module provides Unfold-styled admin classes for Storekeeper models.
To use, add 'storekeeper.contrib.admin_unfold' to INSTALLED_APPS after 'storekeeper'.

The admins will automatically register the Unfold versions.
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from unfold.decorators import display

from storekeeper.admin import cancel_reservations
from storekeeper.contrib.admin_unfold.base import (
    BaseModelAdmin,
    BaseTabularInline,
    format_date,
    format_datetime,
    format_money,
    format_quantity,
)
from storekeeper.models import (
    Batch,
    Promotion,
    Sale,
    SaleLine,
    ShelfStock,
    StockMove,
    WarehouseStock,
    WebInventory,
)
from storekeeper.records import WEB_LOW_STOCK_LEVEL

logger = logging.getLogger(__name__)


# =============================================================================
# BATCH ADMIN
# =============================================================================


@admin.register(Batch)
class BatchAdmin(BaseModelAdmin):
    """Admin for Batch model (read-only)."""

    list_display = ['batch_number', 'item_code', 'received_display', 'available_display',
                    'expiry_date_display', 'status_display']
    list_filter = ['expiry_date', 'received_at']
    search_fields = ['batch_number', 'item_code']
    date_hierarchy = 'received_at'

    @display(description=_('Received'))
    def received_display(self, obj):
        return format_quantity(obj.quantity_received)

    @display(description=_('In store'))
    def available_display(self, obj):
        return format_quantity(obj.quantity_available)

    @display(description=_('Expiry'))
    def expiry_date_display(self, obj):
        return format_date(obj.expiry_date)

    @display(description=_('Status'), label={'EXPIRED': 'danger', 'VALID': 'success', 'SOLD OUT': 'info'})
    def status_display(self, obj):
        if obj.is_expired:
            return 'EXPIRED'
        if obj.quantity_available == 0:
            return 'SOLD OUT'
        return 'VALID'


# =============================================================================
# POOL ADMINS
# =============================================================================


@admin.register(WarehouseStock)
class WarehouseStockAdmin(BaseModelAdmin):
    """Admin for WarehouseStock (read-only, cancel-reservation action)."""

    list_display = ['item_code', 'batch', 'location', 'available_display',
                    'expiry_date_display', 'reservation_display']
    list_filter = ['location', 'is_reserved', 'expiry_date']
    search_fields = ['item_code', 'batch__batch_number']
    actions = [cancel_reservations]

    @display(description=_('Available'))
    def available_display(self, obj):
        return format_quantity(obj.quantity_available)

    @display(description=_('Expiry'))
    def expiry_date_display(self, obj):
        return format_date(obj.expiry_date)

    @display(description=_('Reservation'), label={'RESERVED': 'warning', 'FREE': 'success'})
    def reservation_display(self, obj):
        return 'RESERVED' if obj.is_reserved else 'FREE'


@admin.register(ShelfStock)
class ShelfStockAdmin(BaseModelAdmin):
    """Admin for ShelfStock (read-only)."""

    list_display = ['item_code', 'shelf_code', 'batch', 'quantity_display', 'price_display',
                    'expiry_date_display', 'is_displayed', 'restock_display']
    list_filter = ['shelf_code', 'is_displayed', 'expiry_date']
    search_fields = ['item_code', 'shelf_code', 'batch__batch_number']

    @display(description=_('On shelf'))
    def quantity_display(self, obj):
        return format_quantity(obj.quantity)

    @display(description=_('Price'))
    def price_display(self, obj):
        return format_money(obj.unit_price)

    @display(description=_('Expiry'))
    def expiry_date_display(self, obj):
        return format_date(obj.expiry_date)

    @display(description=_('Restock?'), label={'RESTOCK': 'warning', 'OK': 'success'})
    def restock_display(self, obj):
        if obj.min_level is not None and obj.quantity < obj.min_level:
            return 'RESTOCK'
        return 'OK'


@admin.register(WebInventory)
class WebInventoryAdmin(BaseModelAdmin):
    """Admin for WebInventory (read-only)."""

    list_display = ['item_code', 'batch', 'quantity_display', 'price_display',
                    'level_display', 'expiry_date_display', 'is_published', 'is_featured']
    list_filter = ['is_published', 'is_featured', 'expiry_date']
    search_fields = ['item_code', 'batch__batch_number']

    @display(description=_('Available'))
    def quantity_display(self, obj):
        return format_quantity(obj.quantity)

    @display(description=_('Price'))
    def price_display(self, obj):
        return format_money(obj.web_price)

    @display(description=_('Expiry'))
    def expiry_date_display(self, obj):
        return format_date(obj.expiry_date)

    @display(description=_('Stock level'), label={'LOW': 'danger', 'OK': 'success'})
    def level_display(self, obj):
        return 'LOW' if obj.stock_level <= WEB_LOW_STOCK_LEVEL else 'OK'


# =============================================================================
# STOCK MOVE ADMIN
# =============================================================================


@admin.register(StockMove)
class StockMoveAdmin(BaseModelAdmin):
    """Admin for StockMove (read-only audit trail)."""

    list_display = ['timestamp_display', 'item_code', 'pool', 'delta_display',
                    'reason', 'reference', 'user']
    list_filter = ['pool', 'reason', 'timestamp']
    search_fields = ['item_code', 'reference', 'user']
    date_hierarchy = 'timestamp'

    @display(description=_('Timestamp'))
    def timestamp_display(self, obj):
        return format_datetime(obj.timestamp)

    @display(description=_('Delta'), label=True)
    def delta_display(self, obj):
        formatted = format_quantity(abs(obj.delta))
        return f'+{formatted}' if obj.delta > 0 else f'-{formatted}'


# =============================================================================
# SALE ADMIN
# =============================================================================


class SaleLineInline(BaseTabularInline):
    model = SaleLine
    fields = ['item_code', 'item_name', 'batch', 'quantity', 'unit_price', 'discount', 'line_total']
    readonly_fields = fields


@admin.register(Sale)
class SaleAdmin(BaseModelAdmin):
    """Admin for Sale (read-only, lines inline)."""

    list_display = ['number', 'channel_display', 'payment_method', 'net_display',
                    'discount_display', 'customer', 'created_by', 'created_at_display']
    list_filter = ['channel', 'payment_method', 'personal_purchase', 'created_at']
    search_fields = ['number', 'customer', 'created_by']
    date_hierarchy = 'created_at'
    inlines = [SaleLineInline]

    @display(description=_('Channel'), label={'POS': 'info', 'WEB': 'success'})
    def channel_display(self, obj):
        return obj.channel.upper()

    @display(description=_('Net total'))
    def net_display(self, obj):
        return format_money(obj.net_total)

    @display(description=_('Discount'))
    def discount_display(self, obj):
        return format_money(obj.discount_total)

    @display(description=_('Created'))
    def created_at_display(self, obj):
        return format_datetime(obj.created_at)


# =============================================================================
# PROMOTION ADMIN
# =============================================================================


@admin.register(Promotion)
class PromotionAdmin(BaseModelAdmin):
    """Admin for Promotion (editable)."""

    editable = True
    warn_unsaved_form = True

    list_display = ['code', 'name', 'kind', 'value', 'item_id', 'batch',
                    'starts_at_display', 'ends_at_display', 'is_active']
    list_filter = ['kind', 'is_active']
    search_fields = ['code', 'name', 'item_id']
    raw_id_fields = ['batch']

    @display(description=_('Starts'))
    def starts_at_display(self, obj):
        return format_datetime(obj.starts_at)

    @display(description=_('Ends'))
    def ends_at_display(self, obj):
        return format_datetime(obj.ends_at)
