"""
Storekeeper Admin — basic fallback (works without Unfold).

For the Unfold-styled version, add 'storekeeper.contrib.admin_unfold' to INSTALLED_APPS.
When the Unfold contrib is loaded, this module does nothing (avoids double registration).

Stock only changes through the services, so everything is read-only except
promotions:
- Batch, WarehouseStock, ShelfStock, WebInventory: read-only
- StockMove: read-only audit trail
- Sale: read-only with its lines inline
- Promotion: editable
"""

import logging

from django.apps import apps
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from storekeeper.exceptions import StoreError

logger = logging.getLogger(__name__)


class ReadOnlyAdminMixin:
    """No add, change or delete from the admin."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.action(description=_("Cancel selected reservations"))
def cancel_reservations(modeladmin, request, queryset):
    """Admin action shared by both admin flavours."""
    from storekeeper.services.receiving import StockReceiving

    count = 0
    for stock in queryset.filter(is_reserved=True):
        try:
            StockReceiving.cancel_reservation(stock.pk, user=request.user.get_username())
            count += 1
        except StoreError as exc:
            logger.warning("cancel_reservations: failed for %s: %s", stock.pk, exc)

    modeladmin.message_user(request, _('{count} reservation(s) cancelled.').format(count=count))


# Skip registration if the Unfold contrib is installed (it will register its own admins)
if not apps.is_installed('storekeeper.contrib.admin_unfold'):
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

    # =========================================================================
    # BATCH ADMIN
    # =========================================================================

    @admin.register(Batch)
    class BatchAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
        """Batch admin — lot traceability."""

        list_display = ['batch_number', 'item_code', 'quantity_received', 'quantity_available',
                        'expiry_date', 'received_at', 'is_expired_display']
        list_filter = ['expiry_date', 'received_at']
        search_fields = ['batch_number', 'item_code']
        date_hierarchy = 'received_at'

        @admin.display(description=_('Expired?'), boolean=True)
        def is_expired_display(self, obj):
            return obj.is_expired

    # =========================================================================
    # POOL ADMINS (read-only)
    # =========================================================================

    @admin.register(WarehouseStock)
    class WarehouseStockAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
        """Warehouse admin — read-only, with a cancel-reservation action."""

        list_display = ['item_code', 'batch', 'location', 'quantity_available',
                        'expiry_date', 'is_reserved', 'reserved_by']
        list_filter = ['location', 'is_reserved', 'expiry_date']
        search_fields = ['item_code', 'batch__batch_number']
        actions = [cancel_reservations]

    @admin.register(ShelfStock)
    class ShelfStockAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
        list_display = ['item_code', 'shelf_code', 'batch', 'quantity', 'unit_price',
                        'expiry_date', 'is_displayed', 'min_level', 'max_level']
        list_filter = ['shelf_code', 'is_displayed', 'expiry_date']
        search_fields = ['item_code', 'shelf_code', 'batch__batch_number']

    @admin.register(WebInventory)
    class WebInventoryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
        list_display = ['item_code', 'batch', 'quantity', 'web_price', 'stock_level',
                        'expiry_date', 'is_published', 'is_featured']
        list_filter = ['is_published', 'is_featured', 'expiry_date']
        search_fields = ['item_code', 'batch__batch_number']

    # =========================================================================
    # STOCK MOVE ADMIN (read-only audit trail)
    # =========================================================================

    @admin.register(StockMove)
    class StockMoveAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
        """StockMove admin — read-only. Immutable audit trail."""

        list_display = ['timestamp', 'item_code', 'pool', 'delta', 'reason', 'reference', 'user']
        list_filter = ['pool', 'reason', 'timestamp']
        search_fields = ['item_code', 'reference', 'user']
        date_hierarchy = 'timestamp'

    # =========================================================================
    # SALE ADMIN
    # =========================================================================

    class SaleLineInline(ReadOnlyAdminMixin, admin.TabularInline):
        model = SaleLine
        extra = 0
        fields = ['item_code', 'item_name', 'batch', 'quantity', 'unit_price', 'discount', 'line_total']
        readonly_fields = fields

    @admin.register(Sale)
    class SaleAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
        """Sale admin — completed checkouts, never edited."""

        list_display = ['number', 'channel', 'payment_method', 'net_total',
                        'discount_total', 'customer', 'created_by', 'created_at']
        list_filter = ['channel', 'payment_method', 'personal_purchase', 'created_at']
        search_fields = ['number', 'customer', 'created_by']
        date_hierarchy = 'created_at'
        inlines = [SaleLineInline]

    # =========================================================================
    # PROMOTION ADMIN
    # =========================================================================

    @admin.register(Promotion)
    class PromotionAdmin(admin.ModelAdmin):
        """Promotion admin — editable."""

        list_display = ['code', 'name', 'kind', 'value', 'item_id', 'batch',
                        'starts_at', 'ends_at', 'is_active']
        list_filter = ['kind', 'is_active']
        search_fields = ['code', 'name', 'item_id']
        raw_id_fields = ['batch']
