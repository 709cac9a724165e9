"""
Base classes for Unfold admin in Storekeeper.

Provides BaseModelAdmin / BaseTabularInline (read-only by default, since
stock only changes through the services) and display formatting helpers.
"""

from decimal import Decimal

from django import forms
from django.contrib.admin.widgets import AdminTextareaWidget
from unfold.admin import ModelAdmin, TabularInline
from unfold.widgets import UnfoldAdminTextareaWidget


def format_quantity(value: Decimal | None) -> str:
    """
    Format a stock quantity without trailing zeros.

    Returns:
        Formatted string (e.g., "10", "2.5") or "-" for None
    """
    if value is None:
        return "-"
    return format(value.normalize(), "f")


def format_money(value: Decimal | None) -> str:
    """Two decimal places, or "-" for None."""
    if value is None:
        return "-"
    return f"{value:.2f}"


def format_datetime(dt) -> str:
    """Format datetime as YYYY-MM-DD HH:MM."""
    if dt:
        return dt.strftime('%Y-%m-%d %H:%M')
    return '-'


def format_date(d) -> str:
    if d:
        return d.strftime('%Y-%m-%d')
    return '-'


def _shrink_textareas(fields) -> None:
    # JSON metadata and notes: half height
    for field in fields.values():
        widget = field.widget
        if isinstance(widget, (forms.Textarea, AdminTextareaWidget, UnfoldAdminTextareaWidget)):
            try:
                rows = int(widget.attrs.get("rows", 4))
            except (ValueError, TypeError):
                rows = 4
            widget.attrs["rows"] = max(1, rows // 2)


class BaseTabularInline(TabularInline):
    """Read-only TabularInline with compact text widgets."""

    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def get_formset(self, request, obj=None, **kwargs):
        formset = super().get_formset(request, obj, **kwargs)
        _shrink_textareas(formset.form.base_fields)
        return formset


class BaseModelAdmin(ModelAdmin):
    """
    ModelAdmin base for Storekeeper records.

    Read-only unless a subclass sets `editable = True`.
    """

    editable = False
    compressed_fields = True

    def has_add_permission(self, request):
        return self.editable and super().has_add_permission(request)

    def has_change_permission(self, request, obj=None):
        return self.editable and super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        return self.editable and super().has_delete_permission(request, obj)

    def get_form(self, request, obj=None, **kwargs):
        form = super().get_form(request, obj, **kwargs)
        _shrink_textareas(form.base_fields)
        return form
