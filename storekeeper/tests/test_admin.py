"""
Tests for the fallback admin.
"""

from types import SimpleNamespace
from unittest import mock

import pytest
from django.contrib import admin

from storekeeper.admin import cancel_reservations
from storekeeper.models import Batch, Promotion, Sale, ShelfStock, StockMove, WarehouseStock, WebInventory
from storekeeper.services import StockReceiving

pytestmark = pytest.mark.django_db


def test_models_are_registered():
    for model in (Batch, WarehouseStock, ShelfStock, WebInventory, StockMove, Sale, Promotion):
        assert admin.site.is_registered(model)


def test_stock_admins_are_read_only(rf):
    request = rf.get('/')
    for model in (Batch, WarehouseStock, StockMove, Sale):
        model_admin = admin.site._registry[model]
        assert not model_admin.has_add_permission(request)
        assert not model_admin.has_delete_permission(request)


def test_cancel_reservations_action(receive):
    reserved = receive('MILK-1L', 'LOT-1', 10)
    free = receive('MILK-1L', 'LOT-2', 10)
    StockReceiving.reserve(reserved.id, 2, 'manager')

    model_admin = mock.Mock()
    request = SimpleNamespace(user=SimpleNamespace(get_username=lambda: 'supervisor'))
    cancel_reservations(model_admin, request, WarehouseStock.objects.filter(pk__in=[reserved.id, free.id]))

    row = WarehouseStock.objects.get(pk=reserved.id)
    assert not row.is_reserved
    assert row.updated_by == 'supervisor'
    model_admin.message_user.assert_called_once()
