"""
Pytest fixtures for Storekeeper tests.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from storekeeper.adapters import StaticCatalog, reset_backends
from storekeeper.repositories import ShelfRepository, WarehouseRepository, WebRepository
from storekeeper.services import StockReceiving, TransferCoordinator


@pytest.fixture(autouse=True)
def catalog():
    """Static catalog with a cheap perishable and an expensive staple."""
    StaticCatalog.clear()
    reset_backends()
    StaticCatalog.register('MILK-1L', 'Milk 1L', '200.00')
    StaticCatalog.register('RICE-5KG', 'Rice 5kg', '1000.00', item_id='rice')
    yield StaticCatalog()
    StaticCatalog.clear()
    reset_backends()


@pytest.fixture
def today():
    """Return today's date."""
    return timezone.localdate()


@pytest.fixture
def clerk():
    return 'clerk'


@pytest.fixture
def receive(db, clerk, today):
    """
    Receive a batch: receive('MILK-1L', 'LOT-A', 10, expires_in=5).

    expires_in=None receives a batch without expiry.
    """
    def _receive(item_code, batch_number, quantity, expires_in=None, **kwargs):
        expiry = None if expires_in is None else today + timedelta(days=expires_in)
        return StockReceiving.receive(
            item_code, batch_number, Decimal(str(quantity)), clerk,
            expiry_date=expiry, **kwargs,
        )
    return _receive


@pytest.fixture
def coordinator(db):
    return TransferCoordinator()


@pytest.fixture
def milk_on_shelf(receive, coordinator, clerk):
    """
    Milk on shelf A-01: batch A (3 units, expires in 10 days) and batch B
    (5 units, expires in 5 days).
    """
    a = receive('MILK-1L', 'LOT-A', 3, expires_in=10)
    b = receive('MILK-1L', 'LOT-B', 5, expires_in=5)
    coordinator.transfer_to_shelf('MILK-1L', 'A-01', 8, clerk)
    return {'A': a.batch_id, 'B': b.batch_id}


@pytest.fixture
def rice_on_shelf(receive, coordinator, clerk):
    """Twenty bags of rice (no expiry) on shelf B-02."""
    stock = receive('RICE-5KG', 'RICE-1', 20)
    coordinator.transfer_to_shelf('RICE-5KG', 'B-02', 20, clerk)
    return stock.batch_id


@pytest.fixture
def milk_on_web(receive, coordinator, clerk):
    """Ten units of milk published to the web store."""
    stock = receive('MILK-1L', 'LOT-W', 10, expires_in=8)
    coordinator.transfer_to_web('MILK-1L', 10, clerk)
    return stock.batch_id


@pytest.fixture
def warehouse_repo():
    return WarehouseRepository()


@pytest.fixture
def shelf_repo():
    return ShelfRepository()


@pytest.fixture
def web_repo():
    return WebRepository()


@pytest.fixture
def shelf_quantities(shelf_repo):
    """shelf_quantities('MILK-1L') -> {batch_id: Decimal}."""
    def _quantities(item_code):
        return {
            record.batch_id: record.quantity.value
            for record in shelf_repo.find_by_item_code(item_code)
        }
    return _quantities
