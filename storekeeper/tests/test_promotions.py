"""
Tests for PromotionDiscount.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from storekeeper.adapters.promotions import PromotionDiscount
from storekeeper.models import Promotion, PromotionKind
from storekeeper.values import Money, Quantity

pytestmark = pytest.mark.django_db

PRICE = Money.parse('200')


def discount(batch_id=None, quantity=3, item_id='MILK-1L'):
    return PromotionDiscount().calculate_batch_discount(item_id, batch_id, PRICE, Quantity.parse(quantity))


def promo(code, kind=PromotionKind.PERCENTAGE, value='10', **kwargs):
    kwargs.setdefault('item_id', 'MILK-1L')
    return Promotion.objects.create(code=code, name=code, kind=kind, value=Decimal(value), **kwargs)


class TestPromotionDiscount:

    def test_no_promotion(self):
        assert discount() == Money.zero()

    def test_percentage_of_gross(self):
        promo('TEN')
        assert discount(quantity=3).value == Decimal('60.00')

    def test_percentage_rounds_half_up(self):
        promo('ODD', value='12.5')
        # 200 × 0.3 × 12.5% = 7.50
        assert discount(quantity='0.3').value == Decimal('7.50')

    def test_fixed_amount_per_unit(self):
        promo('OFF', kind=PromotionKind.FIXED_AMOUNT, value='15')
        assert discount(quantity=4).value == Decimal('60.00')

    def test_clamped_to_gross(self):
        promo('HUGE', kind=PromotionKind.FIXED_AMOUNT, value='500')
        assert discount(quantity=2).value == Decimal('400.00')

    def test_batch_specific_wins(self, receive):
        stock = receive('MILK-1L', 'LOT-A', 10)
        promo('ITEM', value='10')
        promo('BATCH', value='50', batch_id=stock.batch_id)

        assert discount(batch_id=stock.batch_id, quantity=1).value == Decimal('100.00')
        assert discount(batch_id=stock.batch_id + 1, quantity=1).value == Decimal('20.00')

    def test_inactive_and_out_of_window_are_ignored(self):
        now = timezone.now()
        promo('OFF', is_active=False)
        promo('LATER', starts_at=now + timedelta(days=1))
        promo('OVER', starts_at=now - timedelta(days=5), ends_at=now - timedelta(days=1))
        assert discount() == Money.zero()

    def test_other_items_are_ignored(self):
        promo('RICE', item_id='rice')
        assert discount() == Money.zero()
