"""
Promotion-based discounts.

Looks up the active Promotion for an item, preferring one tied to the exact
batch being sold:
- PERCENTAGE:   gross × value / 100, rounded half-up to cents
- FIXED_AMOUNT: value × quantity
The result is clamped to [0, gross].

Usage in settings.py:
    STOREKEEPER = {
        "DISCOUNT_BACKEND": "storekeeper.adapters.promotions.PromotionDiscount",
    }
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.utils import timezone

from storekeeper.models.enums import PromotionKind
from storekeeper.models.promotion import Promotion
from storekeeper.values import Money, Quantity

logger = logging.getLogger('storekeeper')

HUNDRED = Decimal('100')


class PromotionDiscount:
    """DiscountBackend reading Promotion rows."""

    def find_promotion(self, item_id: str, batch_id: int | None, at=None) -> Promotion | None:
        return Promotion.objects.applicable(item_id, batch_id, at=at).first()

    def calculate_batch_discount(self, item_id: str, batch_id: int,
                                 unit_price: Money, quantity: Quantity) -> Money:
        gross = unit_price * quantity
        promotion = self.find_promotion(item_id, batch_id, at=timezone.now())
        if promotion is None:
            return Money.zero()

        if promotion.kind == PromotionKind.PERCENTAGE:
            amount = gross.value * promotion.value / HUNDRED
        else:
            amount = promotion.value * quantity.value

        # Clamp into [0, gross]
        amount = max(Decimal('0'), min(amount, gross.value))
        discount = Money(amount)

        logger.debug(
            "discount.promotion",
            extra={
                "promotion": promotion.code,
                "item_id": item_id,
                "batch_id": batch_id,
                "qty": str(quantity),
                "discount": str(discount),
            },
        )
        return discount
