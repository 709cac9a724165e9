"""
Enums for Storekeeper models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Pool(models.TextChoices):
    """
    Where a batch's units can be.

    WAREHOUSE: Received stock, not yet offered anywhere.
    SHELF:     In-store stock sold at the cash register.
    WEB:       Stock published to the online store.
    """
    WAREHOUSE = 'warehouse', _('Warehouse')
    SHELF = 'shelf', _('Shelf')
    WEB = 'web', _('Web')


class MoveReason(models.TextChoices):
    """Why units moved."""
    RECEIVE = 'receive', _('Received')
    TRANSFER_OUT = 'transfer_out', _('Transferred out')
    TRANSFER_IN = 'transfer_in', _('Transferred in')
    SALE = 'sale', _('Sold')


class Channel(models.TextChoices):
    """Sales channel of a transaction."""
    POS = 'pos', _('Point of sale')
    WEB = 'web', _('Online store')


class PaymentMethod(models.TextChoices):
    CASH = 'cash', _('Cash')
    CARD = 'card', _('Card')


class PromotionKind(models.TextChoices):
    """
    PERCENTAGE:   value is a percent of the gross line amount.
    FIXED_AMOUNT: value is taken off each unit.
    """
    PERCENTAGE = 'percentage', _('Percentage')
    FIXED_AMOUNT = 'fixed_amount', _('Fixed amount per unit')
