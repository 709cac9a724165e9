"""
Card payment policy for web checkout.

There is no payment gateway. SimulatedCardPolicy checks the card number's
shape and declines exactly one configured number, so tests and demos can
exercise the declined path deterministically.
"""

import re

from storekeeper.conf import storekeeper_settings
from storekeeper.exceptions import PaymentDeclinedError, ValidationError

CARD_NUMBER = re.compile(r'[0-9]{16}')


class SimulatedCardPolicy:
    """Accepts any 16-digit number except DECLINED_CARD_NUMBER."""

    def __init__(self, declined_number: str | None = None):
        self._declined_number = declined_number

    @property
    def declined_number(self) -> str:
        return self._declined_number or storekeeper_settings.DECLINED_CARD_NUMBER

    def validate(self, card_number) -> str:
        """
        Raises:
            ValidationError('INVALID_CARD'): not exactly 16 digits
        """
        number = '' if card_number is None else str(card_number).strip()
        if not CARD_NUMBER.fullmatch(number):
            raise ValidationError('INVALID_CARD')
        return number

    def authorize(self, card_number, amount) -> str:
        """
        Approve a charge; returns the last four digits.

        Raises:
            ValidationError('INVALID_CARD')
            PaymentDeclinedError: the simulated decline number
        """
        number = self.validate(card_number)
        if number == self.declined_number:
            raise PaymentDeclinedError(card_last4=number[-4:], amount=amount.value)
        return number[-4:]
