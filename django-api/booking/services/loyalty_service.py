"""Loyalty service - balance lookups and redemption quotes."""

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from booking.domain import LoyaltyBalance, LoyaltyHistory, LoyaltyPoints, Money
from booking.domain import pricing
from booking.domain.wizard import BookingState
from booking.stores.interfaces import TicketingApi


@dataclass(frozen=True)
class LoyaltyQuote:
    """How many points a customer may put towards a booking."""

    balance: LoyaltyPoints
    amount: Money
    max_redeemable: LoyaltyPoints
    selected: LoyaltyPoints


class LoyaltyService:
    """Service for loyalty point reads."""

    def __init__(self, api: TicketingApi, cap_rate: Decimal | None = None) -> None:
        self._api = api
        self._cap_rate = (
            cap_rate
            if cap_rate is not None
            else Decimal(settings.BOOKING["LOYALTY_REDEMPTION_CAP"])
        )

    def get_balance(self) -> LoyaltyBalance:
        return self._api.get_loyalty_balance()

    def get_history(self) -> LoyaltyHistory:
        return self._api.get_loyalty_history()

    def quote(self, state: BookingState) -> LoyaltyQuote:
        """Redemption limit for a booking: the smaller of the balance and the cap."""
        balance = self._api.get_loyalty_balance().balance
        amount = state.discounted_amount()
        return LoyaltyQuote(
            balance=balance,
            amount=amount,
            max_redeemable=pricing.max_redeemable_points(amount, balance, self._cap_rate),
            selected=state.loyalty_points,
        )
