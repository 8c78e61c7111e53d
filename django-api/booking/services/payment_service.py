"""Payment service - the customer's payment history."""

from booking.domain import PaymentRecord
from booking.stores.interfaces import TicketingApi


class PaymentService:
    def __init__(self, api: TicketingApi) -> None:
        self._api = api

    def history(self) -> list[PaymentRecord]:
        return self._api.get_payment_history()
