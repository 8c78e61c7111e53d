"""Domain models for data read from the ticketing API and derived locally.

These are pure domain objects with no API input rules.
The wizard's persisted state lives in booking/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime

from booking.domain.value_objects import (
    Capacity,
    EventId,
    EventPriceId,
    LoyaltyPoints,
    Money,
    Quantity,
    TicketId,
)


@dataclass(frozen=True)
class Venue:
    """Domain representation of a Venue."""

    id: str
    name: str
    location: str
    capacity: Capacity


@dataclass(frozen=True)
class EventPrice:
    """A ticket tier (e.g. VIP, General) with its own price and remaining stock."""

    id: EventPriceId
    event_id: EventId
    category: str
    price: Money
    stock: Capacity
    is_active: bool

    @property
    def is_available(self) -> bool:
        return self.is_active and self.stock.value > 0


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    description: str
    event_date: datetime | None
    category: str | None
    image_url: str | None
    is_published: bool
    venue: Venue | None = None
    prices: tuple[EventPrice, ...] = ()

    def find_price(self, price_id: EventPriceId) -> EventPrice | None:
        for price in self.prices:
            if price.id == price_id:
                return price
        return None


@dataclass(frozen=True)
class Ticket:
    """Server-owned booking record; only the fields the client reads."""

    id: TicketId
    event_id: EventId
    event_price_id: EventPriceId | None
    ticket_number: str | None
    ticket_code: str | None
    quantity: int
    total_amount: Money
    is_paid: bool
    purchase_date: datetime | None = None


@dataclass(frozen=True)
class BookingRequest:
    """Payload for creating a ticket on the ticketing API."""

    event_id: EventId
    event_price_id: EventPriceId
    quantity: Quantity
    discount_code: str | None = None
    use_loyalty_points: bool = False


@dataclass(frozen=True)
class BookingSummary:
    """Derived price breakdown; recomputed whenever quantity, points or promo change."""

    unit_price: Money
    quantity: int
    subtotal: Money
    discount: Money
    loyalty_points_used: LoyaltyPoints
    loyalty_points_earned: LoyaltyPoints
    total: Money


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of a payment attempt."""

    success: bool
    transaction_id: str | None
    amount: Money
    currency: str
    status: str


@dataclass(frozen=True)
class PaymentSessionStatus:
    """Status of a hosted checkout session."""

    session_id: str
    ticket_id: TicketId | None
    status: str
    is_paid: bool


@dataclass(frozen=True)
class LoyaltyBalance:
    """A customer's redeemable loyalty balance."""

    user_id: str | None
    balance: LoyaltyPoints
    discount_value: Money


@dataclass(frozen=True)
class TicketPage:
    """One page of the customer's ticket history."""

    items: tuple[Ticket, ...]
    page: int
    page_size: int
    total_count: int
    total_pages: int


@dataclass(frozen=True)
class TicketValidation:
    """Result of checking a ticket code at the door."""

    ticket_code: str
    is_valid: bool
    ticket: Ticket | None = None


@dataclass(frozen=True)
class LoyaltyTransaction:
    id: str
    points: LoyaltyPoints
    kind: str
    description: str
    occurred_at: datetime | None


@dataclass(frozen=True)
class LoyaltyHistory:
    """A customer's earned and redeemed points, newest first as sent upstream."""

    user_id: str | None
    entries: tuple[LoyaltyTransaction, ...]


@dataclass(frozen=True)
class PaymentRecord:
    """A past payment as listed in the customer's payment history."""

    id: str
    ticket_id: TicketId | None
    amount: Money
    currency: str
    status: str
    payment_method: str | None
    transaction_id: str | None
    created_at: datetime | None
