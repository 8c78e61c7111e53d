"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date

from booking.domain import (
    BookingId,
    BookingRequest,
    Event,
    EventId,
    LoyaltyBalance,
    LoyaltyHistory,
    LoyaltyPoints,
    PaymentRecord,
    PaymentResult,
    PaymentSessionStatus,
    Ticket,
    TicketId,
    TicketPage,
    TicketValidation,
)
from booking.domain.wizard import BookingState


@dataclass(frozen=True)
class EventFilters:
    """Optional filters for the event listing."""

    from_date: date | None = None
    to_date: date | None = None
    venue: str | None = None
    keyword: str | None = None
    category: str | None = None

    def cache_key(self) -> str:
        parts = [
            self.from_date.isoformat() if self.from_date else "",
            self.to_date.isoformat() if self.to_date else "",
            self.venue or "",
            self.keyword or "",
            self.category or "",
        ]
        return ":".join(parts)


class TicketingApi(ABC):
    """Interface for the remote ticketing platform."""

    def close(self) -> None:
        """Release any held connections."""

    @abstractmethod
    def list_events(self, filters: EventFilters | None = None) -> list[Event]:
        """Return published events matching the filters."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event with its price tiers, or None if not found."""
        ...

    @abstractmethod
    def book_ticket(self, request: BookingRequest, idempotency_key: str) -> Ticket:
        """Create an unpaid ticket for the request."""
        ...

    @abstractmethod
    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        """Return a ticket by ID, or None if not found."""
        ...

    @abstractmethod
    def get_ticket_history(self, page: int, page_size: int) -> TicketPage:
        """Return one page of the calling customer's tickets."""
        ...

    @abstractmethod
    def validate_ticket(self, ticket_code: str) -> TicketValidation:
        """Check whether a ticket code admits entry."""
        ...

    @abstractmethod
    def apply_promotion(self, ticket_id: TicketId, discount_code: str) -> Ticket:
        """Apply a discount code to a ticket and return the repriced ticket."""
        ...

    @abstractmethod
    def use_loyalty_points(self, ticket_id: TicketId, points: LoyaltyPoints) -> Ticket:
        """Redeem loyalty points against a ticket and return the repriced ticket."""
        ...

    @abstractmethod
    def get_ticket_qr_code(self, ticket_id: TicketId) -> bytes:
        """Return the PNG bytes of a paid ticket's QR code."""
        ...

    @abstractmethod
    def process_payment(
        self, ticket_id: TicketId, payment_method: str | None, payment_token: str | None
    ) -> PaymentResult:
        """Charge the ticket's outstanding total."""
        ...

    @abstractmethod
    def get_session_status(self, session_id: str) -> PaymentSessionStatus:
        """Return the state of a hosted checkout session."""
        ...

    @abstractmethod
    def get_payment_history(self) -> list[PaymentRecord]:
        """Return the calling customer's past payments."""
        ...

    @abstractmethod
    def mark_paid(self, ticket_id: TicketId) -> Ticket:
        """Flag a ticket as paid without charging. Debug affordance only."""
        ...

    @abstractmethod
    def get_loyalty_balance(self) -> LoyaltyBalance:
        """Return the calling customer's loyalty balance."""
        ...

    @abstractmethod
    def get_loyalty_history(self) -> LoyaltyHistory:
        """Return the calling customer's points earned and redeemed."""
        ...

    @abstractmethod
    def forgot_password(self, email: str) -> None:
        """Send a password reset OTP to the email address."""
        ...

    @abstractmethod
    def verify_reset_otp(self, email: str, otp: str) -> bool:
        """Check a password reset OTP without consuming it."""
        ...

    @abstractmethod
    def reset_password(self, email: str, otp: str, new_password: str) -> None:
        """Set a new password using a valid OTP."""
        ...


class BookingSessionStore(ABC):
    """Interface for booking wizard persistence."""

    @abstractmethod
    def get(self, booking_id: BookingId) -> BookingState | None:
        """Return the wizard state, or None if not found."""
        ...

    @abstractmethod
    def save(self, state: BookingState) -> BookingState:
        """Insert or update the wizard state."""
        ...
