"""Domain error codes for the booking module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    INVALID_ID = "INVALID_ID"
    PRICE_NOT_FOUND = "PRICE_NOT_FOUND"
    PRICE_UNAVAILABLE = "PRICE_UNAVAILABLE"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    LOYALTY_REDEMPTION_REJECTED = "LOYALTY_REDEMPTION_REJECTED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    PROMOTION_REJECTED = "PROMOTION_REJECTED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    MARK_PAID_DISABLED = "MARK_PAID_DISABLED"
    INVALID_INPUT = "INVALID_INPUT"
    UPSTREAM_UNAUTHORIZED = "UPSTREAM_UNAUTHORIZED"
    UPSTREAM_REJECTED = "UPSTREAM_REJECTED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        object.__setattr__(self, "event_id", event_id)


class TicketNotFoundError(DomainError):
    """Raised when the ticketing API does not know a ticket."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_FOUND,
            message="Ticket not found",
        )
        object.__setattr__(self, "ticket_id", ticket_id)


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str = "ID") -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} format",
        )


class PriceNotFoundError(DomainError):
    """Raised when an event has no ticket tier with the given ID."""

    def __init__(self, price_id: str) -> None:
        super().__init__(
            code=ErrorCode.PRICE_NOT_FOUND,
            message="Ticket category not found for event",
        )
        object.__setattr__(self, "price_id", price_id)


class PriceUnavailableError(DomainError):
    """Raised when a ticket tier is inactive or sold out."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PRICE_UNAVAILABLE,
            message="Ticket category is not available",
        )


class InvalidQuantityError(DomainError):
    """Raised when quantity is below one or above the remaining stock."""

    def __init__(self, quantity: int, stock: int) -> None:
        super().__init__(
            code=ErrorCode.INVALID_QUANTITY,
            message=f"Quantity must be between 1 and {stock}",
        )
        object.__setattr__(self, "quantity", quantity)


class LoyaltyRedemptionError(DomainError):
    """Raised when more points are redeemed than the cap allows."""

    def __init__(self, points: int, limit: int) -> None:
        super().__init__(
            code=ErrorCode.LOYALTY_REDEMPTION_REJECTED,
            message=f"Cannot redeem {points} points; at most {limit} allowed",
        )


class InvalidTransitionError(DomainError):
    """Raised when the booking wizard is asked to do something out of order."""

    def __init__(self, step: str, action: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot {action} while booking is at step '{step}'",
        )


class BookingNotFoundError(DomainError):
    """Raised when a booking session does not exist."""

    def __init__(self, booking_id: str) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_NOT_FOUND,
            message="Booking not found",
        )
        object.__setattr__(self, "booking_id", booking_id)


class PromotionRejectedError(DomainError):
    """Raised when the ticketing API refuses a discount code."""

    def __init__(self, message: str = "Invalid discount code") -> None:
        super().__init__(code=ErrorCode.PROMOTION_REJECTED, message=message)


class PaymentFailedError(DomainError):
    """Raised when payment processing does not succeed."""

    def __init__(self, message: str = "Payment processing failed. Please try again.") -> None:
        super().__init__(code=ErrorCode.PAYMENT_FAILED, message=message)


class MarkPaidDisabledError(DomainError):
    """Raised when the manual mark-paid affordance is switched off."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.MARK_PAID_DISABLED,
            message="Marking tickets as paid is disabled",
        )


class InvalidInputError(DomainError):
    """Raised when a request value fails validation in the service layer."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_INPUT, message=message)


class UpstreamUnauthorizedError(DomainError):
    """Raised when the ticketing API rejects the caller's credentials."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.UPSTREAM_UNAUTHORIZED,
            message="You are not authorized to perform this action.",
        )


class UpstreamRejectedError(DomainError):
    """Raised when the ticketing API refuses a request as invalid."""

    def __init__(self, message: str = "Please check your input and try again.") -> None:
        super().__init__(code=ErrorCode.UPSTREAM_REJECTED, message=message)


class UpstreamUnavailableError(DomainError):
    """Raised on transport failures and server errors from the ticketing API."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.UPSTREAM_UNAVAILABLE,
            message="Server error. Please try again later.",
        )
