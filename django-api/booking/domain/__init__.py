from booking.domain.models import (
    BookingRequest,
    BookingSummary,
    Event,
    EventPrice,
    LoyaltyBalance,
    LoyaltyHistory,
    LoyaltyTransaction,
    PaymentRecord,
    PaymentResult,
    PaymentSessionStatus,
    Ticket,
    TicketPage,
    TicketValidation,
    Venue,
)
from booking.domain.value_objects import (
    BookingId,
    Capacity,
    EventId,
    EventPriceId,
    LoyaltyPoints,
    Money,
    Quantity,
    TicketId,
)

__all__ = [
    "Event",
    "EventPrice",
    "Venue",
    "Ticket",
    "BookingRequest",
    "BookingSummary",
    "PaymentResult",
    "PaymentSessionStatus",
    "LoyaltyBalance",
    "LoyaltyHistory",
    "LoyaltyTransaction",
    "PaymentRecord",
    "TicketPage",
    "TicketValidation",
    "BookingId",
    "EventId",
    "EventPriceId",
    "TicketId",
    "Money",
    "Capacity",
    "Quantity",
    "LoyaltyPoints",
]
