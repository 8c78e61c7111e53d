from booking.services.account_service import AccountService
from booking.services.booking_service import BookingService
from booking.services.event_service import EventService
from booking.services.loyalty_service import LoyaltyQuote, LoyaltyService
from booking.services.payment_service import PaymentService
from booking.services.ticket_service import TicketService

__all__ = [
    "AccountService",
    "BookingService",
    "EventService",
    "LoyaltyQuote",
    "LoyaltyService",
    "PaymentService",
    "TicketService",
]
