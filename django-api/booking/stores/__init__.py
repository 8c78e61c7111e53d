from booking.stores.django_store import DjangoBookingSessionStore
from booking.stores.http_store import HttpTicketingApi, build_ticketing_api
from booking.stores.interfaces import BookingSessionStore, EventFilters, TicketingApi

__all__ = [
    "BookingSessionStore",
    "DjangoBookingSessionStore",
    "EventFilters",
    "HttpTicketingApi",
    "TicketingApi",
    "build_ticketing_api",
]
