"""Event service - event catalog reads from the ticketing API.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging

from django.conf import settings
from django.core.cache import cache

from booking.domain import EventId
from booking.domain.errors import EventNotFoundError, InvalidIdError
from booking.domain.models import Event
from booking.stores.interfaces import EventFilters, TicketingApi

logger = logging.getLogger(__name__)

LIST_CACHE_KEY = "events:list:{filters}"
DETAIL_CACHE_KEY = "events:{event_id}"


def parse_event_id(event_id: str) -> EventId:
    try:
        return EventId.from_string(event_id)
    except (TypeError, ValueError) as e:
        raise InvalidIdError("event ID") from e


class EventService:
    """Service for event catalog operations."""

    def __init__(self, api: TicketingApi, cache_ttl: int | None = None) -> None:
        self._api = api
        self._cache_ttl = (
            cache_ttl if cache_ttl is not None else settings.BOOKING["EVENT_CACHE_TTL"]
        )

    def list_events(self, filters: EventFilters | None = None) -> list[Event]:
        """Return events matching the filters, served from cache when fresh."""
        filters = filters or EventFilters()
        key = LIST_CACHE_KEY.format(filters=filters.cache_key())
        events = cache.get(key)
        if events is None:
            events = self._api.list_events(filters)
            cache.set(key, events, self._cache_ttl)
            logger.debug("Cached %d events under %s", len(events), key)
        return events

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        parsed = parse_event_id(event_id)
        key = DETAIL_CACHE_KEY.format(event_id=parsed)
        event = cache.get(key)
        if event is None:
            event = self._api.get_event(parsed)
            if event is None:
                raise EventNotFoundError(event_id)
            cache.set(key, event, self._cache_ttl)
        return event

    def refresh_event(self, event_id: EventId) -> Event:
        """Fetch an event bypassing the cache; used when stock must be current."""
        event = self._api.get_event(event_id)
        if event is None:
            cache.delete(DETAIL_CACHE_KEY.format(event_id=event_id))
            raise EventNotFoundError(str(event_id))
        cache.set(DETAIL_CACHE_KEY.format(event_id=event_id), event, self._cache_ttl)
        return event
