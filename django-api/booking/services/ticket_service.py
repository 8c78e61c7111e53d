"""Ticket service - a customer's issued tickets and door validation."""

import logging

from booking.domain import TicketId, TicketPage, TicketValidation
from booking.domain.errors import InvalidIdError, InvalidInputError
from booking.stores.interfaces import TicketingApi

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
MAX_TICKET_CODE_LENGTH = 64


def parse_ticket_id(ticket_id: str) -> TicketId:
    try:
        return TicketId.from_string(ticket_id)
    except (TypeError, ValueError) as e:
        raise InvalidIdError("ticket ID") from e


class TicketService:
    """Service for reading tickets the customer already holds."""

    def __init__(self, api: TicketingApi) -> None:
        self._api = api

    def history(self, page: int = 1, page_size: int = 10) -> TicketPage:
        if page < 1:
            raise InvalidInputError("Page must be 1 or greater")
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise InvalidInputError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")
        return self._api.get_ticket_history(page, page_size)

    def validate(self, ticket_code: str) -> TicketValidation:
        """Check a ticket code; unknown codes come back as not valid."""
        code = (ticket_code or "").strip()
        if not code or len(code) > MAX_TICKET_CODE_LENGTH:
            raise InvalidInputError("Enter the code printed on the ticket")
        result = self._api.validate_ticket(code)
        logger.info("Validated ticket code %s: valid=%s", code, result.is_valid)
        return result

    def qr_code(self, ticket_id: str) -> tuple[TicketId, bytes]:
        parsed = parse_ticket_id(ticket_id)
        return parsed, self._api.get_ticket_qr_code(parsed)
