"""HTTP implementation of the TicketingApi backed by the remote REST API."""

import logging
import time
from datetime import datetime
from decimal import InvalidOperation
from typing import Any, Callable, TypeVar
from urllib.parse import quote

import httpx
from django.conf import settings

from booking.domain import (
    BookingRequest,
    Capacity,
    Event,
    EventId,
    EventPrice,
    EventPriceId,
    LoyaltyBalance,
    LoyaltyHistory,
    LoyaltyPoints,
    LoyaltyTransaction,
    Money,
    PaymentRecord,
    PaymentResult,
    PaymentSessionStatus,
    Ticket,
    TicketId,
    TicketPage,
    TicketValidation,
    Venue,
)
from booking.domain.errors import (
    PaymentFailedError,
    PromotionRejectedError,
    TicketNotFoundError,
    UpstreamRejectedError,
    UpstreamUnauthorizedError,
    UpstreamUnavailableError,
)
from booking.stores.interfaces import EventFilters, TicketingApi

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 502, 503, 504}

T = TypeVar("T")


def _field(data: dict, name: str, default: Any = None) -> Any:
    """Read a camelCase key, falling back to its PascalCase spelling."""
    if name in data:
        return data[name]
    return data.get(name[0].upper() + name[1:], default)


def _unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and "data" in payload and "success" in payload:
        return payload["data"]
    return payload


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable datetime from ticketing API: %r", value)
        return None


def _parse_venue(data: dict | None) -> Venue | None:
    if not data:
        return None
    return Venue(
        id=str(_field(data, "id", "")),
        name=_field(data, "name") or "",
        location=_field(data, "location") or "",
        capacity=Capacity(value=int(_field(data, "capacity", 0) or 0)),
    )


def _parse_price(data: dict, event_id: EventId) -> EventPrice:
    return EventPrice(
        id=EventPriceId.from_string(str(_field(data, "id"))),
        event_id=event_id,
        category=_field(data, "category") or "General",
        price=Money.from_value(_field(data, "price", 0)),
        stock=Capacity(value=max(0, int(_field(data, "stock", 0) or 0))),
        is_active=bool(_field(data, "isActive", True)),
    )


def _parse_event(data: dict) -> Event:
    event_id = EventId.from_string(str(_field(data, "id")))
    return Event(
        id=event_id,
        title=_field(data, "title") or "",
        description=_field(data, "description") or "",
        event_date=_parse_datetime(_field(data, "eventDate")),
        category=_field(data, "category"),
        image_url=_field(data, "image"),
        is_published=bool(_field(data, "isPublished", True)),
        venue=_parse_venue(_field(data, "venue")),
        prices=tuple(_parse_price(p, event_id) for p in _field(data, "prices") or ()),
    )


def _parse_ticket(data: dict) -> Ticket:
    price_id = _field(data, "eventPriceId")
    return Ticket(
        id=TicketId.from_string(str(_field(data, "id"))),
        event_id=EventId.from_string(str(_field(data, "eventId"))),
        event_price_id=EventPriceId.from_string(str(price_id)) if price_id else None,
        ticket_number=_field(data, "ticketNumber"),
        ticket_code=_field(data, "ticketCode"),
        quantity=int(_field(data, "quantity", 1)),
        total_amount=Money.from_value(_field(data, "totalAmount", 0)),
        is_paid=bool(_field(data, "isPaid", False)),
        purchase_date=_parse_datetime(_field(data, "purchaseDate")),
    )


def _parse_ticket_page(data: Any, page: int, page_size: int) -> TicketPage:
    # Older deployments return a bare list instead of a paginated envelope.
    if isinstance(data, list):
        items = tuple(_parse_ticket(item) for item in data)
        return TicketPage(
            items=items,
            page=1,
            page_size=len(items),
            total_count=len(items),
            total_pages=1,
        )
    items = tuple(_parse_ticket(item) for item in _field(data, "data") or ())
    total_count = int(_field(data, "totalCount", len(items)))
    size = int(_field(data, "pageSize", page_size))
    return TicketPage(
        items=items,
        page=int(_field(data, "page", page)),
        page_size=size,
        total_count=total_count,
        total_pages=int(_field(data, "totalPages", -(-total_count // size) if size else 1)),
    )


def _parse_payment_result(data: dict) -> PaymentResult:
    return PaymentResult(
        success=bool(_field(data, "success", False)),
        transaction_id=_field(data, "transactionId"),
        amount=Money.from_value(_field(data, "amount", 0)),
        currency=_field(data, "currency") or "LKR",
        status=_field(data, "status") or "Unknown",
    )


def _parse_session_status(data: dict, session_id: str) -> PaymentSessionStatus:
    ticket_id = _field(data, "ticketId")
    status = _field(data, "status") or _field(data, "paymentStatus") or "unknown"
    return PaymentSessionStatus(
        session_id=session_id,
        ticket_id=TicketId.from_string(str(ticket_id)) if ticket_id else None,
        status=status,
        is_paid=bool(_field(data, "isPaid", status.lower() in ("paid", "complete", "completed"))),
    )


def _parse_payment_record(data: dict) -> PaymentRecord:
    ticket_id = _field(data, "ticketId")
    return PaymentRecord(
        id=str(_field(data, "id")),
        ticket_id=TicketId.from_string(str(ticket_id)) if ticket_id else None,
        amount=Money.from_value(_field(data, "amount", 0)),
        currency=_field(data, "currency") or "LKR",
        status=_field(data, "status") or "Unknown",
        payment_method=_field(data, "paymentMethod"),
        transaction_id=_field(data, "transactionId"),
        created_at=_parse_datetime(_field(data, "createdAt")),
    )


def _parse_loyalty_balance(data: dict) -> LoyaltyBalance:
    balance = max(0, int(_field(data, "balance", 0) or 0))
    return LoyaltyBalance(
        user_id=_field(data, "userId"),
        balance=LoyaltyPoints(value=balance),
        discount_value=Money.from_value(_field(data, "discountValue", balance)),
    )


def _parse_loyalty_history(data: dict) -> LoyaltyHistory:
    entries = tuple(
        LoyaltyTransaction(
            id=str(_field(item, "id")),
            points=LoyaltyPoints(value=abs(int(_field(item, "points", 0)))),
            kind=_field(item, "type") or "Earned",
            description=_field(item, "description") or "",
            occurred_at=_parse_datetime(_field(item, "earnedDate")),
        )
        for item in _field(data, "history") or ()
    )
    return LoyaltyHistory(user_id=_field(data, "userId"), entries=entries)


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = _field(body, "message") or _field(body, "error")
        if isinstance(message, str):
            return message
    return None


class HttpTicketingApi(TicketingApi):
    """TicketingApi that talks JSON over HTTP with the caller's bearer token."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_backoff: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=headers,
            transport=transport,
        )
        self._max_retries = max(1, max_retries)
        self._retry_backoff = retry_backoff

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpTicketingApi":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
        headers: dict | None = None,
        missing_ok: bool = False,
    ) -> httpx.Response | None:
        """Send a request and map failures to domain errors.

        Only GET requests are retried; a POST may have taken effect upstream
        even when its response was lost.
        """
        attempts = self._max_retries if method == "GET" else 1
        for attempt in range(attempts):
            try:
                response = self._client.request(
                    method, path, json=json, params=params, headers=headers
                )
            except httpx.RequestError as e:
                if attempt < attempts - 1:
                    time.sleep(self._retry_backoff * 2**attempt)
                    continue
                logger.warning("Ticketing API %s %s failed: %s", method, path, e)
                raise UpstreamUnavailableError() from e

            if response.status_code in RETRYABLE_STATUS and attempt < attempts - 1:
                time.sleep(self._retry_backoff * 2**attempt)
                continue
            break

        if response.status_code == 401:
            raise UpstreamUnauthorizedError()
        if response.status_code == 404 and missing_ok:
            return None
        if response.status_code >= 500 or response.status_code in RETRYABLE_STATUS:
            logger.warning(
                "Ticketing API %s %s returned %s", method, path, response.status_code
            )
            raise UpstreamUnavailableError()
        if response.is_error:
            message = _error_message(response)
            logger.info(
                "Ticketing API rejected %s %s (%s): %s",
                method,
                path,
                response.status_code,
                message,
            )
            if message:
                raise UpstreamRejectedError(message)
            raise UpstreamRejectedError()
        return response

    def _decode(self, response: httpx.Response, parse: Callable[[Any], T]) -> T:
        """Parse a response body, treating an unexpected shape as an outage."""
        try:
            return parse(_unwrap(response.json()))
        except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation) as e:
            logger.warning(
                "Malformed response from ticketing API %s %s: %s",
                response.request.method,
                response.request.url.path,
                e,
            )
            raise UpstreamUnavailableError() from e

    def list_events(self, filters: EventFilters | None = None) -> list[Event]:
        filters = filters or EventFilters()
        params = {
            "fromDate": filters.from_date.isoformat() if filters.from_date else None,
            "toDate": filters.to_date.isoformat() if filters.to_date else None,
            "venue": filters.venue,
            "keyword": filters.keyword,
            "category": filters.category,
        }
        response = self._request(
            "GET", "/Events", params={k: v for k, v in params.items() if v}
        )
        return self._decode(
            response, lambda data: [_parse_event(item) for item in data or []]
        )

    def get_event(self, event_id: EventId) -> Event | None:
        response = self._request("GET", f"/Events/{event_id}", missing_ok=True)
        if response is None:
            return None
        return self._decode(response, _parse_event)

    def book_ticket(self, request: BookingRequest, idempotency_key: str) -> Ticket:
        payload = {
            "eventId": str(request.event_id),
            "eventPriceId": str(request.event_price_id),
            "quantity": request.quantity.value,
            "useLoyaltyPoints": request.use_loyalty_points,
        }
        if request.discount_code:
            payload["discountCode"] = request.discount_code
        response = self._request(
            "POST",
            "/Tickets/book",
            json=payload,
            headers={"Idempotency-Key": idempotency_key},
        )
        ticket = self._decode(response, _parse_ticket)
        logger.info("Booked ticket %s for event %s", ticket.id, request.event_id)
        return ticket

    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        response = self._request("GET", f"/Tickets/{ticket_id}", missing_ok=True)
        if response is None:
            return None
        return self._decode(response, _parse_ticket)

    def get_ticket_history(self, page: int, page_size: int) -> TicketPage:
        response = self._request(
            "GET", "/Tickets/history", params={"page": page, "pageSize": page_size}
        )
        return self._decode(
            response, lambda data: _parse_ticket_page(data, page, page_size)
        )

    def validate_ticket(self, ticket_code: str) -> TicketValidation:
        try:
            response = self._request(
                "GET", f"/Tickets/validate/{quote(ticket_code, safe='')}", missing_ok=True
            )
        except UpstreamRejectedError:
            return TicketValidation(ticket_code=ticket_code, is_valid=False)
        if response is None:
            return TicketValidation(ticket_code=ticket_code, is_valid=False)

        def parse(data: Any) -> TicketValidation:
            if isinstance(data, dict) and ("valid" in data or "Valid" in data):
                ticket = _field(data, "ticket")
                return TicketValidation(
                    ticket_code=ticket_code,
                    is_valid=bool(_field(data, "valid")),
                    ticket=_parse_ticket(ticket) if ticket else None,
                )
            return TicketValidation(
                ticket_code=ticket_code, is_valid=True, ticket=_parse_ticket(data)
            )

        return self._decode(response, parse)

    def apply_promotion(self, ticket_id: TicketId, discount_code: str) -> Ticket:
        try:
            response = self._request(
                "POST",
                "/Tickets/promotions",
                json={"ticketId": str(ticket_id), "discountCode": discount_code},
            )
        except UpstreamRejectedError as e:
            raise PromotionRejectedError() from e
        return self._decode(response, _parse_ticket)

    def use_loyalty_points(self, ticket_id: TicketId, points: LoyaltyPoints) -> Ticket:
        response = self._request(
            "POST",
            "/Tickets/loyalty-points",
            json={"ticketId": str(ticket_id), "points": points.value},
        )
        return self._decode(response, _parse_ticket)

    def get_ticket_qr_code(self, ticket_id: TicketId) -> bytes:
        response = self._request(
            "GET",
            f"/Tickets/{ticket_id}/qrcode",
            headers={"Accept": "image/png"},
            missing_ok=True,
        )
        if response is None:
            raise TicketNotFoundError(str(ticket_id))
        return response.content

    def process_payment(
        self, ticket_id: TicketId, payment_method: str | None, payment_token: str | None
    ) -> PaymentResult:
        payload = {"ticketId": str(ticket_id)}
        if payment_method:
            payload["paymentMethod"] = payment_method
        if payment_token:
            payload["stripeToken"] = payment_token
        try:
            response = self._request("POST", "/Payment/process", json=payload)
        except UpstreamRejectedError as e:
            raise PaymentFailedError(e.message) from e
        return self._decode(response, _parse_payment_result)

    def get_session_status(self, session_id: str) -> PaymentSessionStatus:
        response = self._request(
            "GET", f"/Payment/session-status/{quote(session_id, safe='')}"
        )
        return self._decode(
            response, lambda data: _parse_session_status(data, session_id)
        )

    def get_payment_history(self) -> list[PaymentRecord]:
        response = self._request("GET", "/Payment/history")
        return self._decode(
            response, lambda data: [_parse_payment_record(item) for item in data or []]
        )

    def mark_paid(self, ticket_id: TicketId) -> Ticket:
        self._request("POST", "/Payment/mark-paid", json={"ticketId": str(ticket_id)})
        ticket = self.get_ticket(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(str(ticket_id))
        return ticket

    def get_loyalty_balance(self) -> LoyaltyBalance:
        response = self._request("GET", "/loyalty/balance")
        return self._decode(response, _parse_loyalty_balance)

    def get_loyalty_history(self) -> LoyaltyHistory:
        response = self._request("GET", "/loyalty/history")
        return self._decode(response, _parse_loyalty_history)

    def forgot_password(self, email: str) -> None:
        self._request("POST", "/auth/forgot-password", json={"email": email})

    def verify_reset_otp(self, email: str, otp: str) -> bool:
        try:
            response = self._request(
                "POST", "/auth/verify-reset-otp", json={"email": email, "otp": otp}
            )
        except UpstreamRejectedError:
            return False
        try:
            data = response.json()
        except ValueError:
            return True
        if isinstance(data, dict):
            return bool(_field(data, "valid", _field(data, "success", True)))
        return True

    def reset_password(self, email: str, otp: str, new_password: str) -> None:
        self._request(
            "POST",
            "/auth/reset-password-otp",
            json={"email": email, "otp": otp, "newPassword": new_password},
        )


def build_ticketing_api(token: str | None = None) -> HttpTicketingApi:
    """Create a client from the TICKETING_API setting for one caller."""
    config = settings.TICKETING_API
    return HttpTicketingApi(
        base_url=config["BASE_URL"],
        token=token,
        timeout=config.get("TIMEOUT", 30.0),
        max_retries=config.get("MAX_RETRIES", 3),
        retry_backoff=config.get("RETRY_BACKOFF", 0.5),
    )

