"""Booking service - drives the booking wizard against the ticketing API.

Every operation loads the persisted wizard state, performs at most one
remote side effect, applies the matching wizard transition and saves the
result. Repeating an operation that already took effect returns the saved
state instead of calling the API again, so resubmitted forms do not create
second tickets, redeem points twice or charge twice.
"""

import logging
import uuid
from decimal import Decimal

from django.conf import settings

from booking.domain import BookingId, BookingRequest, BookingSummary, EventPriceId, Quantity
from booking.domain import wizard
from booking.domain.errors import (
    BookingNotFoundError,
    InvalidIdError,
    InvalidInputError,
    InvalidTransitionError,
    MarkPaidDisabledError,
    PaymentFailedError,
    PriceNotFoundError,
    UpstreamUnavailableError,
)
from booking.domain.wizard import BookingState, Step
from booking.services.event_service import EventService
from booking.stores.interfaces import BookingSessionStore, TicketingApi

logger = logging.getLogger(__name__)


class BookingService:
    """Service for the select -> promotions -> payment -> confirmation flow."""

    def __init__(
        self,
        sessions: BookingSessionStore,
        api: TicketingApi,
        earn_rate: Decimal | None = None,
        cap_rate: Decimal | None = None,
        allow_mark_paid: bool | None = None,
    ) -> None:
        config = settings.BOOKING
        self._sessions = sessions
        self._api = api
        self._events = EventService(api)
        self._earn_rate = earn_rate if earn_rate is not None else Decimal(config["LOYALTY_EARN_RATE"])
        self._cap_rate = cap_rate if cap_rate is not None else Decimal(config["LOYALTY_REDEMPTION_CAP"])
        self._allow_mark_paid = (
            allow_mark_paid if allow_mark_paid is not None else config["ALLOW_MARK_PAID"]
        )

    def _load(self, booking_id: str) -> BookingState:
        try:
            parsed = BookingId.from_string(booking_id)
        except (TypeError, ValueError) as e:
            raise InvalidIdError("booking ID") from e
        state = self._sessions.get(parsed)
        if state is None:
            raise BookingNotFoundError(booking_id)
        return state

    def _save(self, state: BookingState) -> BookingState:
        return self._sessions.save(state)

    def get(self, booking_id: str) -> BookingState:
        return self._load(booking_id)

    def summary(self, state: BookingState) -> BookingSummary | None:
        return wizard.summary(state, earn_rate=self._earn_rate, cap_rate=self._cap_rate)

    def start(self, event_id: str) -> BookingState:
        """Open a new wizard for an event.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = self._events.get_event(event_id)
        state = wizard.start(BookingId(value=uuid.uuid4()), event.id)
        logger.info("Started booking %s for event %s", state.id, event.id)
        return self._save(state)

    def select(self, booking_id: str, price_id: str, quantity: int) -> BookingState:
        """Choose a ticket tier and quantity against current stock."""
        state = self._load(booking_id)
        wizard.ensure_step(state, "change ticket selection", Step.SELECT)
        try:
            parsed_price = EventPriceId.from_string(price_id)
        except (TypeError, ValueError) as e:
            raise InvalidIdError("ticket category ID") from e

        event = self._events.refresh_event(state.event_id)
        price = event.find_price(parsed_price)
        if price is None:
            raise PriceNotFoundError(price_id)
        return self._save(wizard.select_price(state, price, quantity))

    def book(self, booking_id: str) -> BookingState:
        """Create the unpaid ticket for the selection and move to promotions."""
        state = self._load(booking_id)
        if state.step is Step.PROMOTIONS and state.ticket_id is not None:
            logger.info("Booking %s already has ticket %s", state.id, state.ticket_id)
            return state
        wizard.ensure_step(state, "book tickets", Step.SELECT)
        if not state.has_selection:
            raise InvalidTransitionError(state.step.value, "book tickets without a selection")

        if state.ticket_id is not None:
            return self._save(wizard.enter_promotions(state))

        request = BookingRequest(
            event_id=state.event_id,
            event_price_id=state.event_price_id,
            quantity=Quantity(value=state.quantity),
        )
        ticket = self._api.book_ticket(request, idempotency_key=state.idempotency_key)
        return self._save(wizard.record_ticket(state, ticket))

    def apply_promotion(self, booking_id: str, discount_code: str) -> BookingState:
        state = self._load(booking_id)
        wizard.ensure_promotion_allowed(state)
        code = (discount_code or "").strip()
        if not code:
            raise InvalidInputError("Discount code is required")
        if code == state.discount_code:
            return state
        ticket = self._api.apply_promotion(state.ticket_id, code)
        state = wizard.apply_discount(state, code, ticket.total_amount, self._cap_rate)
        logger.info("Applied promotion to booking %s: discount %s", state.id, state.discount)
        return self._save(state)

    def set_loyalty_points(self, booking_id: str, points: int) -> BookingState:
        """Choose how many points to redeem, clamped to the cap and the live balance."""
        state = self._load(booking_id)
        wizard.ensure_step(state, "change loyalty points", Step.PROMOTIONS)
        balance = self._api.get_loyalty_balance().balance if points > 0 else None
        updated = wizard.set_loyalty_points(state, points, balance, self._cap_rate)
        if updated.loyalty_points.value != points:
            logger.info(
                "Clamped loyalty redemption for booking %s from %d to %d",
                state.id,
                points,
                updated.loyalty_points.value,
            )
        return self._save(updated)

    def checkout(self, booking_id: str) -> BookingState:
        """Redeem the chosen points against the ticket and move to payment."""
        state = self._load(booking_id)
        if state.step is Step.PAYMENT:
            return state
        wizard.ensure_step(state, "continue to payment", Step.PROMOTIONS)

        if state.loyalty_points.value > 0 and not state.loyalty_applied:
            self._api.use_loyalty_points(state.ticket_id, state.loyalty_points)
            state = self._save(wizard.mark_loyalty_applied(state))
            logger.info(
                "Redeemed %d loyalty points on booking %s", state.loyalty_points.value, state.id
            )
        return self._save(wizard.begin_payment(state))

    def pay(
        self,
        booking_id: str,
        payment_method: str | None = None,
        payment_token: str | None = None,
    ) -> BookingState:
        """Charge the ticket.

        A failed payment leaves the ticket unpaid and the wizard at the payment
        step so the customer can try again.

        Raises:
            PaymentFailedError: If the charge was declined or not confirmed.
        """
        state = self._load(booking_id)
        if state.step is Step.CONFIRMATION:
            return state
        wizard.ensure_step(state, "pay", Step.PAYMENT)

        try:
            result = self._api.process_payment(state.ticket_id, payment_method, payment_token)
        except (PaymentFailedError, UpstreamUnavailableError) as e:
            self._save(wizard.record_payment_attempt(state, error=e.message))
            logger.warning("Payment failed for booking %s: %s", state.id, e.message)
            raise

        if not result.success:
            message = f"Payment {result.status.lower()}"
            self._save(
                wizard.record_payment_attempt(state, reference=result.transaction_id, error=message)
            )
            logger.warning("Payment not successful for booking %s: %s", state.id, result.status)
            raise PaymentFailedError()

        state = wizard.record_payment_attempt(state, reference=result.transaction_id)
        amount_paid = result.amount
        if amount_paid.amount == 0:
            amount_paid = self.summary(state).total
        state = wizard.complete_payment(
            state, amount_paid, result.transaction_id, earn_rate=self._earn_rate
        )
        logger.info(
            "Booking %s paid %s, earning %d points",
            state.id,
            amount_paid,
            state.points_earned.value,
        )
        return self._save(state)

    def confirm_session(self, booking_id: str, session_id: str) -> BookingState:
        """Confirm payment made through a hosted checkout session."""
        state = self._load(booking_id)
        if state.step is Step.CONFIRMATION:
            return state
        wizard.ensure_step(state, "confirm payment", Step.PAYMENT)
        if not session_id:
            raise InvalidInputError("Checkout session ID is required")

        status = self._api.get_session_status(session_id)
        if status.ticket_id is not None and status.ticket_id != state.ticket_id:
            raise InvalidInputError("Checkout session does not belong to this booking")
        if not status.is_paid:
            self._save(
                wizard.record_payment_attempt(
                    state, reference=session_id, error=f"Payment {status.status}"
                )
            )
            raise PaymentFailedError(f"Payment is not complete (status: {status.status})")

        ticket = self._api.get_ticket(state.ticket_id)
        state = wizard.record_payment_attempt(state, reference=session_id)
        amount_paid = ticket.total_amount if ticket is not None else self.summary(state).total
        state = wizard.complete_payment(state, amount_paid, session_id, earn_rate=self._earn_rate)
        logger.info("Booking %s confirmed from checkout session", state.id)
        return self._save(state)

    def mark_paid(self, booking_id: str) -> BookingState:
        """Flag the ticket as paid without charging. Only for debugging."""
        if not self._allow_mark_paid:
            raise MarkPaidDisabledError()
        state = self._load(booking_id)
        if state.step is Step.CONFIRMATION:
            return state
        wizard.ensure_step(state, "mark as paid", Step.PAYMENT)

        ticket = self._api.mark_paid(state.ticket_id)
        state = wizard.record_payment_attempt(state, reference="manual")
        state = wizard.complete_payment(state, ticket.total_amount, earn_rate=self._earn_rate)
        logger.warning("Booking %s marked paid manually", state.id)
        return self._save(state)

    def go_back(self, booking_id: str) -> BookingState:
        return self._save(wizard.go_back(self._load(booking_id)))

    def cancel(self, booking_id: str) -> BookingState:
        state = wizard.cancel(self._load(booking_id))
        logger.info("Cancelled booking %s at ticket %s", state.id, state.ticket_id)
        return self._save(state)
