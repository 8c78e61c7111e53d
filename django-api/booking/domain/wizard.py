"""Booking wizard state machine.

select -> promotions -> payment -> confirmation

Every transition is a pure function taking a BookingState and returning a new
one. Illegal transitions raise InvalidTransitionError. The state never goes
back from payment once a payment attempt has been made, and can only be
cancelled before the payment step begins.

Redeeming loyalty points commits the booking to its ticket: after that the
selection, promotion and points are fixed, and it can no longer be cancelled.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum

from booking.domain import pricing
from booking.domain.errors import (
    InvalidQuantityError,
    InvalidTransitionError,
    PriceUnavailableError,
)
from booking.domain.models import BookingSummary, EventPrice, Ticket
from booking.domain.value_objects import (
    BookingId,
    EventId,
    EventPriceId,
    LoyaltyPoints,
    Money,
    Quantity,
    TicketId,
)


class Step(Enum):
    SELECT = "select"
    PROMOTIONS = "promotions"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class BookingState:
    """Everything the wizard knows about one booking attempt."""

    id: BookingId
    event_id: EventId
    step: Step = Step.SELECT
    event_price_id: EventPriceId | None = None
    price_category: str | None = None
    unit_price: Money | None = None
    quantity: int = 0
    ticket_id: TicketId | None = None
    ticket_code: str | None = None
    discount_code: str | None = None
    discount: Money = field(default_factory=Money.zero)
    loyalty_points: LoyaltyPoints = field(default_factory=lambda: LoyaltyPoints(value=0))
    loyalty_applied: bool = False
    selection_version: int = 0
    payment_attempts: int = 0
    payment_reference: str | None = None
    amount_paid: Money | None = None
    points_earned: LoyaltyPoints | None = None
    last_error: str | None = None

    @property
    def has_selection(self) -> bool:
        return self.event_price_id is not None and self.unit_price is not None

    @property
    def has_payment_intent(self) -> bool:
        return self.payment_attempts > 0 or self.payment_reference is not None

    @property
    def is_finished(self) -> bool:
        return self.step in (Step.CONFIRMATION, Step.CANCELLED)

    @property
    def can_go_back(self) -> bool:
        return self.step is Step.PROMOTIONS or (
            self.step is Step.PAYMENT
            and not self.has_payment_intent
            and not self.loyalty_applied
        )

    @property
    def can_cancel(self) -> bool:
        return self.step in (Step.SELECT, Step.PROMOTIONS) and not self.loyalty_applied

    @property
    def idempotency_key(self) -> str:
        """Key for creating the ticket of the current selection."""
        return f"{self.id}:{self.selection_version}"

    def subtotal(self) -> Money:
        if not self.has_selection:
            return Money.zero()
        return pricing.calculate_subtotal(Quantity(value=self.quantity), self.unit_price)

    def discounted_amount(self) -> Money:
        return pricing.apply_discount(self.subtotal(), self.discount)


def ensure_step(state: BookingState, action: str, *steps: Step) -> None:
    if state.step not in steps:
        raise InvalidTransitionError(state.step.value, action)


def start(booking_id: BookingId, event_id: EventId) -> BookingState:
    return BookingState(id=booking_id, event_id=event_id)


def select_price(state: BookingState, price: EventPrice, quantity: int) -> BookingState:
    """Choose a ticket tier and quantity.

    A different tier, quantity or upstream unit price invalidates any unpaid
    ticket already created for the previous selection, along with its
    promotion and points.
    """
    ensure_step(state, "change ticket selection", Step.SELECT)
    if not price.is_available:
        raise PriceUnavailableError()
    if quantity < 1 or quantity > price.stock.value:
        raise InvalidQuantityError(quantity, price.stock.value)

    changed = (
        price.id != state.event_price_id
        or quantity != state.quantity
        or price.price != state.unit_price
    )
    if changed and state.loyalty_applied:
        raise InvalidTransitionError(
            state.step.value, "change ticket selection after redeeming loyalty points"
        )
    state = replace(
        state,
        event_price_id=price.id,
        price_category=price.category,
        unit_price=price.price,
        quantity=quantity,
        last_error=None,
    )
    if changed:
        state = replace(
            state,
            ticket_id=None,
            ticket_code=None,
            discount_code=None,
            discount=Money.zero(),
            loyalty_points=LoyaltyPoints(value=0),
            loyalty_applied=False,
            selection_version=state.selection_version + 1,
        )
    return state


def record_ticket(state: BookingState, ticket: Ticket) -> BookingState:
    """Attach the ticket created for the current selection and move on."""
    if state.step is Step.PROMOTIONS and state.ticket_id == ticket.id:
        return state
    ensure_step(state, "book tickets", Step.SELECT)
    if not state.has_selection:
        raise InvalidTransitionError(state.step.value, "book tickets without a selection")
    state = replace(state, ticket_id=ticket.id, ticket_code=ticket.ticket_code)
    return enter_promotions(state)


def enter_promotions(state: BookingState) -> BookingState:
    ensure_step(state, "continue to promotions", Step.SELECT)
    if state.ticket_id is None:
        raise InvalidTransitionError(state.step.value, "continue without a ticket")
    return replace(state, step=Step.PROMOTIONS, last_error=None)


def ensure_promotion_allowed(state: BookingState) -> None:
    ensure_step(state, "apply a promotion", Step.PROMOTIONS)
    if state.loyalty_applied:
        raise InvalidTransitionError(
            state.step.value, "apply a promotion after redeeming loyalty points"
        )


def apply_discount(
    state: BookingState,
    code: str,
    discounted_total: Money,
    cap_rate: Decimal = pricing.DEFAULT_REDEMPTION_CAP,
) -> BookingState:
    """Record a promotion; discounted_total is the ticket total after the code."""
    ensure_promotion_allowed(state)
    subtotal = state.subtotal()
    discount = Money(amount=max(Decimal("0"), subtotal.amount - discounted_total.amount))
    state = replace(state, discount_code=code, discount=discount, last_error=None)
    # a bigger discount lowers the redemption cap
    points = pricing.clamp_redemption(
        state.loyalty_points.value, state.discounted_amount(), cap_rate=cap_rate
    )
    return replace(state, loyalty_points=points)


def set_loyalty_points(
    state: BookingState,
    requested: int,
    balance: LoyaltyPoints | None = None,
    cap_rate: Decimal = pricing.DEFAULT_REDEMPTION_CAP,
) -> BookingState:
    ensure_step(state, "change loyalty points", Step.PROMOTIONS)
    if state.loyalty_applied:
        raise InvalidTransitionError(state.step.value, "change loyalty points after redeeming them")
    points = pricing.clamp_redemption(requested, state.discounted_amount(), balance, cap_rate)
    return replace(state, loyalty_points=points)


def mark_loyalty_applied(state: BookingState) -> BookingState:
    ensure_step(state, "redeem loyalty points", Step.PROMOTIONS)
    return replace(state, loyalty_applied=True)


def begin_payment(state: BookingState) -> BookingState:
    ensure_step(state, "continue to payment", Step.PROMOTIONS)
    return replace(state, step=Step.PAYMENT, last_error=None)


def record_payment_attempt(
    state: BookingState, reference: str | None = None, error: str | None = None
) -> BookingState:
    ensure_step(state, "pay", Step.PAYMENT)
    return replace(
        state,
        payment_attempts=state.payment_attempts + 1,
        payment_reference=reference or state.payment_reference,
        last_error=error,
    )


def complete_payment(
    state: BookingState,
    amount_paid: Money,
    reference: str | None = None,
    earn_rate: Decimal = pricing.DEFAULT_EARN_RATE,
) -> BookingState:
    ensure_step(state, "confirm payment", Step.PAYMENT)
    return replace(
        state,
        step=Step.CONFIRMATION,
        payment_reference=reference or state.payment_reference,
        amount_paid=amount_paid,
        points_earned=pricing.points_earned(amount_paid, earn_rate),
        last_error=None,
    )


def go_back(state: BookingState) -> BookingState:
    if not state.can_go_back:
        action = "go back after redeeming loyalty points" if state.loyalty_applied else "go back"
        raise InvalidTransitionError(state.step.value, action)
    previous = Step.SELECT if state.step is Step.PROMOTIONS else Step.PROMOTIONS
    return replace(state, step=previous, last_error=None)


def cancel(state: BookingState) -> BookingState:
    if not state.can_cancel:
        action = "cancel after redeeming loyalty points" if state.loyalty_applied else "cancel"
        raise InvalidTransitionError(state.step.value, action)
    return replace(state, step=Step.CANCELLED)


def summary(
    state: BookingState,
    earn_rate: Decimal = pricing.DEFAULT_EARN_RATE,
    cap_rate: Decimal = pricing.DEFAULT_REDEMPTION_CAP,
) -> BookingSummary | None:
    """Price breakdown for the current state, or None before a tier is chosen."""
    if not state.has_selection:
        return None
    result = pricing.calculate_summary(
        Quantity(value=state.quantity),
        state.unit_price,
        loyalty_points=state.loyalty_points,
        discount=state.discount,
        earn_rate=earn_rate,
        cap_rate=cap_rate,
    )
    if state.points_earned is not None:
        result = replace(result, loyalty_points_earned=state.points_earned)
    return result
