"""Django ORM implementation of the BookingSessionStore."""

from booking import models
from booking.domain import (
    BookingId,
    EventId,
    EventPriceId,
    LoyaltyPoints,
    Money,
    TicketId,
)
from booking.domain.wizard import BookingState, Step
from booking.stores.interfaces import BookingSessionStore


def _to_domain(row: models.BookingSession) -> BookingState:
    return BookingState(
        id=BookingId(value=row.id),
        event_id=EventId(value=row.event_id),
        step=Step(row.step),
        event_price_id=EventPriceId(value=row.event_price_id) if row.event_price_id else None,
        price_category=row.price_category,
        unit_price=Money(amount=row.unit_price) if row.unit_price is not None else None,
        quantity=row.quantity,
        ticket_id=TicketId(value=row.ticket_id) if row.ticket_id else None,
        ticket_code=row.ticket_code,
        discount_code=row.discount_code,
        discount=Money(amount=row.discount),
        loyalty_points=LoyaltyPoints(value=row.loyalty_points),
        loyalty_applied=row.loyalty_applied,
        selection_version=row.selection_version,
        payment_attempts=row.payment_attempts,
        payment_reference=row.payment_reference,
        amount_paid=Money(amount=row.amount_paid) if row.amount_paid is not None else None,
        points_earned=(
            LoyaltyPoints(value=row.points_earned) if row.points_earned is not None else None
        ),
        last_error=row.last_error,
    )


class DjangoBookingSessionStore(BookingSessionStore):
    """Database-backed wizard state using Django ORM."""

    def get(self, booking_id: BookingId) -> BookingState | None:
        row = models.BookingSession.objects.filter(pk=booking_id.value).first()
        if row is None:
            return None
        return _to_domain(row)

    def save(self, state: BookingState) -> BookingState:
        row, _ = models.BookingSession.objects.update_or_create(
            pk=state.id.value,
            defaults={
                "event_id": state.event_id.value,
                "step": state.step.value,
                "event_price_id": state.event_price_id.value if state.event_price_id else None,
                "price_category": state.price_category,
                "unit_price": state.unit_price.amount if state.unit_price else None,
                "quantity": state.quantity,
                "ticket_id": state.ticket_id.value if state.ticket_id else None,
                "ticket_code": state.ticket_code,
                "discount_code": state.discount_code,
                "discount": state.discount.amount,
                "loyalty_points": state.loyalty_points.value,
                "loyalty_applied": state.loyalty_applied,
                "selection_version": state.selection_version,
                "payment_attempts": state.payment_attempts,
                "payment_reference": state.payment_reference,
                "amount_paid": state.amount_paid.amount if state.amount_paid else None,
                "points_earned": state.points_earned.value if state.points_earned else None,
                "last_error": (state.last_error or "")[:500] or None,
            },
        )
        return _to_domain(row)
