"""Unit tests for the booking wizard state machine.

Run with: pytest tests/test_wizard.py -v
"""

import uuid
from dataclasses import replace
from decimal import Decimal

import pytest

from booking.domain import BookingId, LoyaltyPoints, Money, Ticket, TicketId
from booking.domain import wizard
from booking.domain.errors import (
    InvalidQuantityError,
    InvalidTransitionError,
    PriceUnavailableError,
)
from booking.domain.wizard import Step

from tests.fakes import EVENT_ID, GENERAL_PRICE_ID, SOLD_OUT_PRICE_ID, VIP_PRICE_ID, make_event

EVENT = make_event()
VIP = EVENT.find_price(VIP_PRICE_ID)
GENERAL = EVENT.find_price(GENERAL_PRICE_ID)


def make_ticket(quantity: int = 2, total: str = "8930") -> Ticket:
    return Ticket(
        id=TicketId(value=uuid.uuid4()),
        event_id=EVENT_ID,
        event_price_id=VIP_PRICE_ID,
        ticket_number="TKT-0001",
        ticket_code="CODE1",
        quantity=quantity,
        total_amount=Money(amount=Decimal(total)),
        is_paid=False,
    )


@pytest.fixture
def fresh():
    return wizard.start(BookingId(value=uuid.uuid4()), EVENT_ID)


@pytest.fixture
def in_promotions(fresh):
    state = wizard.select_price(fresh, VIP, 2)
    return wizard.record_ticket(state, make_ticket())


@pytest.fixture
def in_payment(in_promotions):
    return wizard.begin_payment(in_promotions)


class TestSelection:
    """Tests for the select step."""

    def test_start_is_at_select_without_summary(self, fresh):
        assert fresh.step is Step.SELECT
        assert wizard.summary(fresh) is None

    def test_select_records_tier_and_quantity(self, fresh):
        state = wizard.select_price(fresh, VIP, 2)
        assert state.event_price_id == VIP_PRICE_ID
        assert state.price_category == "VIP"
        assert state.subtotal() == Money(amount=Decimal("8930"))

    def test_quantity_above_stock_is_rejected(self, fresh):
        with pytest.raises(InvalidQuantityError):
            wizard.select_price(fresh, VIP, 11)

    def test_zero_quantity_is_rejected(self, fresh):
        with pytest.raises(InvalidQuantityError):
            wizard.select_price(fresh, VIP, 0)

    def test_sold_out_tier_is_rejected(self, fresh):
        with pytest.raises(PriceUnavailableError):
            wizard.select_price(fresh, EVENT.find_price(SOLD_OUT_PRICE_ID), 1)

    def test_book_requires_selection(self, fresh):
        with pytest.raises(InvalidTransitionError):
            wizard.record_ticket(fresh, make_ticket())

    def test_recording_ticket_moves_to_promotions(self, in_promotions):
        assert in_promotions.step is Step.PROMOTIONS
        assert in_promotions.ticket_code == "CODE1"

    def test_recording_same_ticket_twice_is_a_no_op(self, in_promotions):
        ticket = replace(make_ticket(), id=in_promotions.ticket_id)
        assert wizard.record_ticket(in_promotions, ticket) == in_promotions


class TestPromotions:
    def test_discount_is_derived_from_repriced_total(self, in_promotions):
        state = wizard.apply_discount(in_promotions, "SAVE10", Money(amount=Decimal("8037")))
        assert state.discount_code == "SAVE10"
        assert state.discount == Money(amount=Decimal("893"))
        assert state.discounted_amount() == Money(amount=Decimal("8037"))

    def test_loyalty_points_are_clamped_to_cap_and_balance(self, in_promotions):
        state = wizard.set_loyalty_points(in_promotions, 9000)
        assert state.loyalty_points.value == 4465

        state = wizard.set_loyalty_points(in_promotions, 3000, LoyaltyPoints(value=1200))
        assert state.loyalty_points.value == 1200

    def test_discount_after_points_reclamps_points(self, in_promotions):
        state = wizard.set_loyalty_points(in_promotions, 4465)
        state = wizard.apply_discount(state, "SAVE10", Money(amount=Decimal("8037")))
        assert state.loyalty_points.value == 4018

    def test_summary_reflects_points(self, in_promotions):
        state = wizard.set_loyalty_points(in_promotions, 2000)
        summary = wizard.summary(state)
        assert summary.total == Money(amount=Decimal("6930"))
        assert summary.loyalty_points_earned.value == 693

    def test_points_cannot_change_once_redeemed(self, in_promotions):
        state = wizard.set_loyalty_points(in_promotions, 2000)
        state = wizard.mark_loyalty_applied(state)
        with pytest.raises(InvalidTransitionError):
            wizard.set_loyalty_points(state, 100)

    def test_promotion_not_allowed_at_select(self, fresh):
        with pytest.raises(InvalidTransitionError):
            wizard.apply_discount(fresh, "SAVE10", Money.zero())


class TestNavigation:
    """Tests for back and cancel rules."""

    def test_back_from_promotions_returns_to_select(self, in_promotions):
        state = wizard.go_back(in_promotions)
        assert state.step is Step.SELECT
        assert state.ticket_id == in_promotions.ticket_id

    def test_back_from_payment_before_any_attempt(self, in_payment):
        assert wizard.go_back(in_payment).step is Step.PROMOTIONS

    def test_back_from_payment_after_attempt_is_rejected(self, in_payment):
        state = wizard.record_payment_attempt(in_payment, error="Card declined")
        assert not state.can_go_back
        with pytest.raises(InvalidTransitionError):
            wizard.go_back(state)

    def test_back_from_select_is_rejected(self, fresh):
        with pytest.raises(InvalidTransitionError):
            wizard.go_back(fresh)

    @pytest.mark.parametrize("fixture_name", ["fresh", "in_promotions"])
    def test_cancel_allowed_before_payment(self, request, fixture_name):
        state = request.getfixturevalue(fixture_name)
        assert wizard.cancel(state).step is Step.CANCELLED

    def test_cancel_rejected_at_payment(self, in_payment):
        with pytest.raises(InvalidTransitionError):
            wizard.cancel(in_payment)

    def test_changing_selection_drops_ticket_promotion_and_points(self, in_promotions):
        state = wizard.apply_discount(in_promotions, "SAVE10", Money(amount=Decimal("8037")))
        state = wizard.set_loyalty_points(state, 1000)
        state = wizard.go_back(state)

        state = wizard.select_price(state, GENERAL, 1)

        assert state.ticket_id is None
        assert state.discount_code is None
        assert state.discount == Money.zero()
        assert state.loyalty_points.value == 0

    def test_reselecting_same_tier_keeps_ticket(self, in_promotions):
        state = wizard.select_price(wizard.go_back(in_promotions), VIP, 2)
        assert state.ticket_id == in_promotions.ticket_id
        assert wizard.enter_promotions(state).step is Step.PROMOTIONS
        assert state.idempotency_key == in_promotions.idempotency_key

    def test_new_selection_gets_a_new_idempotency_key(self, in_promotions):
        state = wizard.select_price(wizard.go_back(in_promotions), GENERAL, 1)
        assert state.idempotency_key != in_promotions.idempotency_key

        state = wizard.select_price(state, VIP, 2)
        assert state.idempotency_key not in (
            in_promotions.idempotency_key,
            f"{in_promotions.id}:0",
        )

    def test_upstream_price_change_drops_ticket(self, in_promotions):
        state = wizard.set_loyalty_points(in_promotions, 4000)
        repriced = replace(VIP, price=Money(amount=Decimal("5000")))

        state = wizard.select_price(wizard.go_back(state), repriced, 2)

        assert state.ticket_id is None
        assert state.loyalty_points.value == 0
        assert state.subtotal() == Money(amount=Decimal("10000"))
        assert wizard.summary(state).total == Money(amount=Decimal("10000"))


class TestRedeemedPoints:
    """Once points are spent on the ticket the booking is fixed to it."""

    @pytest.fixture
    def redeemed(self, in_promotions):
        state = wizard.set_loyalty_points(in_promotions, 2000)
        return wizard.mark_loyalty_applied(state)

    def test_promotion_is_rejected(self, redeemed):
        with pytest.raises(InvalidTransitionError):
            wizard.apply_discount(redeemed, "SAVE10", Money(amount=Decimal("6037")))

    def test_cancel_is_rejected(self, redeemed):
        assert not redeemed.can_cancel
        with pytest.raises(InvalidTransitionError):
            wizard.cancel(redeemed)

    def test_back_from_payment_is_rejected(self, redeemed):
        state = wizard.begin_payment(redeemed)
        assert not state.can_go_back
        with pytest.raises(InvalidTransitionError):
            wizard.go_back(state)

    def test_selection_cannot_change(self, redeemed):
        state = wizard.go_back(redeemed)
        with pytest.raises(InvalidTransitionError):
            wizard.select_price(state, GENERAL, 1)

    def test_same_selection_keeps_ticket_and_points(self, redeemed):
        state = wizard.select_price(wizard.go_back(redeemed), VIP, 2)
        assert state.ticket_id == redeemed.ticket_id
        assert state.loyalty_points.value == 2000
        assert state.loyalty_applied


class TestPayment:
    def test_failed_attempt_stays_at_payment(self, in_payment):
        state = wizard.record_payment_attempt(in_payment, error="Card declined")
        assert state.step is Step.PAYMENT
        assert state.payment_attempts == 1
        assert state.last_error == "Card declined"

    def test_complete_payment_confirms_and_awards_points(self, in_payment):
        state = wizard.record_payment_attempt(in_payment, reference="txn_1")
        state = wizard.complete_payment(state, Money(amount=Decimal("6930")))

        assert state.step is Step.CONFIRMATION
        assert state.payment_reference == "txn_1"
        assert state.points_earned.value == 693
        assert state.is_finished
        assert not state.can_cancel

    def test_summary_uses_points_actually_earned(self, in_payment):
        state = wizard.complete_payment(in_payment, Money(amount=Decimal("1000")))
        assert wizard.summary(state).loyalty_points_earned.value == 100

    def test_pay_not_allowed_before_checkout(self, in_promotions):
        with pytest.raises(InvalidTransitionError):
            wizard.complete_payment(in_promotions, Money.zero())
