"""Unit tests for the service layer.

These test orchestration, idempotency and domain error mapping against an
in-memory ticketing API.
Run with: pytest tests/test_services.py -v
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from booking.domain import (
    LoyaltyPoints,
    LoyaltyTransaction,
    Money,
    PaymentRecord,
    PaymentSessionStatus,
    TicketId,
)
from booking.domain.errors import (
    BookingNotFoundError,
    EventNotFoundError,
    InvalidIdError,
    InvalidInputError,
    InvalidTransitionError,
    MarkPaidDisabledError,
    PaymentFailedError,
    PriceNotFoundError,
    PromotionRejectedError,
    UpstreamUnavailableError,
)
from booking.domain.wizard import Step
from booking.services import (
    AccountService,
    BookingService,
    EventService,
    LoyaltyService,
    PaymentService,
    TicketService,
)

from tests.fakes import EVENT_ID, GENERAL_PRICE_ID, MISSING_ID, VIP_PRICE_ID


@pytest.fixture
def service(session_store, fake_api) -> BookingService:
    return BookingService(session_store, fake_api, allow_mark_paid=True)


@pytest.fixture
def booking_id(service) -> str:
    return str(service.start(str(EVENT_ID)).id)


@pytest.fixture
def booked(service, booking_id) -> str:
    service.select(booking_id, str(VIP_PRICE_ID), 2)
    service.book(booking_id)
    return booking_id


@pytest.fixture
def at_payment(service, booked) -> str:
    service.checkout(booked)
    return booked


class TestEventService:
    """Tests for EventService."""

    def test_get_event_invalid_id_raises_error(self, fake_api):
        with pytest.raises(InvalidIdError):
            EventService(fake_api).get_event("not-a-uuid")

    def test_get_event_not_found_raises_error(self, fake_api):
        with pytest.raises(EventNotFoundError):
            EventService(fake_api).get_event(MISSING_ID)

    def test_get_event_returns_prices(self, fake_api):
        event = EventService(fake_api).get_event(str(EVENT_ID))
        assert [p.category for p in event.prices] == ["VIP", "General", "Balcony"]


class TestBookingFlow:
    """Tests for the select -> promotions -> payment -> confirmation flow."""

    def test_start_unknown_event_raises_error(self, service):
        with pytest.raises(EventNotFoundError):
            service.start(MISSING_ID)

    def test_get_unknown_booking_raises_error(self, service):
        with pytest.raises(BookingNotFoundError):
            service.get(MISSING_ID)

    def test_get_malformed_booking_id_raises_error(self, service):
        with pytest.raises(InvalidIdError):
            service.get("nope")

    def test_select_unknown_price_raises_error(self, service, booking_id):
        with pytest.raises(PriceNotFoundError):
            service.select(booking_id, MISSING_ID, 1)

    def test_select_checks_live_stock(self, service, booking_id, fake_api):
        """Selection re-reads the event so stock is current even when cached."""
        fake_api.calls.clear()

        service.select(booking_id, str(VIP_PRICE_ID), 2)

        assert fake_api.call_count("get_event") == 1

    def test_full_flow_with_loyalty_points(self, service, booked, fake_api):
        """Two tickets at 4465 with 2000 points: pay 6930 and earn 693."""
        service.set_loyalty_points(booked, 2000)
        service.checkout(booked)
        state = service.pay(booked, payment_method="card", payment_token="tok_visa")

        assert state.step is Step.CONFIRMATION
        assert state.amount_paid == Money(amount=Decimal("6930"))
        assert state.points_earned.value == 693
        assert state.payment_reference == "txn_123"
        assert fake_api.tickets[state.ticket_id].is_paid

    def test_book_sends_selection_scoped_idempotency_key(self, service, booked, fake_api):
        call = next(c for c in fake_api.calls if c[0] == "book_ticket")
        assert call[2] == f"{booked}:1"
        assert call[1].quantity.value == 2

    def test_book_twice_creates_one_ticket(self, service, booked, fake_api):
        service.book(booked)
        assert fake_api.call_count("book_ticket") == 1
        assert len(fake_api.tickets) == 1

    def test_book_without_selection_is_rejected(self, service, booking_id):
        with pytest.raises(InvalidTransitionError):
            service.book(booking_id)

    def test_promotion_reprices_booking(self, service, booked):
        state = service.apply_promotion(booked, "SAVE10")
        assert state.discount == Money(amount=Decimal("893"))
        assert service.summary(state).total == Money(amount=Decimal("8037"))

    def test_same_promotion_is_applied_once(self, service, booked, fake_api):
        service.apply_promotion(booked, "SAVE10")
        service.apply_promotion(booked, " SAVE10 ")
        assert fake_api.call_count("apply_promotion") == 1

    def test_rejected_promotion_raises_error(self, service, booked):
        with pytest.raises(PromotionRejectedError):
            service.apply_promotion(booked, "BOGUS")

    def test_blank_promotion_is_rejected(self, service, booked, fake_api):
        with pytest.raises(InvalidInputError):
            service.apply_promotion(booked, "   ")
        assert fake_api.call_count("apply_promotion") == 0

    def test_points_are_clamped_to_balance(self, service, booked, fake_api):
        fake_api.balance = 300
        assert service.set_loyalty_points(booked, 2000).loyalty_points.value == 300

    def test_zero_points_skip_balance_lookup(self, service, booked, fake_api):
        service.set_loyalty_points(booked, 0)
        assert fake_api.call_count("get_loyalty_balance") == 0

    def test_checkout_redeems_points_once(self, service, booked, fake_api):
        service.set_loyalty_points(booked, 2000)
        service.checkout(booked)
        state = service.checkout(booked)

        assert state.step is Step.PAYMENT
        assert state.loyalty_applied
        assert fake_api.call_count("use_loyalty_points") == 1
        assert fake_api.balance == 3000

    def test_checkout_without_points_skips_redemption(self, service, booked, fake_api):
        service.checkout(booked)
        assert fake_api.call_count("use_loyalty_points") == 0

    def test_back_and_reselect_drops_unpaid_ticket(self, service, booked, fake_api):
        first_ticket = service.get(booked).ticket_id
        service.go_back(booked)
        service.select(booked, str(GENERAL_PRICE_ID), 1)
        state = service.book(booked)

        assert state.ticket_id != first_ticket
        assert fake_api.call_count("book_ticket") == 2

    def test_reselecting_original_tier_books_a_fresh_ticket(self, service, booked, fake_api):
        first_ticket = service.get(booked).ticket_id
        service.go_back(booked)
        service.select(booked, str(GENERAL_PRICE_ID), 1)
        service.select(booked, str(VIP_PRICE_ID), 2)
        state = service.book(booked)

        keys = [c[2] for c in fake_api.calls if c[0] == "book_ticket"]
        assert len(keys) == 2
        assert len(set(keys)) == 2
        assert state.ticket_id != first_ticket

    def test_price_change_upstream_rebooks_at_new_price(self, service, booked, fake_api):
        event = fake_api.events[EVENT_ID]
        prices = tuple(
            replace(p, price=Money(amount=Decimal("5000"))) if p.id == VIP_PRICE_ID else p
            for p in event.prices
        )
        fake_api.events[EVENT_ID] = replace(event, prices=prices)
        first_ticket = service.get(booked).ticket_id

        service.go_back(booked)
        service.select(booked, str(VIP_PRICE_ID), 2)
        state = service.book(booked)

        assert state.ticket_id != first_ticket
        assert fake_api.tickets[state.ticket_id].total_amount == Money(amount=Decimal("10000"))
        assert service.summary(state).total == Money(amount=Decimal("10000"))

    def test_redeemed_points_lock_the_booking(self, service, booked, fake_api):
        service.set_loyalty_points(booked, 2000)
        service.checkout(booked)

        with pytest.raises(InvalidTransitionError):
            service.go_back(booked)
        with pytest.raises(InvalidTransitionError):
            service.cancel(booked)
        assert service.get(booked).step is Step.PAYMENT

    def test_promotion_after_redeeming_points_is_rejected(
        self, service, booked, session_store, fake_api
    ):
        state = service.get(booked)
        session_store.save(
            replace(state, loyalty_points=LoyaltyPoints(value=2000), loyalty_applied=True)
        )

        with pytest.raises(InvalidTransitionError):
            service.apply_promotion(booked, "SAVE10")
        assert fake_api.call_count("apply_promotion") == 0

    def test_selection_change_after_redeeming_points_is_rejected(
        self, service, booked, session_store, fake_api
    ):
        state = service.get(booked)
        session_store.save(
            replace(
                state,
                step=Step.SELECT,
                loyalty_points=LoyaltyPoints(value=2000),
                loyalty_applied=True,
            )
        )

        with pytest.raises(InvalidTransitionError):
            service.select(booked, str(GENERAL_PRICE_ID), 1)
        assert service.get(booked).ticket_id == state.ticket_id

    def test_cancel_after_checkout_is_rejected(self, service, at_payment):
        with pytest.raises(InvalidTransitionError):
            service.cancel(at_payment)


class TestPayment:
    """Tests for payment failures and duplicate submissions."""

    def test_pay_twice_charges_once(self, service, at_payment, fake_api):
        service.pay(at_payment)
        state = service.pay(at_payment)
        assert state.step is Step.CONFIRMATION
        assert fake_api.call_count("process_payment") == 1

    def test_failed_payment_can_be_retried(self, service, at_payment, fake_api):
        fake_api.payment_error = PaymentFailedError("Card declined")
        with pytest.raises(PaymentFailedError):
            service.pay(at_payment)

        state = service.get(at_payment)
        assert state.step is Step.PAYMENT
        assert state.payment_attempts == 1
        assert state.last_error == "Card declined"
        assert not fake_api.tickets[state.ticket_id].is_paid

        fake_api.payment_error = None
        state = service.pay(at_payment)
        assert state.step is Step.CONFIRMATION
        assert state.payment_attempts == 2
        assert state.last_error is None

    def test_upstream_outage_during_payment_is_recorded(self, service, at_payment, fake_api):
        fake_api.payment_error = UpstreamUnavailableError()
        with pytest.raises(UpstreamUnavailableError):
            service.pay(at_payment)
        assert service.get(at_payment).payment_attempts == 1

    def test_declined_result_raises_payment_failed(self, service, at_payment, fake_api):
        fake_api.payment_declined = True
        with pytest.raises(PaymentFailedError):
            service.pay(at_payment)
        state = service.get(at_payment)
        assert state.last_error == "Payment declined"
        assert state.payment_reference == "txn_declined"

    def test_back_after_failed_payment_is_rejected(self, service, at_payment, fake_api):
        fake_api.payment_error = PaymentFailedError()
        with pytest.raises(PaymentFailedError):
            service.pay(at_payment)
        with pytest.raises(InvalidTransitionError):
            service.go_back(at_payment)

    def test_pay_before_checkout_is_rejected(self, service, booked, fake_api):
        with pytest.raises(InvalidTransitionError):
            service.pay(booked)
        assert fake_api.call_count("process_payment") == 0

    def test_confirm_paid_session(self, service, at_payment, fake_api):
        ticket_id = service.get(at_payment).ticket_id
        fake_api.sessions["cs_1"] = PaymentSessionStatus(
            session_id="cs_1", ticket_id=ticket_id, status="paid", is_paid=True
        )

        state = service.confirm_session(at_payment, "cs_1")

        assert state.step is Step.CONFIRMATION
        assert state.payment_reference == "cs_1"
        assert state.amount_paid == Money(amount=Decimal("8930"))
        assert state.points_earned.value == 893

    def test_confirm_unpaid_session_raises_error(self, service, at_payment, fake_api):
        ticket_id = service.get(at_payment).ticket_id
        fake_api.sessions["cs_2"] = PaymentSessionStatus(
            session_id="cs_2", ticket_id=ticket_id, status="open", is_paid=False
        )
        with pytest.raises(PaymentFailedError):
            service.confirm_session(at_payment, "cs_2")
        assert service.get(at_payment).step is Step.PAYMENT

    def test_confirm_session_for_other_ticket_is_rejected(self, service, at_payment, fake_api):
        fake_api.sessions["cs_3"] = PaymentSessionStatus(
            session_id="cs_3",
            ticket_id=TicketId.from_string(MISSING_ID),
            status="paid",
            is_paid=True,
        )
        with pytest.raises(InvalidInputError):
            service.confirm_session(at_payment, "cs_3")

    def test_mark_paid_confirms_booking(self, service, at_payment, fake_api):
        state = service.mark_paid(at_payment)
        assert state.step is Step.CONFIRMATION
        assert state.payment_reference == "manual"
        assert fake_api.tickets[state.ticket_id].is_paid

    def test_mark_paid_disabled(self, session_store, fake_api, at_payment):
        service = BookingService(session_store, fake_api, allow_mark_paid=False)
        with pytest.raises(MarkPaidDisabledError):
            service.mark_paid(at_payment)
        assert fake_api.call_count("mark_paid") == 0


class TestLoyaltyService:
    def test_quote_uses_smaller_of_balance_and_cap(self, service, booked, fake_api):
        fake_api.balance = 10000
        quote = LoyaltyService(fake_api).quote(service.get(booked))
        assert quote.amount == Money(amount=Decimal("8930"))
        assert quote.max_redeemable.value == 4465
        assert quote.selected.value == 0

    def test_quote_after_promotion_uses_discounted_amount(self, service, booked, fake_api):
        state = service.apply_promotion(booked, "SAVE10")
        quote = LoyaltyService(fake_api).quote(state)
        assert quote.max_redeemable.value == 4018

    def test_balance_passthrough(self, fake_api):
        assert LoyaltyService(fake_api).get_balance().balance.value == 5000

    def test_history_passthrough(self, fake_api):
        fake_api.loyalty_entries = [
            LoyaltyTransaction(
                id="l-1",
                points=LoyaltyPoints(value=693),
                kind="Earned",
                description="Colombo Jazz Night",
                occurred_at=None,
            )
        ]
        history = LoyaltyService(fake_api).get_history()
        assert [e.points.value for e in history.entries] == [693]


class TestAccountService:
    def test_request_reset_normalises_email(self, fake_api):
        AccountService(fake_api).request_reset("  Nimal@Example.com ")
        assert fake_api.calls[-1] == ("forgot_password", "nimal@example.com")

    def test_request_reset_rejects_bad_email(self, fake_api):
        with pytest.raises(InvalidInputError):
            AccountService(fake_api).request_reset("not-an-email")
        assert fake_api.calls == []

    @pytest.mark.parametrize(
        "email", ["user@example..com", "user@@example.com", "user@example", " @example.com"]
    )
    def test_request_reset_rejects_malformed_email(self, fake_api, email):
        with pytest.raises(InvalidInputError):
            AccountService(fake_api).request_reset(email)
        assert fake_api.call_count("forgot_password") == 0

    def test_verify_otp(self, fake_api):
        service = AccountService(fake_api)
        assert service.verify_otp("nimal@example.com", "123456")
        assert not service.verify_otp("nimal@example.com", "654321")

    def test_verify_rejects_non_numeric_otp(self, fake_api):
        with pytest.raises(InvalidInputError):
            AccountService(fake_api).verify_otp("nimal@example.com", "12ab")

    def test_reset_password_requires_strong_password(self, fake_api):
        with pytest.raises(InvalidInputError):
            AccountService(fake_api).reset_password("nimal@example.com", "123456", "password")

    def test_reset_password(self, fake_api):
        AccountService(fake_api).reset_password("nimal@example.com", "123456", "Secret123")
        assert fake_api.calls[-1] == ("reset_password", "nimal@example.com", "123456", "Secret123")


class TestTicketService:
    def test_history_pages_through_tickets(self, service, booked, fake_api):
        page = TicketService(fake_api).history(page=1, page_size=10)
        assert page.total_count == 1
        assert page.items[0].ticket_code == "CODE1"
        assert fake_api.calls[-1] == ("get_ticket_history", 1, 10)

    @pytest.mark.parametrize("page,page_size", [(0, 10), (1, 0), (1, 101)])
    def test_history_rejects_out_of_range_paging(self, fake_api, page, page_size):
        with pytest.raises(InvalidInputError):
            TicketService(fake_api).history(page=page, page_size=page_size)
        assert fake_api.call_count("get_ticket_history") == 0

    def test_validate_paid_ticket(self, service, at_payment, fake_api):
        service.pay(at_payment)
        result = TicketService(fake_api).validate(" CODE1 ")
        assert result.is_valid
        assert result.ticket.ticket_code == "CODE1"
        assert fake_api.calls[-1] == ("validate_ticket", "CODE1")

    def test_validate_unknown_code_is_not_valid(self, fake_api):
        result = TicketService(fake_api).validate("NOPE")
        assert not result.is_valid
        assert result.ticket is None

    @pytest.mark.parametrize("code", ["", "   ", "X" * 65])
    def test_validate_rejects_malformed_code(self, fake_api, code):
        with pytest.raises(InvalidInputError):
            TicketService(fake_api).validate(code)
        assert fake_api.call_count("validate_ticket") == 0

    def test_qr_code_rejects_malformed_ticket_id(self, fake_api):
        with pytest.raises(InvalidIdError):
            TicketService(fake_api).qr_code("not-a-uuid")
        assert fake_api.call_count("get_ticket_qr_code") == 0


class TestPaymentService:
    def test_history_passthrough(self, fake_api):
        fake_api.payments = [
            PaymentRecord(
                id="p-1",
                ticket_id=None,
                amount=Money(amount=Decimal("6930")),
                currency="LKR",
                status="Completed",
                payment_method="card",
                transaction_id="txn_123",
                created_at=None,
            )
        ]
        assert [p.transaction_id for p in PaymentService(fake_api).history()] == ["txn_123"]
