"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from booking.domain.errors import DomainError, ErrorCode
from booking.handlers import serializers
from booking.services import (
    AccountService,
    BookingService,
    EventService,
    LoyaltyService,
    PaymentService,
    TicketService,
)
from booking.stores import DjangoBookingSessionStore, EventFilters
from booking.stores.http_store import build_ticketing_api

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PRICE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PRICE_UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.TICKET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_QUANTITY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.LOYALTY_REDEMPTION_REJECTED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.BOOKING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PROMOTION_REJECTED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PAYMENT_FAILED: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorCode.MARK_PAID_DISABLED: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UPSTREAM_UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.UPSTREAM_REJECTED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UPSTREAM_UNAVAILABLE: status.HTTP_502_BAD_GATEWAY,
}


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


class TicketingApiView(APIView):
    """Base view holding a ticketing API client for the caller's token."""

    def initial(self, request: Request, *args, **kwargs) -> None:
        super().initial(request, *args, **kwargs)
        self.api = build_ticketing_api(_bearer_token(request))

    def finalize_response(self, request, response, *args, **kwargs):
        api = getattr(self, "api", None)
        if api is not None:
            api.close()
        return super().finalize_response(request, response, *args, **kwargs)

    def handle_exception(self, exc: Exception) -> Response:
        if isinstance(exc, DomainError):
            http_status = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
            if http_status >= 500:
                logger.error("Request failed: %s", exc)
            else:
                logger.info("Request rejected: %s", exc)
            return Response({"code": exc.code.value, "message": exc.message}, status=http_status)
        if isinstance(exc, ValidationError):
            return Response(
                {
                    "code": ErrorCode.INVALID_INPUT.value,
                    "message": "Please check your input and try again.",
                    "errors": exc.detail,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().handle_exception(exc)

    def parse(self, serializer_class, data) -> dict:
        serializer = serializer_class(data=data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data


class BookingView(TicketingApiView):
    """Base view for booking wizard endpoints."""

    def booking_service(self) -> BookingService:
        return BookingService(DjangoBookingSessionStore(), self.api)

    def booking_payload(self, service: BookingService, state) -> dict:
        summary = service.summary(state)
        return {
            "booking": serializers.BookingStateSerializer(state).data,
            "summary": serializers.BookingSummarySerializer(summary).data if summary else None,
        }


class EventListView(TicketingApiView):
    """Handler for GET /api/events"""

    def get(self, request: Request) -> Response:
        query = self.parse(serializers.EventQuerySerializer, request.query_params)
        events = EventService(self.api).list_events(EventFilters(**query))
        return Response({"results": serializers.EventSerializer(events, many=True).data})


class EventDetailView(TicketingApiView):
    """Handler for GET /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        event = EventService(self.api).get_event(event_id)
        return Response(serializers.EventSerializer(event).data)


class BookingStartView(BookingView):
    """Handler for POST /api/bookings"""

    def post(self, request: Request) -> Response:
        data = self.parse(serializers.StartBookingSerializer, request.data)
        service = self.booking_service()
        state = service.start(data["event_id"])
        return Response(self.booking_payload(service, state), status=status.HTTP_201_CREATED)


class BookingDetailView(BookingView):
    """Handler for GET /api/bookings/{booking_id}"""

    def get(self, request: Request, booking_id: str) -> Response:
        service = self.booking_service()
        return Response(self.booking_payload(service, service.get(booking_id)))


class BookingSelectionView(BookingView):
    """Handler for POST /api/bookings/{booking_id}/selection"""

    def post(self, request: Request, booking_id: str) -> Response:
        data = self.parse(serializers.SelectionSerializer, request.data)
        service = self.booking_service()
        state = service.select(booking_id, data["event_price_id"], data["quantity"])
        return Response(self.booking_payload(service, state))


class BookingPromotionView(BookingView):
    """Handler for POST /api/bookings/{booking_id}/promotion"""

    def post(self, request: Request, booking_id: str) -> Response:
        data = self.parse(serializers.PromotionSerializer, request.data)
        service = self.booking_service()
        state = service.apply_promotion(booking_id, data["discount_code"])
        return Response(self.booking_payload(service, state))


class BookingLoyaltyView(BookingView):
    """Handler for POST /api/bookings/{booking_id}/loyalty"""

    def post(self, request: Request, booking_id: str) -> Response:
        data = self.parse(serializers.LoyaltyPointsSerializer, request.data)
        service = self.booking_service()
        state = service.set_loyalty_points(booking_id, data["points"])
        return Response(self.booking_payload(service, state))


class BookingLoyaltyQuoteView(BookingView):
    """Handler for GET /api/bookings/{booking_id}/loyalty-quote"""

    def get(self, request: Request, booking_id: str) -> Response:
        state = self.booking_service().get(booking_id)
        quote = LoyaltyService(self.api).quote(state)
        return Response(serializers.LoyaltyQuoteSerializer(quote).data)


class BookingPaymentView(BookingView):
    """Handler for POST /api/bookings/{booking_id}/payment"""

    def post(self, request: Request, booking_id: str) -> Response:
        data = self.parse(serializers.PaymentSerializer, request.data)
        service = self.booking_service()
        state = service.pay(
            booking_id,
            payment_method=data.get("payment_method") or None,
            payment_token=data.get("payment_token") or None,
        )
        return Response(self.booking_payload(service, state))


class BookingPaymentSessionView(BookingView):
    """Handler for POST /api/bookings/{booking_id}/payment-session"""

    def post(self, request: Request, booking_id: str) -> Response:
        data = self.parse(serializers.PaymentSessionSerializer, request.data)
        service = self.booking_service()
        state = service.confirm_session(booking_id, data["session_id"])
        return Response(self.booking_payload(service, state))


class BookingActionView(BookingView):
    """Handler for body-less wizard steps; service_method names the BookingService call."""

    service_method = ""

    def post(self, request: Request, booking_id: str) -> Response:
        service = self.booking_service()
        state = getattr(service, self.service_method)(booking_id)
        return Response(self.booking_payload(service, state))


class BookingTicketView(BookingActionView):
    """Handler for POST /api/bookings/{booking_id}/ticket"""

    service_method = "book"


class BookingCheckoutView(BookingActionView):
    """Handler for POST /api/bookings/{booking_id}/checkout"""

    service_method = "checkout"


class BookingMarkPaidView(BookingActionView):
    """Handler for POST /api/bookings/{booking_id}/mark-paid"""

    service_method = "mark_paid"


class BookingBackView(BookingActionView):
    """Handler for POST /api/bookings/{booking_id}/back"""

    service_method = "go_back"


class BookingCancelView(BookingActionView):
    """Handler for POST /api/bookings/{booking_id}/cancel"""

    service_method = "cancel"


class LoyaltyBalanceView(TicketingApiView):
    """Handler for GET /api/loyalty/balance"""

    def get(self, request: Request) -> Response:
        balance = LoyaltyService(self.api).get_balance()
        return Response(serializers.LoyaltyBalanceSerializer(balance).data)


class LoyaltyHistoryView(TicketingApiView):
    """Handler for GET /api/loyalty/history"""

    def get(self, request: Request) -> Response:
        history = LoyaltyService(self.api).get_history()
        return Response(serializers.LoyaltyHistorySerializer(history).data)


class TicketHistoryView(TicketingApiView):
    """Handler for GET /api/tickets/history"""

    def get(self, request: Request) -> Response:
        query = self.parse(serializers.TicketHistoryQuerySerializer, request.query_params)
        page = TicketService(self.api).history(query["page"], query["page_size"])
        return Response(serializers.TicketPageSerializer(page).data)


class TicketValidationView(TicketingApiView):
    """Handler for GET /api/tickets/validate/{ticket_code}"""

    def get(self, request: Request, ticket_code: str) -> Response:
        result = TicketService(self.api).validate(ticket_code)
        return Response(serializers.TicketValidationSerializer(result).data)


class TicketQrCodeView(TicketingApiView):
    """Handler for GET /api/tickets/{ticket_id}/qrcode"""

    def get(self, request: Request, ticket_id: str) -> HttpResponse:
        parsed, content = TicketService(self.api).qr_code(ticket_id)
        response = HttpResponse(content, content_type="image/png")
        response["Content-Disposition"] = f'inline; filename="ticket-{parsed}.png"'
        return response


class PaymentHistoryView(TicketingApiView):
    """Handler for GET /api/payments/history"""

    def get(self, request: Request) -> Response:
        payments = PaymentService(self.api).history()
        return Response(
            {"results": serializers.PaymentRecordSerializer(payments, many=True).data}
        )


class ForgotPasswordView(TicketingApiView):
    """Handler for POST /api/auth/forgot-password"""

    def post(self, request: Request) -> Response:
        data = self.parse(serializers.ForgotPasswordSerializer, request.data)
        AccountService(self.api).request_reset(data["email"])
        return Response(
            {"message": "If the email is registered, a reset code has been sent."},
            status=status.HTTP_202_ACCEPTED,
        )


class VerifyResetOtpView(TicketingApiView):
    """Handler for POST /api/auth/verify-reset-otp"""

    def post(self, request: Request) -> Response:
        data = self.parse(serializers.VerifyResetOtpSerializer, request.data)
        valid = AccountService(self.api).verify_otp(data["email"], data["otp"])
        return Response({"valid": valid})


class ResetPasswordView(TicketingApiView):
    """Handler for POST /api/auth/reset-password-otp"""

    def post(self, request: Request) -> Response:
        data = self.parse(serializers.ResetPasswordSerializer, request.data)
        AccountService(self.api).reset_password(data["email"], data["otp"], data["new_password"])
        return Response({"message": "Password has been reset."})
