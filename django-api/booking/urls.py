from django.urls import path

from booking.handlers import (
    BookingBackView,
    BookingCancelView,
    BookingCheckoutView,
    BookingDetailView,
    BookingLoyaltyQuoteView,
    BookingLoyaltyView,
    BookingMarkPaidView,
    BookingPaymentSessionView,
    BookingPaymentView,
    BookingPromotionView,
    BookingSelectionView,
    BookingStartView,
    BookingTicketView,
    EventDetailView,
    EventListView,
    ForgotPasswordView,
    LoyaltyBalanceView,
    LoyaltyHistoryView,
    PaymentHistoryView,
    ResetPasswordView,
    TicketHistoryView,
    TicketQrCodeView,
    TicketValidationView,
    VerifyResetOtpView,
)

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("bookings", BookingStartView.as_view(), name="booking-start"),
    path("bookings/<str:booking_id>", BookingDetailView.as_view(), name="booking-detail"),
    path(
        "bookings/<str:booking_id>/selection",
        BookingSelectionView.as_view(),
        name="booking-selection",
    ),
    path("bookings/<str:booking_id>/ticket", BookingTicketView.as_view(), name="booking-ticket"),
    path(
        "bookings/<str:booking_id>/promotion",
        BookingPromotionView.as_view(),
        name="booking-promotion",
    ),
    path(
        "bookings/<str:booking_id>/loyalty",
        BookingLoyaltyView.as_view(),
        name="booking-loyalty",
    ),
    path(
        "bookings/<str:booking_id>/loyalty-quote",
        BookingLoyaltyQuoteView.as_view(),
        name="booking-loyalty-quote",
    ),
    path(
        "bookings/<str:booking_id>/checkout",
        BookingCheckoutView.as_view(),
        name="booking-checkout",
    ),
    path(
        "bookings/<str:booking_id>/payment",
        BookingPaymentView.as_view(),
        name="booking-payment",
    ),
    path(
        "bookings/<str:booking_id>/payment-session",
        BookingPaymentSessionView.as_view(),
        name="booking-payment-session",
    ),
    path(
        "bookings/<str:booking_id>/mark-paid",
        BookingMarkPaidView.as_view(),
        name="booking-mark-paid",
    ),
    path("bookings/<str:booking_id>/back", BookingBackView.as_view(), name="booking-back"),
    path("bookings/<str:booking_id>/cancel", BookingCancelView.as_view(), name="booking-cancel"),
    path("loyalty/balance", LoyaltyBalanceView.as_view(), name="loyalty-balance"),
    path("loyalty/history", LoyaltyHistoryView.as_view(), name="loyalty-history"),
    path("tickets/history", TicketHistoryView.as_view(), name="ticket-history"),
    path(
        "tickets/validate/<str:ticket_code>",
        TicketValidationView.as_view(),
        name="ticket-validate",
    ),
    path(
        "tickets/<str:ticket_id>/qrcode",
        TicketQrCodeView.as_view(),
        name="ticket-qrcode",
    ),
    path("payments/history", PaymentHistoryView.as_view(), name="payment-history"),
    path("auth/forgot-password", ForgotPasswordView.as_view(), name="forgot-password"),
    path("auth/verify-reset-otp", VerifyResetOtpView.as_view(), name="verify-reset-otp"),
    path("auth/reset-password-otp", ResetPasswordView.as_view(), name="reset-password-otp"),
]
