from booking.handlers.views import (
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

__all__ = [
    "BookingBackView",
    "BookingCancelView",
    "BookingCheckoutView",
    "BookingDetailView",
    "BookingLoyaltyQuoteView",
    "BookingLoyaltyView",
    "BookingMarkPaidView",
    "BookingPaymentSessionView",
    "BookingPaymentView",
    "BookingPromotionView",
    "BookingSelectionView",
    "BookingStartView",
    "BookingTicketView",
    "EventDetailView",
    "EventListView",
    "ForgotPasswordView",
    "LoyaltyBalanceView",
    "LoyaltyHistoryView",
    "PaymentHistoryView",
    "ResetPasswordView",
    "TicketHistoryView",
    "TicketQrCodeView",
    "TicketValidationView",
    "VerifyResetOtpView",
]
