"""Serializers for parsing requests and transforming domain models to API responses."""

from rest_framework import serializers


def _money(source: str, **kwargs) -> serializers.DecimalField:
    return serializers.DecimalField(
        source=source, max_digits=12, decimal_places=2, read_only=True, **kwargs
    )


class VenueSerializer(serializers.Serializer):
    """Serializer for Venue domain model."""

    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    location = serializers.CharField(read_only=True)
    capacity = serializers.IntegerField(source="capacity.value", read_only=True)


class EventPriceSerializer(serializers.Serializer):
    """Serializer for EventPrice domain model."""

    id = serializers.CharField(read_only=True)
    category = serializers.CharField(read_only=True)
    price = _money("price.amount")
    stock = serializers.IntegerField(source="stock.value", read_only=True)
    is_active = serializers.BooleanField(read_only=True)
    is_available = serializers.BooleanField(read_only=True)


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.CharField(read_only=True)
    title = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    event_date = serializers.DateTimeField(read_only=True)
    category = serializers.CharField(read_only=True)
    image_url = serializers.CharField(read_only=True)
    is_published = serializers.BooleanField(read_only=True)
    venue = VenueSerializer(read_only=True)
    prices = EventPriceSerializer(many=True, read_only=True)


class BookingSummarySerializer(serializers.Serializer):
    """Serializer for BookingSummary domain model."""

    unit_price = _money("unit_price.amount")
    quantity = serializers.IntegerField(read_only=True)
    subtotal = _money("subtotal.amount")
    discount = _money("discount.amount")
    loyalty_points_used = serializers.IntegerField(source="loyalty_points_used.value", read_only=True)
    loyalty_points_earned = serializers.IntegerField(
        source="loyalty_points_earned.value", read_only=True
    )
    total = _money("total.amount")


class BookingStateSerializer(serializers.Serializer):
    """Serializer for the booking wizard state."""

    id = serializers.CharField(read_only=True)
    event_id = serializers.CharField(read_only=True)
    step = serializers.CharField(source="step.value", read_only=True)
    event_price_id = serializers.CharField(read_only=True, allow_null=True)
    price_category = serializers.CharField(read_only=True, allow_null=True)
    quantity = serializers.IntegerField(read_only=True)
    ticket_id = serializers.CharField(read_only=True, allow_null=True)
    ticket_code = serializers.CharField(read_only=True, allow_null=True)
    discount_code = serializers.CharField(read_only=True, allow_null=True)
    loyalty_points = serializers.IntegerField(source="loyalty_points.value", read_only=True)
    loyalty_applied = serializers.BooleanField(read_only=True)
    payment_attempts = serializers.IntegerField(read_only=True)
    amount_paid = _money("amount_paid.amount", allow_null=True)
    points_earned = serializers.IntegerField(
        source="points_earned.value", read_only=True, allow_null=True
    )
    last_error = serializers.CharField(read_only=True, allow_null=True)
    can_go_back = serializers.BooleanField(read_only=True)
    can_cancel = serializers.BooleanField(read_only=True)


class LoyaltyBalanceSerializer(serializers.Serializer):
    balance = serializers.IntegerField(source="balance.value", read_only=True)
    discount_value = _money("discount_value.amount")


class LoyaltyTransactionSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    points = serializers.IntegerField(source="points.value", read_only=True)
    type = serializers.CharField(source="kind", read_only=True)
    description = serializers.CharField(read_only=True)
    occurred_at = serializers.DateTimeField(read_only=True, allow_null=True)


class LoyaltyHistorySerializer(serializers.Serializer):
    entries = LoyaltyTransactionSerializer(many=True, read_only=True)


class LoyaltyQuoteSerializer(serializers.Serializer):
    balance = serializers.IntegerField(source="balance.value", read_only=True)
    amount = _money("amount.amount")
    max_redeemable = serializers.IntegerField(source="max_redeemable.value", read_only=True)
    selected = serializers.IntegerField(source="selected.value", read_only=True)


class TicketSerializer(serializers.Serializer):
    """Serializer for Ticket domain model."""

    id = serializers.CharField(read_only=True)
    event_id = serializers.CharField(read_only=True)
    event_price_id = serializers.CharField(read_only=True, allow_null=True)
    ticket_number = serializers.CharField(read_only=True, allow_null=True)
    ticket_code = serializers.CharField(read_only=True, allow_null=True)
    quantity = serializers.IntegerField(read_only=True)
    total_amount = _money("total_amount.amount")
    is_paid = serializers.BooleanField(read_only=True)
    purchase_date = serializers.DateTimeField(read_only=True, allow_null=True)


class TicketPageSerializer(serializers.Serializer):
    results = TicketSerializer(source="items", many=True, read_only=True)
    page = serializers.IntegerField(read_only=True)
    page_size = serializers.IntegerField(read_only=True)
    total_count = serializers.IntegerField(read_only=True)
    total_pages = serializers.IntegerField(read_only=True)


class TicketValidationSerializer(serializers.Serializer):
    ticket_code = serializers.CharField(read_only=True)
    is_valid = serializers.BooleanField(read_only=True)
    ticket = TicketSerializer(read_only=True, allow_null=True)


class PaymentRecordSerializer(serializers.Serializer):
    """Serializer for PaymentRecord domain model."""

    id = serializers.CharField(read_only=True)
    ticket_id = serializers.CharField(read_only=True, allow_null=True)
    amount = _money("amount.amount")
    currency = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    payment_method = serializers.CharField(read_only=True, allow_null=True)
    transaction_id = serializers.CharField(read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True, allow_null=True)


class EventQuerySerializer(serializers.Serializer):
    from_date = serializers.DateField(required=False)
    to_date = serializers.DateField(required=False)
    venue = serializers.CharField(required=False, max_length=255)
    keyword = serializers.CharField(required=False, max_length=255)
    category = serializers.CharField(required=False, max_length=100)

    def validate(self, attrs):
        from_date, to_date = attrs.get("from_date"), attrs.get("to_date")
        if from_date and to_date and from_date > to_date:
            raise serializers.ValidationError("from_date must not be after to_date")
        return attrs


class TicketHistoryQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    page_size = serializers.IntegerField(required=False, default=10, min_value=1, max_value=100)


class StartBookingSerializer(serializers.Serializer):
    event_id = serializers.CharField()


class SelectionSerializer(serializers.Serializer):
    event_price_id = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1)


class PromotionSerializer(serializers.Serializer):
    discount_code = serializers.CharField(max_length=64)


class LoyaltyPointsSerializer(serializers.Serializer):
    points = serializers.IntegerField(min_value=0)


class PaymentSerializer(serializers.Serializer):
    payment_method = serializers.CharField(required=False, allow_blank=True, max_length=50)
    payment_token = serializers.CharField(required=False, allow_blank=True, max_length=255)


class PaymentSessionSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=255)


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=254)


class VerifyResetOtpSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=254)
    otp = serializers.CharField(max_length=8)


class ResetPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=254)
    otp = serializers.CharField(max_length=8)
    new_password = serializers.CharField(max_length=128, trim_whitespace=False)
    confirm_password = serializers.CharField(max_length=128, trim_whitespace=False)

    def validate(self, attrs):
        if attrs["new_password"] != attrs["confirm_password"]:
            raise serializers.ValidationError("Passwords do not match")
        return attrs
