from django.contrib import admin

from booking.models import BookingSession


@admin.register(BookingSession)
class BookingSessionAdmin(admin.ModelAdmin):
    list_display = ["id", "step", "price_category", "quantity", "ticket_id", "updated_at"]
    list_filter = ["step", "loyalty_applied"]
    search_fields = ["id", "ticket_id", "ticket_code", "payment_reference"]
    readonly_fields = ["created_at", "updated_at"]
