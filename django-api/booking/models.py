"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/wizard.py.
"""

import uuid

from django.db import models


class BookingSession(models.Model):
    """Persistence model for one run of the booking wizard."""

    class Step(models.TextChoices):
        SELECT = "select", "Select tickets"
        PROMOTIONS = "promotions", "Promotions"
        PAYMENT = "payment", "Payment"
        CONFIRMATION = "confirmation", "Confirmation"
        CANCELLED = "cancelled", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_id = models.UUIDField()
    step = models.CharField(max_length=20, choices=Step.choices, default=Step.SELECT)
    event_price_id = models.UUIDField(blank=True, null=True)
    price_category = models.CharField(max_length=100, blank=True, null=True)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    quantity = models.PositiveIntegerField(default=0)
    ticket_id = models.UUIDField(blank=True, null=True)
    ticket_code = models.CharField(max_length=64, blank=True, null=True)
    discount_code = models.CharField(max_length=64, blank=True, null=True)
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    loyalty_points = models.PositiveIntegerField(default=0)
    loyalty_applied = models.BooleanField(default=False)
    selection_version = models.PositiveIntegerField(default=0)
    payment_attempts = models.PositiveIntegerField(default=0)
    payment_reference = models.CharField(max_length=255, blank=True, null=True)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    points_earned = models.PositiveIntegerField(blank=True, null=True)
    last_error = models.CharField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["ticket_id"], name="booking_session_ticket_idx"),
            models.Index(fields=["step", "-updated_at"], name="booking_session_step_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.id} ({self.step})"
