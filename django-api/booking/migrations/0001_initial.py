import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BookingSession",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("event_id", models.UUIDField()),
                (
                    "step",
                    models.CharField(
                        choices=[
                            ("select", "Select tickets"),
                            ("promotions", "Promotions"),
                            ("payment", "Payment"),
                            ("confirmation", "Confirmation"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="select",
                        max_length=20,
                    ),
                ),
                ("event_price_id", models.UUIDField(blank=True, null=True)),
                ("price_category", models.CharField(blank=True, max_length=100, null=True)),
                (
                    "unit_price",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True),
                ),
                ("quantity", models.PositiveIntegerField(default=0)),
                ("ticket_id", models.UUIDField(blank=True, null=True)),
                ("ticket_code", models.CharField(blank=True, max_length=64, null=True)),
                ("discount_code", models.CharField(blank=True, max_length=64, null=True)),
                ("discount", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("loyalty_points", models.PositiveIntegerField(default=0)),
                ("loyalty_applied", models.BooleanField(default=False)),
                ("payment_attempts", models.PositiveIntegerField(default=0)),
                ("payment_reference", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "amount_paid",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True),
                ),
                ("points_earned", models.PositiveIntegerField(blank=True, null=True)),
                ("last_error", models.CharField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["ticket_id"], name="booking_session_ticket_idx"),
                    models.Index(fields=["step", "-updated_at"], name="booking_session_step_idx"),
                ],
            },
        ),
    ]
