import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("hotels", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("check_in", models.DateField()),
                ("check_out", models.DateField()),
                ("nights", models.PositiveIntegerField()),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(default="EGP", max_length=3)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("cancelled", "Cancelled")], default="pending", max_length=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("room", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookings", to="hotels.room")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookings", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["room", "status"], name="booking_room_status_idx"),
                    models.Index(fields=["user", "created_at"], name="booking_user_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(check_out__gt=models.F("check_in")), name="booking_check_out_after_check_in"),
                    models.CheckConstraint(condition=models.Q(nights__gt=0), name="booking_nights_positive"),
                    models.CheckConstraint(condition=models.Q(total_amount__gte=0), name="booking_total_amount_non_negative"),
                ],
            },
        ),
    ]
