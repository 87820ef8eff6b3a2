import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("provider", models.CharField(default="paymob", max_length=30)),
                ("provider_order_id", models.CharField(blank=True, max_length=64)),
                ("provider_payment_key", models.TextField(blank=True)),
                ("provider_transaction_id", models.CharField(blank=True, max_length=64)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(default="EGP", max_length=3)),
                ("status", models.CharField(choices=[("initiated", "Initiated"), ("paid", "Paid"), ("failed", "Failed")], default="initiated", max_length=12)),
                ("raw", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("booking", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="payment", to="bookings.booking")),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(amount__gte=0), name="payment_amount_non_negative"),
                ],
            },
        ),
    ]
