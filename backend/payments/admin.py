from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("booking", "provider", "provider_order_id", "amount", "currency", "status", "updated_at")
    list_filter = ("status", "provider")
    search_fields = ("booking__id", "provider_order_id", "provider_transaction_id", "booking__user__email")
    readonly_fields = ("raw", "created_at", "updated_at")
