from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "room", "check_in", "check_out", "nights", "total_amount", "currency", "status")
    list_filter = ("status", "currency")
    search_fields = ("user__email", "room__name", "room__hotel__name")
    readonly_fields = ("nights", "total_amount", "currency", "created_at")
