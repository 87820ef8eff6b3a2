from django.contrib import admin

from .models import Hotel, Room


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0


@admin.register(Hotel)
class HotelAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "address", "created_at")
    search_fields = ("name", "city")
    inlines = [RoomInline]


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("name", "hotel", "capacity", "price_per_night", "currency")
    list_filter = ("currency", "hotel__city")
    search_fields = ("name", "hotel__name", "hotel__city")
