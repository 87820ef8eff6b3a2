import django_filters

from bookings.models import Booking
from core.exceptions import InvalidDateRange

from .models import Room


class RoomAvailabilityFilter(django_filters.FilterSet):
    city = django_filters.CharFilter(field_name="hotel__city", lookup_expr="icontains")
    hotel_id = django_filters.NumberFilter(field_name="hotel_id")
    min_capacity = django_filters.NumberFilter(field_name="capacity", lookup_expr="gte")
    check_in = django_filters.DateFilter(method="filter_noop")
    check_out = django_filters.DateFilter(method="filter_noop")

    class Meta:
        model = Room
        fields = ["city", "hotel_id", "min_capacity", "check_in", "check_out"]

    def filter_noop(self, queryset, name, value):
        # Dates only make sense as a pair; applied in filter_queryset.
        return queryset

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        check_in = self.form.cleaned_data.get("check_in")
        check_out = self.form.cleaned_data.get("check_out")
        if not (check_in and check_out):
            return queryset
        if check_out <= check_in:
            raise InvalidDateRange()
        busy_rooms = Booking.objects.overlapping(check_in, check_out).values("room_id")
        return queryset.exclude(pk__in=busy_rooms)
