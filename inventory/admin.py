from django.contrib import admin
from django.utils.html import mark_safe

from .models import Vehicle, VehicleInsurance


class VehicleInsuranceInline(admin.TabularInline):
    model = VehicleInsurance
    extra = 0
    fields = ("insurance_company", "policy_number", "insurance_type", "start_date", "end_date", "is_active")


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("name", "branch", "license_plate", "vehicle_type", "price_per_day", "status", "is_active", "thumbnail_preview")
    list_filter = ("branch", "vehicle_type", "status", "is_active")
    search_fields = ("name", "brand", "model", "license_plate", "branch__name")
    inlines = (VehicleInsuranceInline,)
    readonly_fields = ("thumbnail_preview",)
    actions = ["mark_available", "mark_maintenance"]

    def thumbnail_preview(self, obj):
        if getattr(obj, "thumbnail", None):
            try:
                return mark_safe(f'<img src="{obj.thumbnail.url}" style="height:50px;" />')
            except Exception:
                return "-"
        return "-"
    thumbnail_preview.short_description = "Thumbnail"

    def mark_available(self, request, queryset):
        updated = queryset.update(status=Vehicle.Status.AVAILABLE)
        self.message_user(request, f"{updated} vehicle(s) marked available.")
    mark_available.short_description = "Mark selected vehicles available"

    def mark_maintenance(self, request, queryset):
        updated = queryset.update(status=Vehicle.Status.MAINTENANCE)
        self.message_user(request, f"{updated} vehicle(s) sent to maintenance.")
    mark_maintenance.short_description = "Mark selected vehicles under maintenance"


@admin.register(VehicleInsurance)
class VehicleInsuranceAdmin(admin.ModelAdmin):
    list_display = ("vehicle", "branch", "insurance_company", "insurance_type", "start_date", "end_date", "is_active")
    list_filter = ("insurance_type", "is_active", "branch")
    search_fields = ("policy_number", "insurance_company", "vehicle__license_plate")
    date_hierarchy = "end_date"
