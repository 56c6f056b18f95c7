"""Django admin for the commissions module."""
from django.contrib import admin

from commissions.models import (
    CommissionScheme,
    ItemLock,
    PxqScale,
    SchemeItem,
    SchemeRestriction,
)


class SchemeItemInline(admin.TabularInline):
    model = SchemeItem
    extra = 0
    ordering = ("display_order",)
    fields = (
        "item_code", "custom_name", "category", "calculation_type",
        "quota", "weight", "variable_amount", "min_fulfillment",
        "has_cap", "is_active", "display_order",
    )


class SchemeRestrictionInline(admin.TabularInline):
    model = SchemeRestriction
    extra = 0
    fk_name = "scheme"
    fields = (
        "restriction_type", "item", "plan_code", "operator_code",
        "max_percentage", "max_quantity", "min_percentage", "is_active",
    )


@admin.register(CommissionScheme)
class CommissionSchemeAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "scheme_type", "year", "month", "status", "approved_at")
    list_filter = ("status", "scheme_type", "year", "month")
    search_fields = ("name", "code")
    inlines = [SchemeItemInline, SchemeRestrictionInline]
    readonly_fields = ("parent_scheme", "approved_by", "approved_at", "created_at", "updated_at")


class ItemLockInline(admin.TabularInline):
    model = ItemLock
    fk_name = "item"
    extra = 0
    fields = ("lock_type", "required_item", "required_value", "is_active", "description")


class PxqScaleInline(admin.TabularInline):
    model = PxqScale
    extra = 0
    ordering = ("display_order", "min_fulfillment")
    fields = ("min_fulfillment", "max_fulfillment", "amount_per_unit", "display_order")


@admin.register(SchemeItem)
class SchemeItemAdmin(admin.ModelAdmin):
    list_display = ("__str__", "scheme", "category", "calculation_type", "quota", "variable_amount", "is_active")
    list_filter = ("category", "calculation_type", "is_active", "scheme")
    search_fields = ("item_code", "custom_name", "scheme__name")
    inlines = [ItemLockInline, PxqScaleInline]
