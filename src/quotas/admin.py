"""Django admin for the quotas module."""
from django.contrib import admin

from quotas.models import HcQuota, StoreQuota


class HcQuotaInline(admin.TabularInline):
    model = HcQuota
    extra = 0
    fields = (
        "seller", "ss_quota", "start_date",
        "proration_factor", "prorated_ss_quota", "status",
    )
    readonly_fields = ("proration_factor", "prorated_ss_quota", "status")


@admin.register(StoreQuota)
class StoreQuotaAdmin(admin.ModelAdmin):
    list_display = ("store", "period", "ss_quota", "source", "status", "approved_at")
    list_filter = ("status", "source", "year", "month")
    search_fields = ("store__name", "store__code", "original_store_name")
    inlines = [HcQuotaInline]
    readonly_fields = ("approved_by", "approved_at", "created_at", "updated_at")


@admin.register(HcQuota)
class HcQuotaAdmin(admin.ModelAdmin):
    list_display = (
        "seller", "store", "year", "month",
        "ss_quota", "proration_factor", "prorated_ss_quota", "status",
    )
    list_filter = ("status", "year", "month", "store")
    search_fields = ("seller__username", "seller__first_name", "seller__last_name")
    readonly_fields = (
        "distributed_by", "distributed_at",
        "approved_by", "approved_at",
        "created_at", "updated_at",
    )
