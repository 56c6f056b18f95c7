"""Django admin configuration for the stores app."""
from django.contrib import admin

from stores.models import Store


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "zone", "is_active", "created_at")
    list_filter = ("is_active", "zone")
    search_fields = ("name", "code", "address")
    readonly_fields = ("created_at", "updated_at")
    list_per_page = 50
