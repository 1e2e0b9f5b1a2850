# inventory/admin.py

from django.contrib import admin

from inventory.models import StockMovement


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    """
    Read-only audit trail. Rows are written by the stock ledger only.
    """

    list_display = ("created_at", "product", "reason", "quantity_delta", "stock_after", "reference")
    list_filter = ("reason",)
    search_fields = ("reference", "product__name", "product__sku")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
