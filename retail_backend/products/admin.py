# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (reference-data CRUD):

- Product is created once, with its opening stock.
- After creation stock_current is read-only: it moves only through sales
  and purchases (stock ledger), so every change has a StockMovement row.
- Deletion is blocked; deactivate instead (lines keep a PROTECT reference).
"""

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "sku",
        "stock_current",
        "stock_min",
        "stock_max",
        "sale_price",
        "is_active",
    )
    list_filter = ("is_active",)
    search_fields = ("name", "sku")
    ordering = ("name",)

    def get_readonly_fields(self, request, obj=None):
        readonly = ["created_at", "updated_at"]
        if obj is not None:
            readonly.append("stock_current")
        return readonly

    def has_delete_permission(self, request, obj=None):
        return False
