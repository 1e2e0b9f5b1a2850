# purchases/admin.py

from django.contrib import admin

from purchases.models import Purchase, PurchaseItem


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "quantity", "unit_cost", "subtotal")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    """
    Read-only: purchases move stock, so they are registered through the
    purchase orchestrator (API) only.
    """

    list_display = ("id", "purchase_date", "total_amount", "created_by")
    list_filter = ("purchase_date",)
    search_fields = ("note",)
    inlines = [PurchaseItemInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
