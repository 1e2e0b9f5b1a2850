# sales/admin.py

from django.contrib import admin

from sales.models import PaymentMethod, Sale, SaleItem, SalePayment


# ======================================================
# PAYMENT METHOD ADMIN (reference data)
# ======================================================


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ("name", "description", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)


# ======================================================
# SALE ADMIN (read-only: sales move through the orchestrator)
# ======================================================


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "quantity", "unit_price", "subtotal")

    def has_add_permission(self, request, obj=None):
        return False


class SalePaymentInline(admin.TabularInline):
    model = SalePayment
    extra = 0
    can_delete = False
    fk_name = "sale"
    readonly_fields = ("method", "amount", "note", "reverses", "created_by", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "sale_date",
        "status",
        "is_credit",
        "customer_description",
        "total_amount",
        "balance_remaining",
    )
    list_filter = ("status", "is_credit", "sale_date")
    search_fields = ("customer_description", "note")
    inlines = [SaleItemInline, SalePaymentInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
