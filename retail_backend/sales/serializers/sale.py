# sales/serializers/sale.py

from rest_framework import serializers

from sales.models import PaymentMethod, Sale, SaleItem, SalePayment
from sales.services.credit_settlement import settlement_summary


class PaymentMethodSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentMethod
        fields = ["id", "name", "description", "is_active"]
        read_only_fields = fields


class SalePaymentSerializer(serializers.ModelSerializer):
    """
    Payment ledger entry (read-only). Corrections carry a negative amount
    and point at the payment they correct.
    """

    method_name = serializers.CharField(source="method.name", read_only=True)

    class Meta:
        model = SalePayment
        fields = [
            "id",
            "method",
            "method_name",
            "amount",
            "note",
            "reverses",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class SaleItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product",
            "product_name",
            "sku",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = fields


class SaleSerializer(serializers.ModelSerializer):
    """
    Sale read model: header + lines + payment ledger + settlement summary.
    """

    items = SaleItemSerializer(many=True, read_only=True)
    payments = SalePaymentSerializer(many=True, read_only=True)
    summary = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            "id",
            "sale_date",
            "total_amount",
            "is_credit",
            "customer_description",
            "balance_remaining",
            "status",
            "note",
            "created_by",
            "created_at",
            "updated_at",
            "items",
            "payments",
            "summary",
        ]
        read_only_fields = fields

    def get_summary(self, obj):
        return {k: str(v) for k, v in settlement_summary(obj).items()}


# ==========================================================
# COMMAND INPUT (shape only; the orchestrator enforces limits)
# ==========================================================

class SaleLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2)


class PaymentInputSerializer(serializers.Serializer):
    method_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    note = serializers.CharField(required=False, allow_blank=True, default="")


class SaleWriteSerializer(serializers.Serializer):
    sale_date = serializers.DateField(required=False, allow_null=True)
    customer_description = serializers.CharField(required=False, allow_blank=True, default="")
    note = serializers.CharField(required=False, allow_blank=True, default="")
    lines = SaleLineInputSerializer(many=True, allow_empty=False)
    payments = PaymentInputSerializer(many=True, required=False)

    def to_command(self) -> dict:
        data = self.validated_data
        return {
            "sale_date": data.get("sale_date"),
            "customer_description": data.get("customer_description", ""),
            "note": data.get("note", ""),
            "lines": [dict(line) for line in data["lines"]],
            "payments": [dict(p) for p in data.get("payments") or []],
        }


class RegisterPaymentSerializer(serializers.Serializer):
    method_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    note = serializers.CharField(required=False, allow_blank=True, default="")


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
