# purchases/api/serializers.py

from rest_framework import serializers

from purchases.models import Purchase, PurchaseItem


class PurchaseLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(max_digits=14, decimal_places=2)


class PurchaseWriteSerializer(serializers.Serializer):
    """
    Shape check only; limits and references are enforced by the purchase
    orchestrator.
    """

    purchase_date = serializers.DateField(required=False, allow_null=True)
    note = serializers.CharField(required=False, allow_blank=True, default="")
    lines = PurchaseLineInputSerializer(many=True, allow_empty=False)


class PurchaseItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = PurchaseItem
        fields = ["id", "product", "product_name", "quantity", "unit_cost", "subtotal"]


class PurchaseSerializer(serializers.ModelSerializer):
    items = PurchaseItemSerializer(many=True, read_only=True)

    class Meta:
        model = Purchase
        fields = [
            "id",
            "purchase_date",
            "total_amount",
            "note",
            "created_by",
            "created_at",
            "updated_at",
            "items",
        ]
