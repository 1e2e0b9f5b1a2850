# products/serializers/product.py

from rest_framework import serializers

from inventory.models import StockMovement
from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """
    Read model. stock_current is never writable through the API; it moves
    only through sales and purchases.
    """

    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "stock_current",
            "stock_min",
            "stock_max",
            "cost_price",
            "sale_price",
            "is_active",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class StockMovementSerializer(serializers.ModelSerializer):
    class Meta:
        model = StockMovement
        fields = [
            "id",
            "quantity_delta",
            "reason",
            "stock_after",
            "reference",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields
