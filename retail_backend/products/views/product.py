# products/views/product.py

"""
PRODUCT VIEWSET (READ-ONLY)

Purpose:
- Stock visibility for staff: current stock, thresholds, low-stock list
- Per-product stock audit trail (ledger movements)

Product create/update is reference-data CRUD handled through the admin.
"""

from django.db.models import F, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.models import Product
from products.serializers import ProductSerializer, StockMovementSerializer


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Product.objects.all().order_by("name")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(sku__icontains=q))

        active = (self.request.query_params.get("active") or "").strip().lower()
        if active in {"true", "1"}:
            qs = qs.filter(is_active=True)

        return qs

    @extend_schema(responses=ProductSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        qs = Product.objects.filter(
            is_active=True, stock_current__lt=F("stock_min")
        ).order_by("stock_current", "name")
        return Response(ProductSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        parameters=[OpenApiParameter("limit", int, required=False)],
        responses=StockMovementSerializer(many=True),
    )
    @action(detail=True, methods=["get"], url_path="movements")
    def movements(self, request, pk=None):
        product = self.get_object()

        try:
            limit = max(1, min(int(request.query_params.get("limit", 100)), 500))
        except ValueError:
            limit = 100

        qs = product.stock_movements.order_by("-created_at")[:limit]
        return Response(StockMovementSerializer(qs, many=True).data, status=status.HTTP_200_OK)
