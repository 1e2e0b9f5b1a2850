# purchases/api/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView, get_object_or_404
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from purchases.api.serializers import PurchaseSerializer, PurchaseWriteSerializer
from purchases.models import Purchase
from purchases.services.purchase_orchestrator import (
    create_purchase,
    delete_purchase,
    replace_purchase,
)


def _command_kwargs(data: dict) -> dict:
    return {
        "purchase_date": data.get("purchase_date"),
        "note": data.get("note", ""),
        "lines": [
            {
                "product_id": line["product_id"],
                "quantity": line["quantity"],
                "unit_cost": line["unit_cost"],
            }
            for line in data["lines"]
        ],
    }


def _purchase_payload(purchase, warnings) -> dict:
    purchase = Purchase.objects.prefetch_related("items", "items__product").get(pk=purchase.pk)
    body = PurchaseSerializer(purchase).data
    body["warnings"] = [w.as_dict() for w in warnings]
    return body


class PurchaseListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PurchaseSerializer

    def get_queryset(self):
        return Purchase.objects.prefetch_related("items", "items__product").order_by(
            "-purchase_date", "-created_at"
        )

    @extend_schema(tags=["purchases"], responses=PurchaseSerializer(many=True))
    def get(self, request):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PurchaseSerializer(page, many=True).data)
        return Response(PurchaseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=PurchaseWriteSerializer,
        responses={201: PurchaseSerializer},
    )
    def post(self, request):
        s = PurchaseWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        outcome = create_purchase(user=request.user, **_command_kwargs(s.validated_data))
        return Response(
            _purchase_payload(outcome.purchase, outcome.warnings),
            status=status.HTTP_201_CREATED,
        )


class PurchaseDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PurchaseSerializer

    def get_queryset(self):
        return Purchase.objects.prefetch_related("items", "items__product")

    @extend_schema(tags=["purchases"], responses=PurchaseSerializer)
    def get(self, request, purchase_id):
        purchase = get_object_or_404(self.get_queryset(), pk=purchase_id)
        return Response(PurchaseSerializer(purchase).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=PurchaseWriteSerializer,
        responses={200: PurchaseSerializer},
    )
    def put(self, request, purchase_id):
        s = PurchaseWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        outcome = replace_purchase(
            purchase_id=purchase_id,
            user=request.user,
            **_command_kwargs(s.validated_data),
        )
        return Response(
            _purchase_payload(outcome.purchase, outcome.warnings),
            status=status.HTTP_200_OK,
        )

    @extend_schema(tags=["purchases"], request=None)
    def delete(self, request, purchase_id):
        outcome = delete_purchase(purchase_id=purchase_id, user=request.user)
        return Response(
            {"deleted": True, "warnings": [w.as_dict() for w in outcome.warnings]},
            status=status.HTTP_200_OK,
        )
