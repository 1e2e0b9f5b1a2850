# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Thin adapter over the sale orchestrator and the credit settlement tracker:

    GET    /api/sales/                      list (filters: status, is_credit, dates, customer)
    POST   /api/sales/                      create_sale
    GET    /api/sales/<id>/                 retrieve
    PUT    /api/sales/<id>/                 replace_sale
    DELETE /api/sales/<id>/                 delete_sale
    GET    /api/sales/<id>/payments/        payment ledger
    POST   /api/sales/<id>/payments/        register_payment
    GET    /api/sales/<id>/summary/         settlement summary
    POST   /api/sales/<id>/cancel/          cancel_sale

Ledger errors are rendered by inventory.api.exception_handler.
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.generics import GenericAPIView, ListAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from sales.api.filters import SaleFilter
from sales.models import PaymentMethod, Sale
from sales.serializers import (
    PaymentMethodSerializer,
    ReasonSerializer,
    RegisterPaymentSerializer,
    SalePaymentSerializer,
    SaleSerializer,
    SaleWriteSerializer,
)
from sales.services.credit_settlement import (
    cancel_sale,
    register_payment,
    reverse_payment,
    settlement_summary,
)
from sales.services.sale_orchestrator import create_sale, delete_sale, replace_sale

UUID_REGEX = r"[0-9a-fA-F-]{36}"


def _outcome_payload(sale: Sale, warnings) -> dict:
    sale = (
        Sale.objects.prefetch_related("items", "items__product", "payments", "payments__method")
        .get(pk=sale.pk)
    )
    body = SaleSerializer(sale).data
    body["warnings"] = [w.as_dict() for w in warnings]
    return body


def _payment_payload(outcome) -> dict:
    return {
        "payment": SalePaymentSerializer(outcome.payment).data,
        "balance_before": str(outcome.balance_before),
        "balance_after": str(outcome.balance_after),
        "status_changed": outcome.status_changed,
    }


class SaleViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = SaleFilter
    lookup_value_regex = UUID_REGEX

    def get_queryset(self):
        return (
            Sale.objects.all()
            .select_related("created_by")
            .prefetch_related("items", "items__product", "payments", "payments__method")
            .order_by("-sale_date", "-created_at")
        )

    @extend_schema(request=SaleWriteSerializer, responses={201: SaleSerializer})
    def create(self, request):
        ser = SaleWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        outcome = create_sale(user=request.user, **ser.to_command())
        return Response(
            _outcome_payload(outcome.sale, outcome.warnings),
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=SaleWriteSerializer, responses={200: SaleSerializer})
    def update(self, request, pk=None):
        ser = SaleWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        outcome = replace_sale(sale_id=pk, user=request.user, **ser.to_command())
        return Response(
            _outcome_payload(outcome.sale, outcome.warnings),
            status=status.HTTP_200_OK,
        )

    @extend_schema(request=None)
    def destroy(self, request, pk=None):
        outcome = delete_sale(sale_id=pk, user=request.user)
        return Response(
            {"deleted": True, "warnings": [w.as_dict() for w in outcome.warnings]},
            status=status.HTTP_200_OK,
        )

    # ======================================================
    # PAYMENTS (ABONOS)
    # ======================================================

    @extend_schema(request=RegisterPaymentSerializer, responses={201: SalePaymentSerializer})
    @action(detail=True, methods=["get", "post"], url_path="payments")
    def payments(self, request, pk=None):
        if request.method == "GET":
            sale: Sale = self.get_object()
            return Response(
                SalePaymentSerializer(sale.payments.select_related("method"), many=True).data,
                status=status.HTTP_200_OK,
            )

        ser = RegisterPaymentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        outcome = register_payment(
            sale_id=pk,
            method_id=ser.validated_data["method_id"],
            amount=ser.validated_data["amount"],
            note=ser.validated_data.get("note", ""),
            user=request.user,
        )
        return Response(_payment_payload(outcome), status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="summary")
    def summary(self, request, pk=None):
        sale: Sale = self.get_object()
        return Response(
            {k: str(v) for k, v in settlement_summary(sale).items()},
            status=status.HTTP_200_OK,
        )

    @extend_schema(request=ReasonSerializer, responses={200: SaleSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        ser = ReasonSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        sale = cancel_sale(
            sale_id=pk,
            user=request.user,
            reason=ser.validated_data.get("reason", ""),
        )
        return Response(_outcome_payload(sale, []), status=status.HTTP_200_OK)


class PaymentReverseView(GenericAPIView):
    """
    POST /api/sales/payments/<payment_id>/reverse/
    """

    permission_classes = [IsAuthenticated]
    serializer_class = ReasonSerializer

    @extend_schema(tags=["sales"], request=ReasonSerializer, responses={201: SalePaymentSerializer})
    def post(self, request, payment_id):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)

        outcome = reverse_payment(
            payment_id=payment_id,
            user=request.user,
            note=ser.validated_data.get("reason", ""),
        )
        return Response(_payment_payload(outcome), status=status.HTTP_201_CREATED)


class PaymentMethodListView(ListAPIView):
    """
    GET /api/sales/payment-methods/  (active methods only)
    """

    permission_classes = [IsAuthenticated]
    serializer_class = PaymentMethodSerializer
    pagination_class = None

    def get_queryset(self):
        return PaymentMethod.objects.filter(is_active=True).order_by("name")
