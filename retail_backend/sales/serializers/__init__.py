from .sale import (
    PaymentInputSerializer,
    PaymentMethodSerializer,
    ReasonSerializer,
    RegisterPaymentSerializer,
    SaleItemSerializer,
    SaleLineInputSerializer,
    SalePaymentSerializer,
    SaleSerializer,
    SaleWriteSerializer,
)

__all__ = [
    "PaymentInputSerializer",
    "PaymentMethodSerializer",
    "ReasonSerializer",
    "RegisterPaymentSerializer",
    "SaleItemSerializer",
    "SaleLineInputSerializer",
    "SalePaymentSerializer",
    "SaleSerializer",
    "SaleWriteSerializer",
]
