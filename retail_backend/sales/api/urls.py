# sales/api/urls.py

"""
SALES API URLS

Rules:
- Explicit non-PK routes (payments/<id>/reverse/, payment-methods/) MUST be
  registered BEFORE router URLs.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.viewsets.sale import PaymentMethodListView, PaymentReverseView, SaleViewSet

router = SimpleRouter()
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path(
        "payments/<uuid:payment_id>/reverse/",
        PaymentReverseView.as_view(),
        name="sales-payment-reverse",
    ),
    path("payment-methods/", PaymentMethodListView.as_view(), name="sales-payment-methods"),
    path("", include(router.urls)),
]
