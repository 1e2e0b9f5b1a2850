# products/urls.py

"""
PRODUCTS URLS

    /api/products/                     list (read-only)
    /api/products/<id>/                retrieve
    /api/products/low-stock/           active products below stock_min
    /api/products/<id>/movements/      stock audit trail
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from products.views import ProductViewSet

router = SimpleRouter()
router.register(r"", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
]
