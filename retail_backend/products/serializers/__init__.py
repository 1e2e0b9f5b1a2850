from .product import ProductSerializer, StockMovementSerializer

__all__ = ["ProductSerializer", "StockMovementSerializer"]
