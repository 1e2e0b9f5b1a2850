from .stock_movement import StockMovement

__all__ = ["StockMovement"]
