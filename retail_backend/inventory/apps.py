# inventory/apps.py

"""
INVENTORY APP CONFIG

Stock ledger core:
- Stock ledger (the only writer of Product.stock_current)
- Oversell guard + threshold monitor
- Reversal engine used by sale/purchase edits and deletes
- Append-only StockMovement audit trail
"""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
    verbose_name = "Inventory Stock Ledger"
