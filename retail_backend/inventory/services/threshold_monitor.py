# inventory/services/threshold_monitor.py

"""
THRESHOLD MONITOR (ADVISORY)

After a transaction has mutated stock, classify each touched product
against its stock_min / stock_max and return warnings. Warnings never block
or roll back a commit.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from products.models import Product

STOCK_BELOW_MIN = "STOCK_BELOW_MIN"
STOCK_ABOVE_MAX = "STOCK_ABOVE_MAX"


@dataclass(frozen=True)
class StockWarning:
    code: str
    message: str
    metadata: dict = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "metadata": self.metadata}


def classify_stock_level(stock: int, stock_min: int, stock_max: int) -> str | None:
    """
    STOCK_BELOW_MIN when stock < stock_min, STOCK_ABOVE_MAX when
    stock > stock_max, else None. Never both: stock_min <= stock_max.
    """
    if stock < stock_min:
        return STOCK_BELOW_MIN
    if stock > stock_max:
        return STOCK_ABOVE_MAX
    return None


def collect_warnings(product_ids) -> list[StockWarning]:
    ids = set(product_ids)
    if not ids:
        return []

    rows = (
        Product.objects.filter(pk__in=ids)
        .values("id", "name", "stock_current", "stock_min", "stock_max")
    )

    warnings = []
    for row in sorted(rows, key=lambda r: (r["name"], str(r["id"]))):
        stock = int(row["stock_current"])
        code = classify_stock_level(stock, int(row["stock_min"]), int(row["stock_max"]))
        if code is None:
            continue

        metadata = {"product_id": str(row["id"]), "after": stock}
        if code == STOCK_BELOW_MIN:
            metadata["min"] = int(row["stock_min"])
            message = f"{row['name']} is below its minimum stock ({stock} < {row['stock_min']})."
        else:
            metadata["max"] = int(row["stock_max"])
            message = f"{row['name']} is above its maximum stock ({stock} > {row['stock_max']})."

        warnings.append(StockWarning(code=code, message=message, metadata=metadata))

    return warnings
