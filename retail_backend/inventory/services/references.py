# inventory/services/references.py

"""
REFERENCE RESOLUTION

Resolves every external reference of a transaction request BEFORE any write:
- acting user     (exists + active)
- payment methods (exist + active)
- products        (exist + active, row-locked in primary-key order)

Any miss raises NotFoundError carrying the offending identifiers.
"""

from __future__ import annotations

from django.apps import apps
from django.contrib.auth import get_user_model

from inventory.services.exceptions import NotFoundError
from inventory.services.stock_ledger import lock_products


def resolve_user(user):
    """
    Accept a user instance or a primary key; return the active user row.
    """
    if user is None:
        raise NotFoundError(
            "An acting user is required.",
            details={"entity": "user", "reason": "MISSING"},
        )

    User = get_user_model()
    pk = getattr(user, "pk", user)

    resolved = User.objects.filter(pk=pk, is_active=True).first()
    if resolved is None:
        raise NotFoundError(
            "User not found or inactive.",
            details={"entity": "user", "id": str(pk)},
        )
    return resolved


def resolve_payment_methods(method_ids) -> dict:
    """
    Return {method_id: PaymentMethod} for the distinct ids given.
    """
    wanted = set(method_ids)
    if not wanted:
        return {}

    PaymentMethod = apps.get_model("sales", "PaymentMethod")
    found = {
        m.id: m
        for m in PaymentMethod.objects.filter(id__in=wanted, is_active=True)
    }

    missing = sorted(str(i) for i in wanted - set(found))
    if missing:
        raise NotFoundError(
            "Payment method not found or inactive.",
            details={"entity": "payment_method", "ids": missing},
        )
    return found


def resolve_products(product_ids, *, require_active: bool = True) -> dict:
    """
    Lock and return {product_id: Product}.

    require_active=False is used when reversing a stored transaction: stock
    taken by (or added for) a product that was later deactivated must still
    be returned exactly.
    """
    wanted = set(product_ids)
    locked = lock_products(wanted)

    missing = wanted - set(locked)
    if missing:
        raise NotFoundError(
            "Product not found.",
            details={"entity": "product", "ids": sorted(str(i) for i in missing)},
        )

    if require_active:
        ensure_active(locked, wanted)
    return locked


def ensure_active(products: dict, product_ids) -> None:
    """
    NotFoundError unless every id in product_ids is present and active in
    an already-locked product map.
    """
    missing = sorted(
        str(pid)
        for pid in set(product_ids)
        if pid not in products or not products[pid].is_active
    )
    if missing:
        raise NotFoundError(
            "Product not found or inactive.",
            details={"entity": "product", "ids": missing},
        )
