# sales/models/payment_method.py

import uuid

from django.db import models


class PaymentMethod(models.Model):
    """
    Reference data: how a payment was made (cash, transfer, card ...).
    Only active methods can be used for new payments.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=64, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
