# sales/api/filters.py

import django_filters

from sales.models import Sale


class SaleFilter(django_filters.FilterSet):
    """
    Sales history filters:
        ?status=PENDING&is_credit=true          (open credit sales)
        ?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD
        ?customer=<substring>
    """

    status = django_filters.ChoiceFilter(choices=Sale.STATUS_CHOICES)
    is_credit = django_filters.BooleanFilter()
    date_from = django_filters.DateFilter(field_name="sale_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="sale_date", lookup_expr="lte")
    customer = django_filters.CharFilter(
        field_name="customer_description", lookup_expr="icontains"
    )

    class Meta:
        model = Sale
        fields = ["status", "is_credit", "date_from", "date_to", "customer"]
