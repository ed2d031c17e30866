"""
Views para dashboard y estadísticas
"""
from datetime import timedelta

from django.db.models import Count, DecimalField, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action

from ..core.api_responses import success_response
from ..core.warranty import WarrantyStatus
from ..models import Product, Sale, Warranty
from ..permissions import IsShopOwner


def _sales_totals(queryset):
    return queryset.aggregate(
        count=Count('id'),
        total=Coalesce(Sum('total_amount'), 0, output_field=DecimalField()),
        ganji=Coalesce(Sum('ganji'), 0, output_field=DecimalField()),
    )


class DashboardViewSet(viewsets.GenericViewSet):
    """
    ViewSet para dashboard y estadísticas de la tienda
    """
    permission_classes = [IsShopOwner]

    @extend_schema(tags=['Dashboard'])
    @action(detail=False, methods=['get'])
    def overview(self, request):
        """Vista general: ventas, ganancia y garantías"""
        now = timezone.now()
        today = timezone.localdate(now)

        all_sales = _sales_totals(Sale.objects.all())
        today_sales = _sales_totals(Sale.objects.filter(sale_date__date=today))
        weekly_sales = _sales_totals(Sale.objects.filter(sale_date__gte=now - timedelta(days=7)))
        monthly_sales = _sales_totals(Sale.objects.filter(sale_date__gte=now - timedelta(days=30)))

        # Garantías en línea: el estado se evalúa contra el reloj, no el guardado
        warranted = Sale.objects.filter(has_warranty=True)
        sale_warranties = warranted.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(warranty_end__gte=now)),
            expired=Count('id', filter=Q(warranty_end__lt=now)),
            unknown=Count('id', filter=Q(warranty_end__isnull=True)),
            expiring_soon=Count(
                'id', filter=Q(warranty_end__gte=now, warranty_end__lte=now + timedelta(days=30))
            ),
        )

        filed = {status.value: 0 for status in WarrantyStatus}
        for warranty in Warranty.objects.all():
            filed[warranty.calculated_status] += 1

        top_salesmen = list(
            Sale.objects.filter(salesman__isnull=False, sale_date__gte=now - timedelta(days=30))
            .values('salesman_id', 'salesman__username')
            .annotate(
                sales=Count('id'),
                total=Coalesce(Sum('total_amount'), 0, output_field=DecimalField()),
            )
            .order_by('-total')[:5]
        )

        return success_response(
            detail="Resumen del dashboard",
            code="DASHBOARD_OVERVIEW",
            sales={
                'all_time': all_sales,
                'today': today_sales,
                'last_7_days': weekly_sales,
                'last_30_days': monthly_sales,
            },
            sale_warranties=sale_warranties,
            filed_warranties={'total': sum(filed.values()), **filed},
            products={
                'total': Product.objects.filter(active=True).count(),
                'out_of_stock': Product.objects.filter(active=True, stock_quantity=0).count(),
            },
            top_salesmen=top_salesmen,
        )
