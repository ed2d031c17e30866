"""
Views para exportación de datos
"""
from datetime import datetime

import pandas as pd
from django.http import HttpResponse
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action

from ..models import Sale, Warranty
from ..permissions import IsShopOwner


def _parse_date(value):
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        return None


def _format_datetime(value):
    if not value:
        return ''
    return timezone.localtime(value).strftime('%Y-%m-%d %H:%M')


def dataframe_response(df: pd.DataFrame, basename: str, format_type: str) -> HttpResponse:
    stamp = timezone.now().strftime('%Y%m%d')
    if format_type.lower() == 'excel':
        response = HttpResponse(
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        response['Content-Disposition'] = f'attachment; filename="{basename}_{stamp}.xlsx"'
        df.to_excel(response, index=False, engine='openpyxl')
    else:  # CSV
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="{basename}_{stamp}.csv"'
        df.to_csv(response, index=False, encoding='utf-8-sig')
    return response


class ExportViewSet(viewsets.GenericViewSet):
    """
    ViewSet para exportación de ventas y garantías a CSV o Excel
    """
    permission_classes = [IsShopOwner]

    @extend_schema(tags=['Export'])
    @action(detail=False, methods=['get'])
    def sales(self, request):
        """Exportar ventas a CSV o Excel"""
        format_type = request.query_params.get('file_format', 'csv')
        queryset = Sale.objects.select_related('salesman').order_by('-sale_date')

        start_date = _parse_date(request.query_params.get('start_date'))
        if start_date:
            queryset = queryset.filter(sale_date__date__gte=start_date)
        end_date = _parse_date(request.query_params.get('end_date'))
        if end_date:
            queryset = queryset.filter(sale_date__date__lte=end_date)
        if request.query_params.get('has_warranty') in ('true', '1'):
            queryset = queryset.filter(has_warranty=True)

        data = []
        for sale in queryset:
            data.append({
                'ID Venta': sale.id,
                'Fecha': _format_datetime(sale.sale_date),
                'Producto': sale.product_name,
                'Categoría': sale.get_category_display() if sale.category else '',
                'Cliente': sale.customer_name,
                'Teléfono': sale.customer_phone,
                'Cantidad': sale.quantity,
                'Precio Venta': float(sale.selling_price),
                'Costo': float(sale.cost_price) if sale.cost_price is not None else None,
                'Descuentos': float(sale.offers),
                'Total': float(sale.total_amount),
                'Ganji': float(sale.ganji) if sale.ganji is not None else None,
                'Vendedor': sale.salesman.get_username() if sale.salesman else '',
                'IMEI': sale.imei,
                'Garantía': 'Sí' if sale.has_warranty else 'No',
                'Meses Garantía': sale.warranty_months,
                'Inicio Garantía': _format_datetime(sale.warranty_start),
                'Fin Garantía': _format_datetime(sale.warranty_end),
                'Estado Garantía': sale.warranty_status or '',
            })

        return dataframe_response(pd.DataFrame(data), 'ventas', format_type)

    @extend_schema(tags=['Export'])
    @action(detail=False, methods=['get'])
    def warranties(self, request):
        """Exportar garantías registradas con estado calculado"""
        format_type = request.query_params.get('file_format', 'csv')
        status_filter = request.query_params.get('status')

        data = []
        for warranty in Warranty.objects.order_by('-created_at'):
            result = warranty.warranty_result()
            status = result.warranty_status
            expiry = Warranty.expiry_from(result)
            if status_filter and status != status_filter:
                continue
            data.append({
                'ID Garantía': warranty.id,
                'Equipo': warranty.phone_name,
                'Cliente': warranty.customer_name,
                'Email': warranty.customer_email,
                'Teléfono': warranty.customer_phone,
                'Tienda': warranty.store_name,
                'IMEI': warranty.imei_number,
                'Precio': float(warranty.price),
                'Meses': warranty.warranty_period,
                'Registrada': _format_datetime(warranty.created_at),
                'Vence': expiry.isoformat() if expiry else '',
                'Estado': status,
            })

        return dataframe_response(pd.DataFrame(data), 'garantias', format_type)
