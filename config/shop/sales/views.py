"""
Views para gestión de ventas
"""
from datetime import datetime

from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from ..core.api_responses import error_response, success_response
from ..core.notifications import display_name
from ..core.services import SaleService, WarrantyService
from ..core.warranty import WarrantyStatus, is_active
from ..models import Sale
from ..permissions import IsSalesmanOrOwner, is_shop_owner
from .serializers import (
    SaleReadSerializer,
    SaleWarrantyStatusSerializer,
    SaleWriteSerializer,
)


def _parse_date(value):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def warranty_snapshot(sale: Sale, now=None) -> dict:
    """Estado de garantía de la venta evaluado en ``now``."""
    now = now or timezone.now()
    current_status = None
    days_remaining = None
    if sale.has_warranty:
        if sale.warranty_end is None:
            current_status = WarrantyStatus.UNKNOWN.value
        elif now <= sale.warranty_end:
            current_status = WarrantyStatus.ACTIVE.value
            days_remaining = (sale.warranty_end - now).days
        else:
            current_status = WarrantyStatus.EXPIRED.value
            days_remaining = 0
    return {
        "has_warranty": sale.has_warranty,
        "warranty_months": sale.warranty_months,
        "warranty_start": sale.warranty_start,
        "warranty_end": sale.warranty_end,
        "stored_status": sale.warranty_status,
        "current_status": current_status,
        "is_active": is_active(sale.warranty_start, sale.warranty_end, now),
        "days_remaining": days_remaining,
    }


@extend_schema(tags=["Sales"])
class SaleViewSet(viewsets.ModelViewSet):
    """
    ViewSet para gestión de ventas

    - Lectura y creación: vendedores y dueños de tienda
    - Un vendedor solo ve y modifica sus propias ventas
    - La garantía en línea se calcula al crear y al actualizar
    """

    queryset = Sale.objects.select_related("salesman", "product", "warranty").all()
    permission_classes = [IsSalesmanOrOwner]
    filterset_fields = ["category", "has_warranty", "warranty_status"]
    search_fields = ["product_name", "customer_name", "customer_phone", "imei", "phone_name"]
    ordering_fields = ["sale_date", "created_at", "total_amount", "ganji"]
    ordering = ["-sale_date"]

    def get_serializer_class(self):
        if self.action in ["create", "update", "partial_update"]:
            return SaleWriteSerializer
        if self.action == "warranty":
            return SaleWarrantyStatusSerializer
        return SaleReadSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user

        if not is_shop_owner(user):
            queryset = queryset.filter(salesman=user)

        salesman_id = self.request.query_params.get("salesman_id")
        if salesman_id:
            queryset = queryset.filter(salesman_id=salesman_id)

        # Filtro por fechas (YYYY-MM-DD); valores inválidos se ignoran
        date_from = _parse_date(self.request.query_params.get("date_from"))
        if date_from:
            queryset = queryset.filter(sale_date__date__gte=date_from)
        date_to = _parse_date(self.request.query_params.get("date_to"))
        if date_to:
            queryset = queryset.filter(sale_date__date__lte=date_to)

        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sale = SaleService.create_sale(
            serializer.validated_data,
            user=request.user,
            sender_name=display_name(request.user),
        )
        return success_response(
            detail="Venta registrada",
            code="SALE_CREATED",
            http_status=status.HTTP_201_CREATED,
            data=SaleReadSerializer(sale).data,
        )

    def update(self, request, *args, **kwargs):
        # PUT y PATCH son parciales: {"has_warranty": false} basta para quitar la garantía
        sale = self.get_object()
        serializer = self.get_serializer(sale, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        sale = SaleService.update_sale(
            sale.pk,
            serializer.validated_data,
            user=request.user,
            sender_name=display_name(request.user),
        )
        return success_response(
            detail="Venta actualizada",
            code="SALE_UPDATED",
            data=SaleReadSerializer(sale).data,
        )

    def destroy(self, request, *args, **kwargs):
        sale = self.get_object()
        SaleService.delete_sale(sale.pk, user=request.user)
        return success_response(detail="Venta eliminada", code="SALE_DELETED")

    @action(detail=True, methods=["get"])
    def warranty(self, request, pk=None):
        """Estado actual de la garantía de la venta"""
        sale = self.get_object()
        serializer = SaleWarrantyStatusSerializer(warranty_snapshot(sale))
        return Response(serializer.data)

    @action(detail=True, methods=["post"], url_path="resend-warranty")
    def resend_warranty(self, request, pk=None):
        """Reenvía el correo de garantía al cliente"""
        sale = self.get_object()
        if not sale.has_warranty:
            return error_response(
                detail="La venta no tiene garantía",
                code="SALE_WITHOUT_WARRANTY",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        sent = WarrantyService.resend_sale_warranty_email(sale, display_name(request.user))
        if not sent:
            return error_response(
                detail="No se pudo enviar el correo de garantía",
                code="WARRANTY_EMAIL_NOT_SENT",
                http_status=status.HTTP_409_CONFLICT,
            )
        return success_response(detail="Correo de garantía reenviado", code="WARRANTY_EMAIL_SENT")
