"""
Views para gestión de productos
"""
from django.db.models import Count
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from ..models import Product
from ..permissions import IsStorekeeperOrOwner
from .serializers import ProductReadSerializer, ProductSerializer


@extend_schema(tags=['Products'])
class ProductViewSet(viewsets.ModelViewSet):
    """
    ViewSet para gestión de productos

    - Lectura: Usuarios autenticados
    - Creación y edición: bodegueros y dueños de tienda
    - Eliminación: desactiva el producto (las ventas conservan la referencia)
    """
    queryset = Product.objects.annotate(sales_count=Count('sales'))
    permission_classes = [IsStorekeeperOrOwner]
    filterset_fields = ['category', 'brand', 'active']
    search_fields = ['name', 'brand']
    ordering_fields = ['name', 'selling_price', 'stock_quantity', 'created_at']
    ordering = ['name']

    def get_serializer_class(self):
        if self.action in ['list', 'retrieve']:
            return ProductReadSerializer
        return ProductSerializer

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user.username)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        instance.active = False
        instance.save(update_fields=['active', 'updated_at'])
        return Response(status=status.HTTP_204_NO_CONTENT)
