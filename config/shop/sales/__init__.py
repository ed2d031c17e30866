"""
Módulo de gestión de ventas
"""

from .views import SaleViewSet
from .serializers import (
    SaleReadSerializer,
    SaleWriteSerializer,
    WarrantyDetailsSerializer,
)

__all__ = [
    'SaleViewSet',
    'SaleReadSerializer',
    'SaleWriteSerializer',
    'WarrantyDetailsSerializer',
]
