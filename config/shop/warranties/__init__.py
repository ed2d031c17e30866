"""
Módulo de garantías registradas
"""

from .views import WarrantyViewSet
from .serializers import WarrantyCreateSerializer, WarrantyReadSerializer

__all__ = [
    'WarrantyViewSet',
    'WarrantyCreateSerializer',
    'WarrantyReadSerializer',
]
