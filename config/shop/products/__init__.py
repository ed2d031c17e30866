"""
Módulo de gestión de productos
"""

from .views import ProductViewSet
from .serializers import ProductSerializer, ProductReadSerializer

__all__ = [
    'ProductViewSet',
    'ProductSerializer',
    'ProductReadSerializer',
]
