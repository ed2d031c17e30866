"""
Módulo core - Funcionalidades compartidas

Los servicios (``core.services``) dependen de los modelos y se importan
directamente desde su módulo para evitar imports circulares.
"""

from .constants import GROUP_SALESMEN, GROUP_STOREKEEPERS, GROUP_SHOP_OWNERS
from .warranty import (
    WarrantyDetails,
    WarrantyInput,
    WarrantyResult,
    WarrantyStatus,
    calculate,
    is_active,
)

__all__ = [
    # Grupos de usuarios
    'GROUP_SALESMEN',
    'GROUP_STOREKEEPERS',
    'GROUP_SHOP_OWNERS',

    # Garantías
    'WarrantyDetails',
    'WarrantyInput',
    'WarrantyResult',
    'WarrantyStatus',
    'calculate',
    'is_active',
]
