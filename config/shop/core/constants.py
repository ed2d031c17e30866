"""
Constantes compartidas
"""

# Grupos de usuarios (roles de la tienda)
GROUP_SALESMEN = 'Salesmen'
GROUP_STOREKEEPERS = 'Storekeepers'
GROUP_SHOP_OWNERS = 'ShopOwners'

# Nombre usado cuando el usuario no tiene nombre visible
DEFAULT_SENDER_NAME = 'WingaPlus'
