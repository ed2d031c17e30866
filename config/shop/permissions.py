from rest_framework import permissions

from .core.constants import GROUP_SALESMEN, GROUP_SHOP_OWNERS, GROUP_STOREKEEPERS


def in_groups(user, *names) -> bool:
    return user.groups.filter(name__in=names).exists()


def is_shop_owner(user) -> bool:
    return bool(user and user.is_authenticated and (user.is_staff or in_groups(user, GROUP_SHOP_OWNERS)))


class IsSalesmanOrOwner(permissions.BasePermission):
    """
    Permite registrar y consultar ventas a vendedores y dueños de tienda.
    Un vendedor solo puede modificar sus propias ventas.
    """

    def has_permission(self, request, view):
        return request.user.is_authenticated and (
            is_shop_owner(request.user)
            or in_groups(request.user, GROUP_SALESMEN)
        )

    def has_object_permission(self, request, view, obj):
        if is_shop_owner(request.user):
            return True
        # Las garantías registradas no tienen vendedor asignado
        if not hasattr(obj, "salesman_id"):
            return True
        return obj.salesman_id == request.user.id


class IsStorekeeperOrOwner(permissions.BasePermission):
    """
    Permite gestionar el catálogo a bodegueros y dueños; lectura a cualquier autenticado.
    """

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_shop_owner(request.user) or in_groups(request.user, GROUP_STOREKEEPERS)


class IsShopOwner(permissions.BasePermission):
    """
    Reportes y exportaciones: solo dueños de tienda y administradores.
    """

    def has_permission(self, request, view):
        return is_shop_owner(request.user)
