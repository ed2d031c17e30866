"""
Comando de Django para configurar los roles de la tienda
Ejecutar con: python manage.py setup_permissions
"""

from django.contrib.auth.models import Group, Permission
from django.core.management.base import BaseCommand

from shop.core.constants import GROUP_SALESMEN, GROUP_SHOP_OWNERS, GROUP_STOREKEEPERS


ROLE_PERMISSIONS = {
    GROUP_SALESMEN: {
        'description': 'Vendedores',
        'permissions': [
            'view_product',
            'view_sale',
            'add_sale',
            'change_sale',
            'view_warranty',
            'add_warranty',
        ],
    },
    GROUP_STOREKEEPERS: {
        'description': 'Bodegueros',
        'permissions': [
            'view_product',
            'add_product',
            'change_product',
            'view_sale',
        ],
    },
    GROUP_SHOP_OWNERS: {
        'description': 'Dueños de tienda',
        'permissions': [
            'view_product',
            'add_product',
            'change_product',
            'delete_product',
            'view_sale',
            'add_sale',
            'change_sale',
            'delete_sale',
            'view_warranty',
            'add_warranty',
            'change_warranty',
            'view_auditlog',
        ],
    },
}


class Command(BaseCommand):
    help = 'Configura los grupos (roles) de la tienda y sus permisos'

    def handle(self, *args, **options):
        self.stdout.write('Configurando grupos y permisos...')

        for group_name, group_info in ROLE_PERMISSIONS.items():
            group, created = Group.objects.get_or_create(name=group_name)
            if created:
                self.stdout.write(f"Grupo '{group_name}' creado ({group_info['description']})")
            else:
                self.stdout.write(f"Grupo '{group_name}' ya existe")

            group.permissions.clear()

            codenames = group_info['permissions']
            permissions = Permission.objects.filter(
                content_type__app_label='shop', codename__in=codenames
            )
            group.permissions.add(*permissions)

            missing = set(codenames) - set(permissions.values_list('codename', flat=True))
            for codename in sorted(missing):
                self.stdout.write(self.style.WARNING(f"  Permiso '{codename}' no encontrado"))

            self.stdout.write(f"  {permissions.count()} permisos asignados a '{group_name}'")

        self.stdout.write(self.style.SUCCESS('Configuración de permisos completada'))
