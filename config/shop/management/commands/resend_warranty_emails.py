"""
Reenvía correos de garantía a clientes
Ejecutar con: python manage.py resend_warranty_emails --since=2025-10-01 [--sales] [--dry-run]
"""

from datetime import datetime

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from shop.core.services import WarrantyService
from shop.core.warranty import WarrantyDetails
from shop.models import Sale, Warranty


class Command(BaseCommand):
    help = 'Reenvía el correo de confirmación de garantías registradas (y opcionalmente de ventas)'

    def add_arguments(self, parser):
        parser.add_argument('--since', help='Solo registros creados desde esta fecha (YYYY-MM-DD)')
        parser.add_argument('--id', type=int, help='Reenviar solo la garantía con este id')
        parser.add_argument('--sales', action='store_true', help='Incluir ventas con garantía en línea')
        parser.add_argument('--sender', help='Nombre que aparece en el asunto del correo')
        parser.add_argument('--dry-run', action='store_true', help='Lista destinatarios sin enviar')

    def handle(self, *args, **options):
        sender_name = options['sender'] or settings.WARRANTY_DEFAULT_SENDER_NAME
        dry_run = options['dry_run']

        since = None
        if options['since']:
            try:
                since = timezone.make_aware(datetime.strptime(options['since'], '%Y-%m-%d'))
            except ValueError:
                raise CommandError('Formato de fecha inválido, use YYYY-MM-DD')

        warranties = Warranty.objects.all()
        if options['id']:
            warranties = warranties.filter(pk=options['id'])
            if not warranties.exists():
                raise CommandError(f"Garantía {options['id']} no existe")
        if since:
            warranties = warranties.filter(created_at__gte=since)

        sent = failed = 0
        for warranty in warranties:
            if dry_run:
                self.stdout.write(f"[dry-run] Garantía #{warranty.pk} -> {warranty.customer_email}")
                continue
            if WarrantyService.resend_warranty_email(warranty, sender_name):
                sent += 1
            else:
                failed += 1
                self.stdout.write(self.style.WARNING(f"Garantía #{warranty.pk}: no enviado"))

        if options['sales']:
            sales = Sale.objects.filter(has_warranty=True)
            if since:
                sales = sales.filter(created_at__gte=since)
            for sale in sales:
                email = WarrantyDetails.from_data(sale.warranty_details).customer_email
                if not email:
                    continue
                if dry_run:
                    self.stdout.write(f"[dry-run] Venta #{sale.pk} -> {email}")
                    continue
                if WarrantyService.resend_sale_warranty_email(sale, sender_name):
                    sent += 1
                else:
                    failed += 1
                    self.stdout.write(self.style.WARNING(f"Venta #{sale.pk}: no enviado"))

        self.stdout.write(self.style.SUCCESS(f"Correos enviados: {sent}. Fallidos: {failed}."))
