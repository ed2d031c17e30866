from django.core.management.base import BaseCommand

from shop.core.services import refresh_warranty_statuses


class Command(BaseCommand):
    help = "Reevalua el estado guardado de las garantias (active/expired) contra la fecha actual."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Muestra cuantos registros cambiarian sin persistir cambios.",
        )

    def handle(self, *args, **options):
        summary = refresh_warranty_statuses(dry_run=options["dry_run"])
        self.stdout.write(
            self.style.SUCCESS(
                f"Estados revisados. Ventas actualizadas: {summary['sales']}. "
                f"Garantias actualizadas: {summary['warranties']}."
            )
        )
