"""
Servicios de negocio para WingaPlus
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping

from django.db import transaction
from django.utils import timezone

from ..models import AuditLog, Sale, Warranty
from . import notifications
from .warranty import WarrantyDetails, WarrantyStatus, calculate

logger = logging.getLogger(__name__)

WARRANTY_FIELDS = ("warranty_start", "warranty_end", "warranty_status")
WARRANTY_INPUT_FIELDS = ("has_warranty", "warranty_start", "warranty_details")


def cleared_warranty_fields() -> dict[str, Any]:
    return {
        "has_warranty": False,
        "warranty_start": None,
        "warranty_end": None,
        "warranty_status": None,
        "warranty_details": None,
    }


def warranty_fields_for_create(data: Mapping[str, Any], now=None) -> dict[str, Any]:
    """Campos de garantía a guardar al crear una venta."""
    if not data.get("has_warranty"):
        fields = {"has_warranty": False, "warranty_start": None, "warranty_end": None, "warranty_status": None}
        if data.get("warranty_details"):
            fields["warranty_details"] = WarrantyDetails.from_data(data["warranty_details"]).as_dict()
        return fields

    result = calculate(data, now=now)
    return {
        "has_warranty": True,
        **result.as_dict(),
        "warranty_details": WarrantyDetails.from_data(data.get("warranty_details")).as_dict(),
    }


def warranty_fields_for_update(sale: Sale, data: Mapping[str, Any], now=None) -> dict[str, Any]:
    """
    Campos de garantía a sobrescribir al actualizar una venta.

    - ``has_warranty=False`` explícito siempre limpia, aunque lleguen meses.
    - Con garantía (explícita u omitida y ya activa) se recalcula si llegan
      ``warranty_months``/``warranty_start`` o si la venta pasa de no tener
      garantía a tenerla. Los valores de la petición tienen prioridad; los
      guardados completan lo que falte.
    - En otro caso devuelve un dict vacío y la venta queda intacta.
    """
    if "has_warranty" in data and not data["has_warranty"]:
        return cleared_warranty_fields()

    has_warranty = data["has_warranty"] if "has_warranty" in data else sale.has_warranty
    if not has_warranty:
        return {}

    turning_on = not sale.has_warranty
    touched = "warranty_months" in data or "warranty_start" in data
    fields: dict[str, Any] = {}

    if turning_on or touched:
        months = data["warranty_months"] if "warranty_months" in data else sale.warranty_months
        if "warranty_start" in data:
            start = data["warranty_start"]
        else:
            start = None if turning_on else sale.warranty_start
        result = calculate({"warranty_start": start, "warranty_months": months}, now=now)
        fields.update({"has_warranty": True, **result.as_dict()})

    if data.get("warranty_details") is not None:
        fields["warranty_details"] = WarrantyDetails.from_data(data["warranty_details"]).as_dict()
    elif turning_on and sale.warranty_details is None:
        fields["warranty_details"] = {}

    return fields


def _money(value) -> Decimal:
    return Decimal(str(value or 0))


def compute_amounts(
    quantity, selling_price, cost_price=None, offers=None
) -> dict[str, Decimal | None]:
    """Total y ganancia (ganji) de una línea de venta."""
    quantity = int(quantity or 1)
    selling_price = _money(selling_price)
    amounts: dict[str, Decimal | None] = {"total_amount": selling_price * quantity}
    if cost_price is not None:
        amounts["ganji"] = (selling_price - _money(cost_price)) * quantity - _money(offers)
    return amounts


def _audit(action: str, sale: Sale, user, **extra) -> None:
    AuditLog.objects.create(
        action=action,
        entity="sale",
        entity_id=sale.pk,
        performed_by=getattr(user, "username", "") or "system",
        extra_data=extra or None,
    )


class SaleService:
    """Alta, modificación y baja de ventas con su garantía en línea."""

    @staticmethod
    def create_sale(data: Mapping[str, Any], user=None, sender_name: str | None = None, now=None) -> Sale:
        values = dict(data)
        product = values.get("product")

        product_name = (values.get("product_name") or "").strip().lower()
        if not product_name and product is not None:
            product_name = product.name
        values["product_name"] = product_name
        if product is not None and not values.get("category"):
            values["category"] = product.category

        if values.get("selling_price") is None:
            values["selling_price"] = values["unit_price"]
        values.update(
            compute_amounts(
                values.get("quantity"),
                values["selling_price"],
                values.get("cost_price"),
                values.get("offers"),
            )
        )
        values["sale_date"] = values.get("sale_date") or timezone.now()

        if user is not None and getattr(user, "is_authenticated", False):
            if values.get("salesman") is None:
                values["salesman"] = user
            values["created_by"] = user.username

        values.update(warranty_fields_for_create(data, now=now))

        with transaction.atomic():
            sale = Sale.objects.create(**values)
            if sale.has_warranty:
                logger.info(
                    "Venta %s con garantía %s meses (%s -> %s, %s)",
                    sale.pk, sale.warranty_months, sale.warranty_start, sale.warranty_end, sale.warranty_status,
                )
                _audit("enable_warranty", sale, user, warranty_status=sale.warranty_status)
                if sale.warranty_status == WarrantyStatus.ACTIVE:
                    notifications.notify_sale_warranty(
                        sale, sender_name or notifications.display_name(user)
                    )
        return sale

    @staticmethod
    def update_sale(sale_id: int, data: Mapping[str, Any], user=None, sender_name: str | None = None, now=None) -> Sale:
        with transaction.atomic():
            sale = Sale.objects.select_for_update().get(pk=sale_id)
            previously_warranted = sale.has_warranty
            # Los campos de garantía solo se escriben a través del cálculo
            values = {key: value for key, value in data.items() if key not in WARRANTY_INPUT_FIELDS}

            if "product_name" in values:
                values["product_name"] = (values["product_name"] or "").strip().lower()

            if "unit_price" in values and "selling_price" not in values and sale.selling_price == sale.unit_price:
                values["selling_price"] = values["unit_price"]
            if "selling_price" in values and values["selling_price"] is None:
                values["selling_price"] = values.get("unit_price", sale.unit_price)
            if "sale_date" in values and values["sale_date"] is None:
                del values["sale_date"]

            pricing_keys = ("quantity", "selling_price", "unit_price", "cost_price", "offers")
            if any(key in values for key in pricing_keys):
                cost_price = values["cost_price"] if "cost_price" in values else sale.cost_price
                amounts = compute_amounts(
                    values.get("quantity", sale.quantity),
                    values["selling_price"] if "selling_price" in values else sale.selling_price,
                    cost_price,
                    values.get("offers", sale.offers),
                )
                values.update(amounts)

            values.update(warranty_fields_for_update(sale, data, now=now))

            for field, value in values.items():
                setattr(sale, field, value)
            sale.save()

            if previously_warranted and not sale.has_warranty:
                logger.info("Garantía desactivada en la venta %s", sale.pk)
                _audit("disable_warranty", sale, user)
            elif sale.has_warranty and any(field in values for field in WARRANTY_FIELDS):
                action = "recompute_warranty" if previously_warranted else "enable_warranty"
                logger.info(
                    "Garantía %s en la venta %s (%s -> %s, %s)",
                    action, sale.pk, sale.warranty_start, sale.warranty_end, sale.warranty_status,
                )
                _audit(action, sale, user, warranty_status=sale.warranty_status)
                if not previously_warranted and sale.warranty_status == WarrantyStatus.ACTIVE:
                    notifications.notify_sale_warranty(
                        sale, sender_name or notifications.display_name(user)
                    )
        return sale

    @staticmethod
    def delete_sale(sale_id: int, user=None) -> None:
        with transaction.atomic():
            sale = Sale.objects.select_for_update().get(pk=sale_id)
            _audit(
                "delete_sale",
                sale,
                user,
                product_name=sale.product_name,
                total_amount=float(sale.total_amount),
            )
            sale.delete()


class WarrantyService:
    """Garantías registradas por separado y su correo de confirmación."""

    @staticmethod
    def file_warranty(data: Mapping[str, Any], user=None, sender_name: str | None = None) -> Warranty:
        with transaction.atomic():
            warranty = Warranty.objects.create(
                **data,
                created_by=getattr(user, "username", "") or "",
            )
            warranty.status = warranty.calculated_status
            warranty.save(update_fields=["status"])
            logger.info(
                "Garantía %s registrada para %s (%s meses, vence %s)",
                warranty.pk, warranty.customer_email, warranty.warranty_period, warranty.expiry_date,
            )
            notifications.notify_filed_warranty(warranty, sender_name or notifications.display_name(user))
        return warranty

    @staticmethod
    def resend_warranty_email(warranty: Warranty, sender_name: str) -> bool:
        message = notifications.build_filed_warranty_message(warranty, sender_name)
        return notifications.send_message(message)

    @staticmethod
    def resend_sale_warranty_email(sale: Sale, sender_name: str) -> bool:
        if not sale.has_warranty:
            return False
        message = notifications.build_sale_warranty_message(sale, sender_name)
        return notifications.send_message(message)


@transaction.atomic
def refresh_warranty_statuses(*, now=None, dry_run: bool = False) -> dict[str, int]:
    """
    Reevalúa el estado guardado de las garantías frente al reloj.

    Las ventas guardan el estado calculado al momento de la venta; esta
    función marca como vencidas las que ya pasaron su fecha de fin.
    """
    now = now or timezone.now()

    stale_sales = Sale.objects.filter(has_warranty=True, warranty_end__isnull=False)
    to_expire = stale_sales.filter(warranty_end__lt=now).exclude(warranty_status=WarrantyStatus.EXPIRED)
    to_activate = stale_sales.filter(warranty_end__gte=now).exclude(warranty_status=WarrantyStatus.ACTIVE)
    sales_updated = to_expire.count() + to_activate.count()

    warranties_updated = 0
    changed_warranties = []
    for warranty in Warranty.objects.all():
        status = warranty.warranty_result(now=now).warranty_status
        if warranty.status != status:
            warranty.status = status
            changed_warranties.append(warranty)
    warranties_updated = len(changed_warranties)

    if not dry_run:
        to_expire.update(warranty_status=WarrantyStatus.EXPIRED, updated_at=now)
        to_activate.update(warranty_status=WarrantyStatus.ACTIVE, updated_at=now)
        Warranty.objects.bulk_update(changed_warranties, ["status"])

    logger.info(
        "Estados de garantía revisados: %s ventas, %s garantías%s",
        sales_updated, warranties_updated, " (dry-run)" if dry_run else "",
    )
    return {"sales": sales_updated, "warranties": warranties_updated}
