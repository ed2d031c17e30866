"""
Notificaciones por correo de garantías.

El nombre de quien registra la garantía llega siempre como parámetro
(``sender_name``); este módulo no consulta el usuario de la petición.
Los envíos se programan con ``transaction.on_commit`` y un fallo de correo
solo se registra en el log: nunca revierte la venta ni la garantía.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.db import transaction
from django.template.loader import render_to_string

from .constants import DEFAULT_SENDER_NAME
from .warranty import WarrantyDetails

logger = logging.getLogger(__name__)

TEMPLATE_HTML = "emails/warranty_filed.html"
TEMPLATE_TEXT = "emails/warranty_filed.txt"


def display_name(user) -> str:
    """Nombre visible de un usuario para el asunto del correo."""
    fallback = getattr(settings, "WARRANTY_DEFAULT_SENDER_NAME", DEFAULT_SENDER_NAME)
    if user is None or not getattr(user, "is_authenticated", False):
        return fallback
    return user.get_full_name().strip() or user.get_username() or fallback


def _build_message(recipient: str, product_name: str, sender_name: str, context: dict) -> EmailMultiAlternatives:
    context = {**context, "sender_name": sender_name, "product_name": product_name}
    subject = f"Garantía registrada por {sender_name} - {product_name}"
    message = EmailMultiAlternatives(
        subject=subject,
        body=render_to_string(TEMPLATE_TEXT, context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[recipient],
    )
    message.attach_alternative(render_to_string(TEMPLATE_HTML, context), "text/html")
    return message


def build_sale_warranty_message(sale, sender_name: str) -> EmailMultiAlternatives | None:
    """Correo para una venta con garantía; ``None`` si no hay email del cliente."""
    details = WarrantyDetails.from_data(sale.warranty_details)
    if not details.customer_email:
        return None

    product_name = sale.phone_name or sale.product_name or (sale.product.name if sale.product else "")
    context = {
        "customer_name": details.customer_name or sale.customer_name,
        "warranty_months": sale.warranty_months,
        "warranty_start": sale.warranty_start,
        "warranty_end": sale.warranty_end,
        "imei": details.imei or sale.imei,
        "color": details.color or sale.color,
        "storage": details.storage or sale.storage,
        "store_name": sale.reference_store,
    }
    return _build_message(details.customer_email, product_name, sender_name, context)


def build_filed_warranty_message(warranty, sender_name: str) -> EmailMultiAlternatives | None:
    """Correo de confirmación de una garantía registrada por separado."""
    if not warranty.customer_email:
        return None

    context = {
        "customer_name": warranty.customer_name,
        "warranty_months": warranty.warranty_period,
        "warranty_start": warranty.created_at,
        "warranty_end": warranty.expiry_date,
        "imei": warranty.imei_number,
        "color": warranty.color,
        "storage": warranty.storage,
        "store_name": warranty.store_name,
    }
    return _build_message(warranty.customer_email, warranty.phone_name, sender_name, context)


def send_message(message: EmailMultiAlternatives | None) -> bool:
    if message is None:
        return False
    if not getattr(settings, "WARRANTY_NOTIFICATIONS_ENABLED", True):
        logger.info("Notificaciones de garantía desactivadas; no se envía a %s", message.to)
        return False
    try:
        message.send(fail_silently=False)
    except Exception:
        logger.exception("No se pudo enviar el correo de garantía a %s", message.to)
        return False
    logger.info("Correo de garantía enviado a %s", message.to)
    return True


def notify_sale_warranty(sale, sender_name: str) -> None:
    """Programa el correo de la venta para después del commit."""
    message = build_sale_warranty_message(sale, sender_name)
    if message is None:
        logger.debug("Venta %s sin email de cliente; no se notifica", sale.pk)
        return
    transaction.on_commit(lambda: send_message(message))


def notify_filed_warranty(warranty, sender_name: str) -> None:
    message = build_filed_warranty_message(warranty, sender_name)
    if message is None:
        return
    transaction.on_commit(lambda: send_message(message))
