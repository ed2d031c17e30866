"""
Manejador global de excepciones DRF.

Cualquier error sale como {"detail", "code", "errors"}; los errores de
serializers anidados (p. ej. ``warranty_details``) se aplanan a
``"warranty_details.customer_email: mensaje"``.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from shop.core.api_responses import build_error_payload, validation_error_payload


def _flatten(field: str | None, value) -> list[str]:
    if isinstance(value, dict):
        return [
            message
            for key, nested in value.items()
            for message in _flatten(f"{field}.{key}" if field else str(key), nested)
        ]
    if isinstance(value, (list, tuple)):
        return [message for item in value for message in _flatten(field, item)]
    return [f"{field}: {value}" if field else str(value)]


def _describe(exc, data) -> tuple[str, list[str]]:
    """Código y lista de mensajes a partir del cuerpo que generó DRF."""
    if isinstance(data, dict) and "detail" in data:
        code = str(getattr(exc, "default_code", "error")).upper()
        return code, _flatten(None, data["detail"])
    code = "VALIDATION_ERROR" if isinstance(exc, ValidationError) else "ERROR"
    return code, _flatten(None, data)


def custom_exception_handler(exc, context):
    # Los servicios pueden lanzar ValidationError de Django, que DRF no traduce
    if isinstance(exc, DjangoValidationError):
        return Response(validation_error_payload(exc), status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)
    if response is None:
        return None

    code, errors = _describe(exc, response.data)
    detail = errors[0] if errors else "Ha ocurrido un error."
    response.data = build_error_payload(detail=detail, code=code, errors=errors)
    return response
