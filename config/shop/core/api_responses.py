"""
Respuestas API con forma fija.

- Éxito: ``{"detail", "code", ...extra}`` (p. ej. ``data`` con la venta).
- Error: ``{"detail", "code", "errors"}``; ``errors`` nunca va vacío.
"""

from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response

VALIDATION_ERROR = "VALIDATION_ERROR"


def build_success_payload(detail: str, code: str = "SUCCESS", **extra: Any) -> dict[str, Any]:
    return {"detail": detail, "code": code, **extra}


def build_error_payload(detail: str, code: str = "ERROR", errors: list[str] | None = None, **extra: Any) -> dict[str, Any]:
    return {"detail": detail, "code": code, "errors": list(errors or [detail]), **extra}


def _django_error_messages(exc: DjangoValidationError) -> list[str]:
    if not hasattr(exc, "error_dict"):
        return [str(message) for message in exc.messages]
    return [
        f"{field}: {message}"
        for field, messages in exc.message_dict.items()
        for message in messages
    ]


def validation_error_payload(exc: Exception, default_detail: str = "Error de validación") -> dict[str, Any]:
    """Convierte un ValidationError de Django (o cualquier excepción) al contrato de error."""
    if isinstance(exc, DjangoValidationError):
        messages = [message for message in _django_error_messages(exc) if message]
    else:
        messages = [str(exc)] if str(exc) else []
    messages = messages or [default_detail]
    return build_error_payload(detail=messages[0], code=VALIDATION_ERROR, errors=messages)


def success_response(detail: str, code: str = "SUCCESS", http_status: int = status.HTTP_200_OK, **extra: Any) -> Response:
    return Response(build_success_payload(detail, code, **extra), status=http_status)


def error_response(
    detail: str,
    code: str = "ERROR",
    http_status: int = status.HTTP_400_BAD_REQUEST,
    errors: list[str] | None = None,
    **extra: Any,
) -> Response:
    return Response(build_error_payload(detail, code, errors, **extra), status=http_status)
