"""
Cálculo de garantías.

Convierte una fecha de inicio y una duración en meses en el trío
(inicio, fin, estado) que se copia sobre una venta o una garantía registrada.
No toca la base de datos.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import date, datetime, time
from typing import Any, Mapping

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from django.db import models
from django.utils import timezone


class WarrantyStatus(models.TextChoices):
    ACTIVE = "active", "Activa"
    EXPIRED = "expired", "Vencida"
    UNKNOWN = "unknown", "Desconocida"


@dataclass(frozen=True)
class WarrantyInput:
    warranty_start: Any = None
    warranty_months: Any = None

    @classmethod
    def from_data(cls, data: Mapping[str, Any] | None) -> "WarrantyInput":
        data = data or {}
        return cls(
            warranty_start=data.get("warranty_start"),
            warranty_months=data.get("warranty_months"),
        )


@dataclass(frozen=True)
class WarrantyResult:
    warranty_start: datetime
    warranty_end: datetime | None
    warranty_status: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "warranty_start": self.warranty_start,
            "warranty_end": self.warranty_end,
            "warranty_status": self.warranty_status,
        }


@dataclass
class WarrantyDetails:
    """Datos del equipo y del cliente adjuntos a una venta con garantía."""

    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    imei: str | None = None
    color: str | None = None
    storage: str | None = None

    @classmethod
    def from_data(cls, data: Mapping[str, Any] | None) -> "WarrantyDetails":
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        # Formularios antiguos enviaban "imei_number" en lugar de "imei"
        if not values.get("imei") and data.get("imei_number"):
            values["imei"] = data["imei_number"]
        return cls(**values)

    def as_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value not in (None, "")}


def coerce_months(value: Any) -> int:
    """Convierte la duración a entero truncando; lo no numérico vale 0."""
    if value is None or value == "":
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError):
        return 0


def parse_start(value: Any) -> datetime:
    """Interpreta ``value`` como fecha/hora consciente de zona horaria."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        parsed = date_parser.parse(str(value))

    if timezone.is_naive(parsed):
        return timezone.make_aware(parsed, timezone.get_current_timezone())
    # Los meses se suman en el calendario local (TIME_ZONE), nunca en UTC
    return timezone.localtime(parsed)


def add_months(start: datetime, months: int) -> datetime:
    # relativedelta ajusta el día al último válido del mes (31 ene + 1 = 28/29 feb)
    return start + relativedelta(months=months)


def calculate(data: Mapping[str, Any] | WarrantyInput | None = None, now: datetime | None = None) -> WarrantyResult:
    """
    Calcula inicio, fin y estado de una garantía.

    Args:
        data: ``warranty_start`` y ``warranty_months`` opcionales.
        now: Instante de referencia; por defecto ``timezone.now()``.

    Returns:
        WarrantyResult: fin nulo y estado ``unknown`` cuando no hay meses.
    """
    if not isinstance(data, WarrantyInput):
        data = WarrantyInput.from_data(data)

    now = now or timezone.now()
    months = coerce_months(data.warranty_months)
    start = parse_start(data.warranty_start) if data.warranty_start not in (None, "") else timezone.localtime(now)

    # Meses negativos no se rechazan aquí; sin meses positivos no hay fin
    end = add_months(start, months) if months > 0 else None

    if end is None:
        status = WarrantyStatus.UNKNOWN
    elif now <= end:
        status = WarrantyStatus.ACTIVE
    else:
        status = WarrantyStatus.EXPIRED

    return WarrantyResult(warranty_start=start, warranty_end=end, warranty_status=str(status.value))


def is_active(start: datetime | None, end: datetime | None, now: datetime | None = None) -> bool:
    if not start or not end:
        return False
    now = now or timezone.now()
    return start <= now <= end
