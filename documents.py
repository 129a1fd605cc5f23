# documents.py
"""
Read-only aggregates handed to the PDF generator.

The caller (routes, CLI) resolves and validates records before building these.
The from_dict() constructors only map JSON keys (camelCase or snake_case) onto
fields; they do not re-validate values.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from formatting import parse_date

MATERIAL = "material"
LABOR = "labor"


def _pick(data: Mapping[str, Any], *keys, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _optional_date(value):
    if value in (None, ""):
        return None
    return parse_date(value)


def _optional_int(value):
    if value is None:
        return None
    return int(value)


@dataclass(frozen=True)
class LineItem:
    description: str
    kind: str
    quantity: int
    unit_price_cents: int
    # Trusted as given (expected quantity * unit price); never recomputed.
    total_cents: Optional[int]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LineItem":
        return cls(
            description=_pick(data, "description", default=""),
            kind=_pick(data, "kind", "type", default=LABOR),
            quantity=_pick(data, "quantity", default=0),
            unit_price_cents=_pick(data, "unit_price_cents", "unitPriceCents", "unitPrice", default=0),
            total_cents=_pick(data, "total_cents", "totalCents", "total"),
        )


@dataclass(frozen=True)
class PartyInfo:
    name: str
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PartyInfo":
        return cls(
            name=data["name"],
            contact_name=_pick(data, "contact_name", "contactName"),
            email=data.get("email"),
            phone=data.get("phone"),
            address=data.get("address"),
        )


@dataclass(frozen=True)
class Technician:
    name: str
    role: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Technician":
        return cls(name=data["name"], role=data.get("role"), email=data.get("email"))


@dataclass(frozen=True)
class QuoteDocument:
    id: int
    created_at: date | datetime
    status: str = "pending"
    valid_until: Optional[date | datetime] = None
    description: Optional[str] = None
    total_cents: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QuoteDocument":
        return cls(
            id=data["id"],
            created_at=parse_date(_pick(data, "created_at", "createdAt")),
            status=_pick(data, "status", default="pending"),
            valid_until=_optional_date(_pick(data, "valid_until", "validUntil")),
            description=data.get("description"),
            total_cents=_optional_int(_pick(data, "total_cents", "totalCents", "total")),
        )


@dataclass(frozen=True)
class WorkOrderDocument:
    id: int
    created_at: date | datetime
    service_type: str
    status: str = "pending"
    scheduled_date: Optional[date | datetime] = None
    description: Optional[str] = None
    service_description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], service: Mapping[str, Any] | None = None) -> "WorkOrderDocument":
        service = service or {}
        return cls(
            id=data["id"],
            created_at=parse_date(_pick(data, "created_at", "createdAt")),
            service_type=_pick(service, "service_type", "serviceType")
            or _pick(data, "service_type", "serviceType", default=""),
            status=_pick(data, "status", default="pending"),
            scheduled_date=_optional_date(_pick(data, "scheduled_date", "scheduledDate")),
            description=data.get("description"),
            service_description=_pick(service, "description")
            or _pick(data, "service_description", "serviceDescription"),
        )


@dataclass(frozen=True)
class QuoteData:
    quote: QuoteDocument
    client: PartyInfo
    items: list[LineItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QuoteData":
        return cls(
            quote=QuoteDocument.from_dict(data["quote"]),
            client=PartyInfo.from_dict(data["client"]),
            items=[LineItem.from_dict(i) for i in data.get("items") or []],
        )


@dataclass(frozen=True)
class WorkOrderData:
    work_order: WorkOrderDocument
    client: PartyInfo
    items: list[LineItem] = field(default_factory=list)
    technicians: list[Technician] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkOrderData":
        work_order = _pick(data, "work_order", "workOrder")
        if work_order is None:
            raise KeyError("workOrder")
        return cls(
            work_order=WorkOrderDocument.from_dict(work_order, data.get("service")),
            client=PartyInfo.from_dict(data["client"]),
            items=[LineItem.from_dict(i) for i in data.get("items") or []],
            technicians=[Technician.from_dict(t) for t in data.get("technicians") or []],
        )
