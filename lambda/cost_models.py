# cost_models.py
"""
Value types shared by the collector, the report writer and the dashboard.

Everything here is immutable. `to_dict()` produces the camelCase JSON shape
the front-end reads (totalCost, usageTypes, dailyCosts) and `from_dict()`
rebuilds the value from it.
"""
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional, Tuple

from dateutil import parser


class AggregationError(ValueError):
    """Base class for cost aggregation failures."""


class EmptyInputError(AggregationError):
    """No cost record is left once the noise filter has been applied."""


class InvalidRecordError(AggregationError):
    """A raw cost record is missing a field or carries a bad value."""


# Accept the spellings used by Cost Explorer exports, the old JSON API and our CSVs
FIELD_ALIASES = {
    "date": ["date", "Date"],
    "service": ["service", "Service"],
    "usage_type": ["usageType", "UsageType", "usage_type", "Usage Type"],
    "cost": ["cost", "Cost", "Cost ($)"],
}

UNKNOWN_USAGE_TYPE = "N/A"

# isoparse also takes "2024", "2024-03" and "20240301"; a record date must be a full day
_ISO_DAY = re.compile(r"\d{4}-\d{2}-\d{2}")


def _pick(raw: Mapping[str, Any], names):
    for n in names:
        if n in raw and raw[n] is not None:
            return raw[n]
    return None


def normalize_date(value) -> str:
    """Return `value` as an ISO YYYY-MM-DD string, or raise InvalidRecordError."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text:
        raise InvalidRecordError("date is empty")
    if not _ISO_DAY.match(text):
        raise InvalidRecordError(f"date {text!r} is not an ISO YYYY-MM-DD date")
    try:
        return parser.isoparse(text).date().isoformat()
    except (ValueError, OverflowError) as e:
        raise InvalidRecordError(f"date {text!r} is not an ISO date") from e


def normalize_cost(value) -> float:
    if isinstance(value, bool):
        raise InvalidRecordError(f"cost {value!r} is not a number")
    try:
        cost = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidRecordError(f"cost {value!r} is not a number") from e
    if not math.isfinite(cost):
        raise InvalidRecordError(f"cost {value!r} is not finite")
    if cost < 0:
        raise InvalidRecordError(f"cost {cost} is negative")
    return cost


@dataclass(frozen=True)
class CostRecord:
    """One billed amount for a (date, service, usage type) combination."""

    date: str
    service: str
    usage_type: str
    cost: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "CostRecord":
        if not isinstance(raw, Mapping):
            raise InvalidRecordError(f"expected a mapping, got {type(raw).__name__}")

        values = {}
        for canon, names in FIELD_ALIASES.items():
            v = _pick(raw, names)
            if v is None:
                raise InvalidRecordError(f"record is missing '{names[0]}': {dict(raw)!r}")
            values[canon] = v

        service = str(values["service"]).strip()
        if not service:
            raise InvalidRecordError("service is empty")

        return cls(
            date=normalize_date(values["date"]),
            service=service,
            usage_type=str(values["usage_type"]).strip() or UNKNOWN_USAGE_TYPE,
            cost=normalize_cost(values["cost"]),
        )

    @classmethod
    def coerce(cls, raw) -> "CostRecord":
        """Validate a CostRecord or build one from a mapping."""
        if isinstance(raw, CostRecord):
            service = str(raw.service or "").strip()
            if not service:
                raise InvalidRecordError("service is empty")
            return cls(
                date=normalize_date(raw.date),
                service=service,
                usage_type=str(raw.usage_type or "").strip() or UNKNOWN_USAGE_TYPE,
                cost=normalize_cost(raw.cost),
            )
        return cls.from_mapping(raw)

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "service": self.service,
            "usageType": self.usage_type,
            "cost": self.cost,
        }


@dataclass(frozen=True)
class CostItem:
    """A named amount: a usage type inside a service, or a service inside a day."""

    name: str
    cost: float

    def to_dict(self) -> dict:
        return {"name": self.name, "cost": self.cost}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "CostItem":
        return cls(name=str(d["name"]), cost=float(d["cost"]))


@dataclass(frozen=True)
class ServiceSummary:
    name: str
    cost: float
    percentage: float
    usage_types: Tuple[CostItem, ...] = ()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "cost": self.cost,
            "percentage": self.percentage,
            "usageTypes": [u.to_dict() for u in self.usage_types],
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ServiceSummary":
        return cls(
            name=str(d["name"]),
            cost=float(d["cost"]),
            percentage=float(d["percentage"]),
            usage_types=tuple(CostItem.from_dict(u) for u in d.get("usageTypes", [])),
        )


@dataclass(frozen=True)
class DailyCost:
    date: str
    services: Tuple[CostItem, ...] = ()

    @property
    def total(self) -> float:
        return sum(s.cost for s in self.services)

    def to_dict(self) -> dict:
        return {"date": self.date, "services": [s.to_dict() for s in self.services]}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "DailyCost":
        return cls(
            date=str(d["date"]),
            services=tuple(CostItem.from_dict(s) for s in d.get("services", [])),
        )


@dataclass(frozen=True)
class CostSummary:
    """
    Aggregated view of a billing window.

    services   -> descending by cost
    dailyCosts -> ascending by date
    """

    total_cost: float
    services: Tuple[ServiceSummary, ...] = ()
    daily_costs: Tuple[DailyCost, ...] = ()

    def service(self, name: str) -> Optional[ServiceSummary]:
        for s in self.services:
            if s.name == name:
                return s
        return None

    def to_dict(self) -> dict:
        return {
            "totalCost": self.total_cost,
            "services": [s.to_dict() for s in self.services],
            "dailyCosts": [d.to_dict() for d in self.daily_costs],
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "CostSummary":
        return cls(
            total_cost=float(d["totalCost"]),
            services=tuple(ServiceSummary.from_dict(s) for s in d.get("services", [])),
            daily_costs=tuple(DailyCost.from_dict(x) for x in d.get("dailyCosts", [])),
        )

    def to_records(self) -> list:
        """
        Flatten the daily view back into records (one per date/service).
        Usage-type detail is not kept per day, so it comes back as N/A.
        """
        return [
            CostRecord(date=day.date, service=s.name, usage_type=UNKNOWN_USAGE_TYPE, cost=s.cost)
            for day in self.daily_costs
            for s in day.services
        ]
