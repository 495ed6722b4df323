from __future__ import annotations

import math
import numbers
import re
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Standard residential features offered for training, in display order.
FEATURE_NAMES: list[str] = [
    "square_feet",
    "bedrooms",
    "bathrooms",
    "year_built",
    "lot_size",
]

Attribute = float | str | None

_LEADING_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _as_number(v: Any) -> float | None:
    """Float value of any real number (numpy scalars, Decimal); None for bools and the rest."""
    if isinstance(v, bool) or not isinstance(v, (numbers.Real, Decimal)):
        return None
    try:
        return float(v)
    except (ValueError, OverflowError):
        return None


class PropertyRecord(BaseModel):
    """One property as supplied by the data layer.

    Numeric attributes are optional. Present values that are not numbers are
    kept as strings so that prediction can degrade them instead of failing.
    Attributes beyond the standard set are accepted as extras and can be used
    as features by name.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    parcel_id: str | None = Field(default=None, alias="parcelId")
    address: str | None = None
    value: Attribute = Field(default=None, description="Assessed or sale value")
    square_feet: Attribute = Field(default=None, alias="squareFeet")
    bedrooms: Attribute = None
    bathrooms: Attribute = None
    year_built: Attribute = Field(default=None, alias="yearBuilt")
    lot_size: Attribute = Field(default=None, alias="lotSize")

    @field_validator(
        "value", "square_feet", "bedrooms", "bathrooms", "year_built", "lot_size", mode="before"
    )
    @classmethod
    def lenient_attribute(cls, v: Any) -> Any:
        number = _as_number(v)
        if number is not None:
            return number
        if v is None or isinstance(v, str):
            return v
        # booleans and other objects are present but not numeric
        return str(v)

    @field_validator("parcel_id", "address", mode="before")
    @classmethod
    def text_field(cls, v: Any) -> Any:
        return None if v is None else str(v)

    def attribute(self, name: str) -> Any:
        """Look up an attribute by field name, camelCase alias or extra key."""
        field = _ALIASES.get(name, name)
        if field in type(self).model_fields:
            return getattr(self, field)
        extra = self.model_extra or {}
        return extra.get(name)

    def has(self, name: str) -> bool:
        return self.attribute(name) is not None


_ALIASES: dict[str, str] = {
    info.alias: name for name, info in PropertyRecord.model_fields.items() if info.alias
}


def numeric_attribute(record: PropertyRecord, name: str) -> float | None:
    """Return the attribute as a float when it is a finite number, else None."""
    v = _as_number(record.attribute(name))
    return v if v is not None and math.isfinite(v) else None


def parse_target(raw: Any) -> float | None:
    """Parse an assessed value such as ``350000``, ``"350000.00"`` or ``"$350,000"``.

    Returns None when no positive finite number can be read.
    """
    if raw is None or isinstance(raw, bool):
        return None
    number = _as_number(raw)
    if number is not None:
        v = number
    else:
        text = str(raw).strip().lstrip("$").replace(",", "")
        m = _LEADING_NUMBER.match(text)
        if m is None:
            return None
        v = float(m.group(0))
    if not math.isfinite(v) or v <= 0:
        return None
    return v


def as_record(obj: PropertyRecord | Mapping[str, Any]) -> PropertyRecord:
    if isinstance(obj, PropertyRecord):
        return obj
    return PropertyRecord.model_validate({str(k): v for k, v in obj.items()})


def as_records(objs: Iterable[PropertyRecord | Mapping[str, Any]]) -> list[PropertyRecord]:
    return [as_record(o) for o in objs]
