"""Base configuration for engine contracts.

All contracts inherit from ContractBase which enforces:
- Immutability (frozen models)
- Extra fields are forbidden
- Both API field names (camelCase aliases) and Python names are accepted
- JSON (de)serialisation via orjson
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict


class ContractBase(BaseModel):
    """Base class for all engine contracts."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_json(self) -> bytes:
        """Serialize to JSON bytes using API field names."""
        return orjson.dumps(self.model_dump(mode="json", by_alias=True, exclude_none=True))

    @classmethod
    def from_json(cls, data: bytes | str) -> Any:
        """Deserialize from JSON."""
        if isinstance(data, str):
            data = data.encode()
        return cls.model_validate(orjson.loads(data))


def parse_decimal(v: Any) -> Decimal:
    """Parse value to Decimal safely.

    Accepts:
    - Decimal (passthrough)
    - str (parsed to Decimal)
    - int (converted via string to avoid precision loss)
    - float (converted via string)
    """
    if isinstance(v, bool):
        raise ValueError("Cannot convert bool to Decimal")
    if isinstance(v, Decimal):
        return v
    if isinstance(v, (int, float)):
        v = str(v)
    if isinstance(v, str):
        try:
            return Decimal(v.strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid decimal string: {v!r}") from e
    raise ValueError(f"Cannot convert {type(v).__name__} to Decimal")


def format_amount(value: float) -> str:
    """Format a float quantity as a plain decimal string.

    Keeps the shortest round-tripping representation of `value`: no
    exponent, no trailing zeros, no rounding.
    """
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
