"""Server-held configuration entries."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Union

from pydantic import BaseModel

SettingValue = Union[bool, int, str]

# Well-known keys that drive counter behaviour.
ALLOW_NEGATIVE = "ALLOW_NEGATIVE"
REDEEM_COST = "REDEEM_COST"
DEFAULT_REDEEM_COST = 20


class SettingKind(StrEnum):
    """Value type of a configuration entry."""
    BOOL = "bool"
    INT = "int"
    TEXT = "text"

    @classmethod
    def infer(cls, value: Any) -> SettingKind:
        # bool is a subclass of int, check it first
        if isinstance(value, bool):
            return cls.BOOL
        if isinstance(value, int):
            return cls.INT
        return cls.TEXT


def coerce_value(kind: SettingKind, value: Any) -> SettingValue:
    """Coerce *value* to the Python type for *kind*.

    Never raises: values with no sensible reading (``None``, lists, ...)
    become ``False``, ``0`` or their string form.
    """
    if kind is SettingKind.BOOL:
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if kind is SettingKind.INT:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, str):
            digits = "".join(ch for ch in value if ch.isdigit())
            return int(digits) if digits else 0
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return 0
    return "" if value is None else str(value)


class ConfigurationEntry(BaseModel):
    """One configuration entry with its value type carried explicitly."""
    model_config = {"frozen": True}

    key: str
    kind: SettingKind
    value: SettingValue
    formatted: str = ""

    @classmethod
    def from_wire(cls, key: str, payload: dict[str, Any]) -> ConfigurationEntry:
        """Build an entry from a ``{value, formatted}`` mapping."""
        value = payload.get("value")
        kind = SettingKind.infer(value)
        return cls(
            key=key,
            kind=kind,
            value=coerce_value(kind, value),
            formatted=str(payload.get("formatted") or key),
        )

    def with_value(self, value: Any) -> ConfigurationEntry:
        """Return a copy holding *value* coerced to this entry's kind."""
        return self.model_copy(update={"value": coerce_value(self.kind, value)})
