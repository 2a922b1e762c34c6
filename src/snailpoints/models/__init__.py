"""Pydantic data models for Snail Points."""

from snailpoints.models.counter import Counter, CounterList
from snailpoints.models.session import (
    VERIFICATION_REQUIRED_MESSAGE,
    SessionMode,
    SessionState,
)
from snailpoints.models.settings import (
    ALLOW_NEGATIVE,
    DEFAULT_REDEEM_COST,
    REDEEM_COST,
    ConfigurationEntry,
    SettingKind,
    SettingValue,
)

__all__ = [
    "ALLOW_NEGATIVE",
    "Counter",
    "CounterList",
    "ConfigurationEntry",
    "DEFAULT_REDEEM_COST",
    "REDEEM_COST",
    "SessionMode",
    "SessionState",
    "SettingKind",
    "SettingValue",
    "VERIFICATION_REQUIRED_MESSAGE",
]
