from __future__ import annotations
from typing import Mapping


class UsageLogicError(Exception): ...


class ConfigError(UsageLogicError): ...


class IngestError(UsageLogicError): ...


class StoreError(UsageLogicError): ...


class EntryNotFoundError(StoreError): ...


class EntryValidationError(StoreError):
    """Raised by the store when a candidate entry fails validation."""

    def __init__(self, errors: Mapping[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(detail or "Entry is invalid")


def require(condition: bool, message: str, exc: type[UsageLogicError] = UsageLogicError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
