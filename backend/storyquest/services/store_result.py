"""Outcome of a best-effort call to an external store.

Stores never raise; they report ``ok=False`` with the error text and let the
caller decide, per call site, what a failure means.
"""
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class StoreResult:
    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "StoreResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "StoreResult":
        return cls(ok=False, error=error)

    def value_or(self, default: Any) -> Any:
        if not self.ok or self.value is None:
            return default
        return self.value
