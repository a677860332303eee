from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class StoreOutcome(Enum):
    """Which backend served a facade call."""
    SUCCESS = "success"
    DEGRADED = "degraded"
    FAILED = "failed"


@dataclass
class StoreResult:
    outcome: StoreOutcome
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not StoreOutcome.FAILED

    @property
    def degraded(self) -> bool:
        return self.outcome is StoreOutcome.DEGRADED

    @classmethod
    def success(cls, value: Any = None) -> "StoreResult":
        return cls(StoreOutcome.SUCCESS, value)

    @classmethod
    def fell_back(cls, value: Any = None, error: Optional[Exception] = None) -> "StoreResult":
        return cls(StoreOutcome.DEGRADED, value, error)

    @classmethod
    def failed(cls, error: Exception) -> "StoreResult":
        return cls(StoreOutcome.FAILED, None, error)
