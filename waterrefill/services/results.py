"""Outcome type returned to callers instead of raising."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class OperationResult:
    success: bool
    message: Optional[str] = None
    value: Any = None

    @classmethod
    def ok(cls, value: Any = None, message: Optional[str] = None) -> "OperationResult":
        return cls(True, message, value)

    @classmethod
    def failed(cls, message: str) -> "OperationResult":
        return cls(False, message)
