"""
Two-variant result type returned from use-case boundaries.

Sync, admission and login never raise across their boundary; callers branch on
``isinstance(result, Success)`` or on ``result.ok``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    error: Exception

    @property
    def ok(self) -> bool:
        return False

    @property
    def reason(self) -> str:
        return str(self.error)


Result = Union[Success[T], Failure]
