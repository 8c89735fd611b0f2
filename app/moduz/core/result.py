"""Tagged results returned by the gate and the store.

Services never raise for expected outcomes. They return ``Ok`` with the value
or ``Err`` with a catalog entry; routers decide how to surface the failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from app.moduz.core.error_catalog import AppError, ErrorDefinition

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: ErrorDefinition
    details: dict | None = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def code(self) -> str:
        return self.error.code


Result = Union[Ok[T], Err]


def unwrap(result: Result[T]) -> T:
    if isinstance(result, Err):
        raise AppError(result.error, details=result.details)
    return result.value
