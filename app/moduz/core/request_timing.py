"""Per-request accumulation of time spent in the database."""

from __future__ import annotations

from contextvars import ContextVar, Token

_db_elapsed: ContextVar[float | None] = ContextVar("moduz_db_elapsed_ms", default=None)


class DbTimer:
    def __init__(self) -> None:
        self._token: Token | None = None

    def __enter__(self) -> "DbTimer":
        self._token = _db_elapsed.set(0.0)
        return self

    def __exit__(self, *exc_info) -> None:
        if self._token is not None:
            _db_elapsed.reset(self._token)
            self._token = None

    @property
    def elapsed_ms(self) -> float | None:
        return _db_elapsed.get()


def is_timing() -> bool:
    return _db_elapsed.get() is not None


def add_db_time(delta_ms: float) -> None:
    current = _db_elapsed.get()
    if current is not None:
        _db_elapsed.set(current + delta_ms)
