"""Fake resources recording acquire and release events into a shared log."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any


class AcquireError(Exception):
    """Raised by a fake resource that fails to acquire."""


class BodyError(Exception):
    """Raised by a block body under test."""


class ReleaseError(Exception):
    """Raised by a fake resource that fails to release."""


@dataclass
class FakeHandle:
    """Already-open handle released through ``close()``."""

    name: str
    events: list[str]
    close_calls: int = 0
    fail_on_close: bool = False

    def close(self) -> None:
        self.close_calls += 1
        self.events.append(f"release:{self.name}")
        if self.fail_on_close:
            raise ReleaseError(self.name)


def open_handle(name: str, events: list[str], *, fail_on_close: bool = False) -> FakeHandle:
    events.append(f"acquire:{name}")
    return FakeHandle(name=name, events=events, fail_on_close=fail_on_close)


@dataclass
class ContinuationProvider:
    """Continuation-style resource that acquires ``value`` around the continuation."""

    name: str
    events: list[str]
    value: Any = None
    fail_on_acquire: bool = False
    received: list[Any] = field(default_factory=list)

    def __call__(self, continuation: Callable[[Any], Any]) -> Any:
        if self.fail_on_acquire:
            self.events.append(f"acquire-failed:{self.name}")
            raise AcquireError(self.name)

        self.events.append(f"acquire:{self.name}")
        value = self.value if self.value is not None else f"{self.name}-value"
        self.received.append(value)
        try:
            return continuation(value)
        finally:
            self.events.append(f"release:{self.name}")


@dataclass
class FakeContextManager:
    """Context manager that is neither closeable nor callable."""

    name: str
    events: list[str]
    suppress: bool = False
    exit_exception_types: list[type[BaseException] | None] = field(default_factory=list)

    def __enter__(self) -> str:
        self.events.append(f"acquire:{self.name}")
        return f"{self.name}-entered"

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        self.exit_exception_types.append(exc_type)
        self.events.append(f"release:{self.name}")
        return self.suppress
