"""Mix closeable handles, continuation-style providers, and context managers."""

from __future__ import annotations

from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any

from withopen import scoped_block


def transaction(log: list[str]) -> Callable[[Callable[[str], Any]], Any]:
    def provide(continuation: Callable[[str], Any]) -> Any:
        log.append("begin")
        try:
            return continuation("tx-1")
        finally:
            log.append("commit")

    return provide


@contextmanager
def lock(log: list[str]) -> Generator[str, None, None]:
    log.append("lock")
    try:
        yield "lock-1"
    finally:
        log.append("unlock")


def main() -> None:
    log: list[str] = []

    result = scoped_block(
        [
            ("tx", lambda: transaction(log)),
            ("guard", lambda: lock(log)),
        ],
        lambda tx, guard: f"{tx} under {guard}",
    )

    print(result)  # => tx-1 under lock-1
    print(" ".join(log))  # => begin lock unlock commit


if __name__ == "__main__":
    main()
