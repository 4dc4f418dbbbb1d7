"""Failures propagate unchanged after every acquired resource is released."""

from __future__ import annotations

from withopen import WithOpenInvalidResourceError, scoped_block


class Handle:
    def __init__(self, name: str, log: list[str]) -> None:
        self.name = name
        self._log = log

    def close(self) -> None:
        self._log.append(f"close {self.name}")


def main() -> None:
    log: list[str] = []

    def body(a: Handle, b: Handle) -> None:
        msg = "body failed"
        raise RuntimeError(msg)

    try:
        scoped_block(
            [("a", lambda: Handle("a", log)), ("b", lambda: Handle("b", log))],
            body,
        )
    except RuntimeError as error:
        print(f"caught={error}")  # => caught=body failed
    print(", ".join(log))  # => close b, close a

    log.clear()
    try:
        scoped_block(
            [("a", lambda: Handle("a", log)), ("b", lambda: 42)],
            lambda: None,
        )
    except WithOpenInvalidResourceError as error:
        print(f"invalid={error.resource}")  # => invalid=42
    print(", ".join(log))  # => close a


if __name__ == "__main__":
    main()
