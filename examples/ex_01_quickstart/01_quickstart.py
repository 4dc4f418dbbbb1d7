"""Quickstart: acquire several closeable resources, release them in reverse."""

from __future__ import annotations

from withopen import scoped_block


class Handle:
    def __init__(self, name: str, log: list[str]) -> None:
        self.name = name
        self._log = log
        log.append(f"open {name}")

    def close(self) -> None:
        self._log.append(f"close {self.name}")


def main() -> None:
    log: list[str] = []

    result = scoped_block(
        [
            ("source", lambda: Handle("source", log)),
            ("target", lambda source: Handle(f"{source.name}-copy", log)),
        ],
        lambda source, target: f"{source.name} -> {target.name}",
    )

    print(result)  # => source -> source-copy
    print(", ".join(log))  # => open source, open source-copy, close source-copy, close source


if __name__ == "__main__":
    main()
