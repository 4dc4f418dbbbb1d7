"""Use ``with_open`` to make a function the body of a scoped block."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import TextIO

from withopen import with_open


@with_open(
    source=lambda path: open(path, encoding="utf-8"),  # noqa: SIM115
)
def count_lines(path: Path, source: TextIO) -> int:
    return sum(1 for _ in source)


def main() -> None:
    with tempfile.TemporaryDirectory() as directory:
        path = Path(directory) / "data.txt"
        path.write_text("one\ntwo\nthree\n", encoding="utf-8")

        print(f"lines={count_lines(path)}")  # => lines=3
        print(f"name={count_lines.__name__}")  # => name=count_lines


if __name__ == "__main__":
    main()
