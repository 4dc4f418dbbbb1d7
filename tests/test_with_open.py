"""Tests for the with_open decorator."""

from __future__ import annotations

from pathlib import Path
from typing import Any, TextIO

import pytest

from tests.fakes import BodyError, FakeHandle, open_handle
from withopen import ScopedResourceComposer, WithOpenInvalidBindingError, with_open


def test_decorated_function_runs_as_block_body(
    composer: ScopedResourceComposer,
    events: list[str],
) -> None:
    @composer.with_open(
        a=lambda: open_handle("a", events),
        b=lambda: open_handle("b", events),
    )
    def body(a: FakeHandle, b: FakeHandle) -> str:
        events.append("body")
        return a.name + b.name

    assert body() == "ab"
    assert events == ["acquire:a", "acquire:b", "body", "release:b", "release:a"]


def test_each_call_acquires_fresh_resources(
    composer: ScopedResourceComposer,
    events: list[str],
) -> None:
    @composer.with_open(a=lambda: open_handle("a", events))
    def body(a: FakeHandle) -> FakeHandle:
        return a

    first = body()
    second = body()

    assert first is not second
    assert first.close_calls == second.close_calls == 1


def test_call_arguments_are_visible_to_expressions(tmp_path: Path) -> None:
    path = tmp_path / "data.txt"
    path.write_text("header\nrow\n", encoding="utf-8")

    @with_open(f=lambda path: open(path, encoding="utf-8"))  # noqa: SIM115
    def first_line(path: Path, f: TextIO) -> str:
        return f.readline().strip()

    assert first_line(path) == "header"
    assert first_line(path=path) == "header"


def test_extra_keyword_arguments_are_bound_individually(
    composer: ScopedResourceComposer,
    events: list[str],
) -> None:
    @composer.with_open(handle=lambda prefix: open_handle(f"{prefix}.h", events))
    def body(handle: FakeHandle, **options: Any) -> tuple[str, dict[str, Any]]:
        return handle.name, options

    name, options = body(prefix="p", verbose=True)

    assert name == "p.h"
    assert options == {"prefix": "p", "verbose": True}


def test_positional_bindings_come_before_keyword_bindings(
    composer: ScopedResourceComposer,
    events: list[str],
) -> None:
    @composer.with_open(
        [("first", lambda: open_handle("first", events))],
        second=lambda first: open_handle(f"{first.name}+second", events),
    )
    def body(second: FakeHandle) -> str:
        return second.name

    assert body() == "first+second"
    assert events == [
        "acquire:first",
        "acquire:first+second",
        "release:first+second",
        "release:first",
    ]


def test_duplicate_names_are_rejected(composer: ScopedResourceComposer) -> None:
    with pytest.raises(WithOpenInvalidBindingError) as exc_info:
        composer.with_open([("a", lambda: None)], a=lambda: None)

    assert exc_info.value.name == "a"


def test_failure_in_decorated_body_releases_resources(
    composer: ScopedResourceComposer,
    events: list[str],
) -> None:
    @composer.with_open(a=lambda: open_handle("a", events))
    def body(a: FakeHandle) -> None:
        raise BodyError(a.name)

    with pytest.raises(BodyError, match="a"):
        body()

    assert events == ["acquire:a", "release:a"]


def test_wrapper_preserves_function_metadata(composer: ScopedResourceComposer) -> None:
    @composer.with_open(a=lambda: None)
    def documented(a: Any) -> None:
        """Do something with a."""

    assert documented.__name__ == "documented"
    assert documented.__doc__ == "Do something with a."
    assert documented.__wrapped__ is not None  # type: ignore[attr-defined]


def test_positional_only_arguments_reach_body_positionally(
    composer: ScopedResourceComposer,
    events: list[str],
) -> None:
    @composer.with_open(handle=lambda prefix: open_handle(f"{prefix}.h", events))
    def body(prefix: str, /, handle: FakeHandle) -> str:
        return f"{prefix}:{handle.name}"

    assert body("p") == "p:p.h"
    assert events == ["acquire:p.h", "release:p.h"]


def test_positional_only_argument_is_not_repeated_in_kwargs(
    composer: ScopedResourceComposer,
    events: list[str],
) -> None:
    @composer.with_open(handle=lambda prefix: open_handle(prefix, events))
    def body(prefix: str, /, **rest: Any) -> tuple[str, list[str]]:
        return prefix, sorted(rest)

    prefix, names = body("p", verbose=True)

    assert prefix == "p"
    assert names == ["handle", "verbose"]


def test_body_taking_var_positional_is_rejected(composer: ScopedResourceComposer) -> None:
    decorate = composer.with_open(a=lambda: None)

    def body(*handles: Any) -> None:
        pass

    with pytest.raises(WithOpenInvalidBindingError, match=r"\*args"):
        decorate(body)
