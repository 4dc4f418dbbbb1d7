from __future__ import annotations

import functools
import inspect
import keyword
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, TypeAlias, TypeVar

from withopen._internal.arguments import BindingArgumentsInspector
from withopen.exceptions import WithOpenInvalidBindingError
from withopen.resources import ResourceNormalizer, default_normalizer

logger = logging.getLogger(__name__)

R = TypeVar("R")

ResourceExpression: TypeAlias = Callable[..., Any]
"""A thunk producing a resource; its parameters name earlier bindings."""

Bindings: TypeAlias = Mapping[str, ResourceExpression] | Iterable[tuple[str, ResourceExpression]]
"""Ordered ``(name, resource_expression)`` pairs, or a mapping in insertion order."""

_PAIR_LENGTH = 2


@dataclass(frozen=True, slots=True)
class Binding:
    """A single ``name = resource_expression`` entry of a scoped block."""

    name: str
    expression: ResourceExpression


class ScopedResourceComposer:
    """Acquire bindings left to right, run a body, release right to left.

    Each binding's resource is run through the normalizer with a continuation
    that binds the acquired value under the binding name and composes the
    remaining bindings, so the first binding is acquired outermost and
    released last. Exceptions from resource expressions, acquisition, or the
    body propagate unchanged once the owed releases have run.
    """

    def __init__(self, *, normalizer: ResourceNormalizer | None = None) -> None:
        """Initialize a composer.

        Args:
            normalizer: Normalizer used to classify and run each resource.
                Defaults to the package-level ``default_normalizer``.

        Examples:
            .. code-block:: python

                composer = ScopedResourceComposer()

                strict_composer = ScopedResourceComposer(
                    normalizer=ResourceNormalizer(accept_context_managers=False),
                )

        """
        self._normalizer = normalizer if normalizer is not None else default_normalizer
        self._arguments_inspector = BindingArgumentsInspector()

    @property
    def normalizer(self) -> ResourceNormalizer:
        """Normalizer classifying and running each bound resource."""
        return self._normalizer

    def run(self, bindings: Bindings, body: Callable[..., R]) -> R:
        """Run ``body`` with every binding acquired and in scope.

        Resource expressions are evaluated lazily, strictly in declaration
        order, each one only after the previous resource was acquired. A
        resource expression or the body receives the bound names it asks for
        through its parameter names.

        Each binding nests a few Python frames (the composition step, the
        normalizer, and the continuation), so a single block supports roughly
        ``sys.getrecursionlimit() // 4`` bindings, about 250 by default.

        Args:
            bindings: Ordered ``(name, resource_expression)`` pairs or a mapping.
                May be empty, in which case ``body`` is simply called.
            body: Callable evaluated once all bindings are bound.

        Returns:
            Whatever ``body`` returns.

        Raises:
            WithOpenInvalidBindingError: A binding is malformed. Raised before
                any resource expression is evaluated.
            WithOpenInvalidResourceError: A resource expression produced a
                value matching no resource shape.
            WithOpenUnboundNameError: A required parameter names nothing bound.

        Examples:
            .. code-block:: python

                composer.run(
                    [
                        ("source", lambda: open("in.txt")),
                        ("target", lambda: open("out.txt", "w")),
                    ],
                    lambda source, target: target.writelines(source),
                )

        """
        return self._run(self._normalize_bindings(bindings), body, {})

    def with_open(
        self,
        bindings: Bindings | None = None,
        /,
        **named: ResourceExpression,
    ) -> Callable[[Callable[..., R]], Callable[..., R]]:
        """Turn the decorated function into the body of a scoped block.

        Positional bindings come first, followed by keyword bindings in
        keyword order. Arguments passed to the decorated function are bound
        by its parameter names before the first binding is resolved, so
        resource expressions may depend on them. Extra keyword arguments
        collected by a ``**kwargs`` parameter are bound individually.
        Positional-only parameters keep receiving the caller's values
        positionally; they are also visible to resource expressions by name.
        Functions taking ``*args`` are rejected.

        Args:
            bindings: Optional ordered pairs or mapping of bindings.
            **named: Additional bindings by name.

        Raises:
            WithOpenInvalidBindingError: A binding is malformed, a name is
                given both positionally and as a keyword, or the decorated
                function takes ``*args``.

        Examples:
            .. code-block:: python

                @composer.with_open(f=lambda path: open(path))
                def first_line(path, f):
                    return f.readline()

                first_line("data.txt")

        """
        normalized = list(self._normalize_bindings(bindings or ()))
        positional_names = {binding.name for binding in normalized}
        for name in named:
            if name in positional_names:
                raise WithOpenInvalidBindingError(
                    name,
                    "given both positionally and as a keyword",
                )
        normalized.extend(self._normalize_bindings(named))
        block_bindings = tuple(normalized)

        def decorator(func: Callable[..., R]) -> Callable[..., R]:
            signature = inspect.signature(func)
            kinds = {name: parameter.kind for name, parameter in signature.parameters.items()}
            if inspect.Parameter.VAR_POSITIONAL in kinds.values():
                raise WithOpenInvalidBindingError(
                    func.__qualname__,
                    "a scoped block body cannot take *args",
                )

            @functools.wraps(func)
            def wrapper(*args: Any, **kwargs: Any) -> R:
                call_arguments = signature.bind_partial(*args, **kwargs).arguments
                initial: dict[str, Any] = {}
                positional: list[Any] = []
                for name, value in call_arguments.items():
                    if kinds[name] is inspect.Parameter.VAR_KEYWORD:
                        initial.update(value)
                        continue
                    if kinds[name] is inspect.Parameter.POSITIONAL_ONLY:
                        positional.append(value)
                    initial[name] = value
                return self._run(block_bindings, func, initial, tuple(positional))

            return wrapper

        return decorator

    def _run(
        self,
        bindings: tuple[Binding, ...],
        body: Callable[..., R],
        initial: Mapping[str, Any],
        body_positional: tuple[Any, ...] = (),
    ) -> R:
        bound = MappingProxyType(dict(initial))
        return self._compose(bindings, 0, bound, body, body_positional)

    def _compose(
        self,
        bindings: tuple[Binding, ...],
        index: int,
        bound: Mapping[str, Any],
        body: Callable[..., R],
        body_positional: tuple[Any, ...],
    ) -> R:
        if index == len(bindings):
            return self._arguments_inspector.call(body, bound, body_positional)

        binding = bindings[index]
        logger.debug(
            "Evaluating resource expression for '%s' (%d of %d)",
            binding.name,
            index + 1,
            len(bindings),
        )
        resource = self._arguments_inspector.call(binding.expression, bound)

        def continuation(value: Any) -> R:
            logger.debug("Bound '%s' at depth %d", binding.name, index + 1)
            scope = MappingProxyType({**bound, binding.name: value})
            return self._compose(bindings, index + 1, scope, body, body_positional)

        return self._normalizer.run_with(resource, continuation)

    def _normalize_bindings(self, bindings: Bindings) -> tuple[Binding, ...]:
        items: Iterable[Any] = bindings.items() if isinstance(bindings, Mapping) else bindings
        normalized: list[Binding] = []
        for item in items:
            if isinstance(item, Binding):
                pair: tuple[Any, ...] = (item.name, item.expression)
            else:
                try:
                    pair = tuple(item)
                except TypeError:
                    pair = ()
            if len(pair) != _PAIR_LENGTH:
                raise WithOpenInvalidBindingError(
                    item,
                    "expected a (name, resource_expression) pair",
                )

            name, expression = pair
            if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
                raise WithOpenInvalidBindingError(name, "name must be a valid Python identifier")
            if not callable(expression):
                msg = (
                    f"resource expression must be callable, got {type(expression).__qualname__}; "
                    f"wrap it in a lambda to defer evaluation"
                )
                raise WithOpenInvalidBindingError(name, msg)
            normalized.append(Binding(name=name, expression=expression))
        return tuple(normalized)


default_composer = ScopedResourceComposer(normalizer=default_normalizer)
"""Provide the composer used by the package-level ``scoped_block`` and ``with_open``."""


def scoped_block(bindings: Bindings, body: Callable[..., R]) -> R:
    """Run ``body`` with all ``bindings`` acquired, releasing them on every exit.

    See ``ScopedResourceComposer.run``.

    Examples:
        .. code-block:: python

            scoped_block(
                [
                    ("conn", lambda: connect(dsn)),
                    ("cursor", lambda conn: conn.cursor()),
                ],
                lambda cursor: cursor.execute("select 1").fetchone(),
            )

    """
    return default_composer.run(bindings, body)


def with_open(
    bindings: Bindings | None = None,
    /,
    **named: ResourceExpression,
) -> Callable[[Callable[..., R]], Callable[..., R]]:
    """Decorate a function to run as the body of a scoped block.

    See ``ScopedResourceComposer.with_open``.
    """
    return default_composer.with_open(bindings, **named)


__all__ = [
    "Binding",
    "Bindings",
    "ResourceExpression",
    "ScopedResourceComposer",
    "default_composer",
    "scoped_block",
    "with_open",
]
