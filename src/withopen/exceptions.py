from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class WithOpenError(Exception):
    """Represent a base class for all withopen-specific failures.

    Catch this type when you want to handle any withopen usage error without
    matching each concrete exception class individually. Failures raised by
    resources themselves or by the block body are never wrapped and never
    derive from this class.
    """


class WithOpenInvalidResourceError(WithOpenError, TypeError):
    """Signal a value that is neither closeable, callable, nor a context manager.

    Raised by ``run_with`` and ``scoped_block`` when a resource expression
    evaluates to a value matching no supported resource shape. The offending
    value is available as ``resource``. The continuation is never invoked and
    nothing is considered acquired for that binding.

    Typical fixes include returning the opened handle itself (something with a
    ``close()`` method), wrapping the value in ``contextlib.closing``, or
    writing the resource as a function that accepts a continuation.
    """

    def __init__(self, resource: Any) -> None:
        self.resource = resource
        msg = (
            f"Invalid resource passed to with_open: {type(resource).__qualname__} "
            f"{resource!r} is neither closeable nor callable."
        )
        super().__init__(msg)

    def __reduce__(self) -> tuple[Any, ...]:
        return type(self), (self.resource,)


class WithOpenInvalidBindingError(WithOpenError, ValueError):
    """Signal a malformed ``(name, resource_expression)`` binding.

    Raised by ``scoped_block`` and ``with_open`` before any resource expression
    is evaluated, when a binding name is not a valid identifier, a resource
    expression is not callable, the same name is given twice to
    ``with_open``, or a function decorated with ``with_open`` takes ``*args``.
    """

    def __init__(self, name: Any, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid binding {name!r}: {reason}")

    def __reduce__(self) -> tuple[Any, ...]:
        return type(self), (self.name, self.reason)


class WithOpenUnboundNameError(WithOpenError, NameError):
    """Signal a required parameter that names no binding in scope.

    Raised right before a resource expression or the block body would be
    called. Only bindings declared earlier (and, for ``with_open``, the call
    arguments) are visible to a resource expression.

    Typical fixes include reordering bindings so the dependency comes first,
    or giving the parameter a default value.
    """

    def __init__(self, parameter: str, bound_names: Iterable[str], target: Any) -> None:
        self.parameter = parameter
        self.bound_names = tuple(bound_names)
        self.target = target
        known = ", ".join(self.bound_names) or "<none>"
        msg = (
            f"Parameter '{parameter}' of {target!r} is not bound in this block "
            f"(bound names: {known})."
        )
        super().__init__(msg)

    def __reduce__(self) -> tuple[Any, ...]:
        return type(self), (self.parameter, self.bound_names, self.target)
