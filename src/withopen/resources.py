from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import ContextDecorator
from enum import Enum, auto
from typing import Any, TypeAlias, TypeVar

from withopen.exceptions import WithOpenInvalidResourceError

logger = logging.getLogger(__name__)

R = TypeVar("R")

Continuation: TypeAlias = Callable[[Any], Any]
"""The rest of the computation: called once with the acquired value."""

ContinuationResource: TypeAlias = Callable[[Continuation], Any]
"""A resource written as a function that accepts a continuation."""


class ResourceKind(Enum):
    """Define how a resource value is acquired and released."""

    DIRECT = auto()
    """Already open; the composer calls its release method after use."""

    CONTINUATION = auto()
    """A callable taking a continuation; it owns its acquire and release."""

    CONTEXT_MANAGER = auto()
    """A ``with``-statement context manager; entered and exited around use."""


class ResourceNormalizer:
    """Classify resource values and run them around a continuation.

    Classification is checked in a fixed order: a value whose type defines a
    callable release method is ``DIRECT``, otherwise a callable is ``CONTINUATION``,
    otherwise a context manager is ``CONTEXT_MANAGER`` (when enabled).
    Instances of ``contextlib.ContextDecorator``, such as the objects built by
    ``@contextmanager`` functions, are callable only to act as decorators and
    are classified as ``CONTEXT_MANAGER`` before the callable check.
    Anything else raises ``WithOpenInvalidResourceError``.

    Continuation-style resources are trusted to invoke the continuation exactly
    once and to clean up on both normal and exceptional exit. The normalizer
    cannot enforce this; it only logs a warning when a provider returns
    without having invoked its continuation, or after invoking it more than
    once.
    """

    def __init__(
        self,
        *,
        release_method: str = "close",
        accept_context_managers: bool = True,
    ) -> None:
        """Initialize a normalizer.

        Args:
            release_method: Name of the method that releases a direct resource.
            accept_context_managers: Accept objects implementing
                ``__enter__``/``__exit__`` that are neither closeable nor
                callable. When disabled such values are invalid resources.

        Examples:
            .. code-block:: python

                normalizer = ResourceNormalizer()

                disposing_normalizer = ResourceNormalizer(release_method="dispose")

        """
        self._release_method = release_method
        self._accept_context_managers = accept_context_managers

    @property
    def release_method(self) -> str:
        """Name of the method called to release a direct resource."""
        return self._release_method

    @property
    def accept_context_managers(self) -> bool:
        """Whether context managers are accepted as resources."""
        return self._accept_context_managers

    def classify(self, resource: Any) -> ResourceKind:
        """Return the resource kind of ``resource``.

        Args:
            resource: Value produced by a resource expression.

        Raises:
            WithOpenInvalidResourceError: The value matches no enabled shape.

        """
        if callable(getattr(type(resource), self._release_method, None)):
            return ResourceKind.DIRECT
        if self._accept_context_managers and isinstance(resource, ContextDecorator):
            return ResourceKind.CONTEXT_MANAGER
        if callable(resource):
            return ResourceKind.CONTINUATION
        if self._accept_context_managers and _is_context_manager(resource):
            return ResourceKind.CONTEXT_MANAGER
        raise WithOpenInvalidResourceError(resource)

    def run_with(self, resource: Any, continuation: Continuation) -> Any:
        """Run ``continuation`` with the acquired value of ``resource``.

        Direct resources are passed to the continuation as-is and released
        exactly once after it returns or raises. Continuation-style resources
        are called with the continuation and their result is returned
        unchanged. The provider receives a thin wrapper around
        ``continuation`` rather than the object itself: it forwards the value
        and the result untouched and only counts invocations for the
        contract warnings. Context managers are entered, the entered value is passed
        to the continuation, and they are exited exactly as a ``with``
        statement would; if ``__exit__`` suppresses an exception the result is
        ``None``.

        Args:
            resource: Direct, continuation-style, or context-manager resource.
            continuation: Single-argument callable receiving the acquired value.

        Returns:
            The continuation's result (or the continuation-style resource's).

        Raises:
            WithOpenInvalidResourceError: ``resource`` matches no enabled shape.
                The continuation is not invoked.

        Examples:
            .. code-block:: python

                normalizer.run_with(open("data.txt"), lambda f: f.read())

        """
        kind = self.classify(resource)
        logger.debug("Running %s resource %r", kind.name, resource)

        if kind is ResourceKind.DIRECT:
            return self._run_direct(resource, continuation)
        if kind is ResourceKind.CONTINUATION:
            return self._run_continuation(resource, continuation)
        return self._run_context_manager(resource, continuation)

    def _run_direct(self, resource: Any, continuation: Continuation) -> Any:
        try:
            return continuation(resource)
        finally:
            logger.debug("Releasing %r via %s()", resource, self._release_method)
            getattr(resource, self._release_method)()

    def _run_continuation(self, resource: ContinuationResource, continuation: Continuation) -> Any:
        invocations = 0

        def tracked_continuation(value: Any) -> Any:
            nonlocal invocations
            invocations += 1
            return continuation(value)

        result = resource(tracked_continuation)
        if invocations == 0:
            logger.warning(
                "Continuation-style resource %r returned without invoking its continuation",
                resource,
            )
        elif invocations > 1:
            logger.warning(
                "Continuation-style resource %r invoked its continuation %d times",
                resource,
                invocations,
            )
        return result

    def _run_context_manager(self, resource: Any, continuation: Continuation) -> Any:
        with resource as value:
            return continuation(value)
        return None


def _is_context_manager(candidate: object) -> bool:
    candidate_type = type(candidate)
    return callable(getattr(candidate_type, "__enter__", None)) and callable(
        getattr(candidate_type, "__exit__", None),
    )


default_normalizer = ResourceNormalizer()
"""Provide the normalizer used by the package-level ``run_with``."""


def run_with(resource: Any, continuation: Callable[[Any], R]) -> R:
    """Run ``continuation`` with ``resource`` using the default normalizer.

    See ``ResourceNormalizer.run_with``.
    """
    return default_normalizer.run_with(resource, continuation)


__all__ = [
    "Continuation",
    "ContinuationResource",
    "ResourceKind",
    "ResourceNormalizer",
    "default_normalizer",
    "run_with",
]
