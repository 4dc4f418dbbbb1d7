from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from withopen.exceptions import WithOpenUnboundNameError

_FILLABLE_KINDS = (
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


@dataclass(frozen=True, slots=True)
class BindingParameter:
    """Parameter of a resource expression or body that may receive a bound name."""

    name: str
    required: bool


@dataclass(frozen=True, slots=True)
class BindingCallableInspection:
    """Binding-relevant metadata derived from a callable signature."""

    parameters: tuple[BindingParameter, ...]
    positional_only: tuple[BindingParameter, ...]
    accepts_var_keyword: bool


@dataclass(slots=True)
class BindingArgumentsInspector:
    """Match names bound in a scoped block onto callable parameters by name.

    Parameters that name a bound value receive it by keyword, parameters with
    defaults keep them when nothing is bound under their name, and a
    ``**kwargs`` parameter collects every bound name not matched explicitly.
    """

    def inspect_callable(self, callable_obj: Callable[..., Any]) -> BindingCallableInspection:
        """Build binding metadata for a callable.

        Callables whose signature cannot be introspected are treated as taking
        no arguments.

        Args:
            callable_obj: Resource expression or block body to inspect.

        """
        try:
            signature = inspect.signature(callable_obj)
        except (TypeError, ValueError):
            return BindingCallableInspection(
                parameters=(),
                positional_only=(),
                accepts_var_keyword=False,
            )

        parameters: list[BindingParameter] = []
        positional_only: list[BindingParameter] = []
        accepts_var_keyword = False
        for parameter in signature.parameters.values():
            required = parameter.default is inspect.Parameter.empty
            if parameter.kind in _FILLABLE_KINDS:
                parameters.append(BindingParameter(name=parameter.name, required=required))
            elif parameter.kind is inspect.Parameter.VAR_KEYWORD:
                accepts_var_keyword = True
            elif parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
                positional_only.append(BindingParameter(name=parameter.name, required=required))

        return BindingCallableInspection(
            parameters=tuple(parameters),
            positional_only=tuple(positional_only),
            accepts_var_keyword=accepts_var_keyword,
        )

    def build_arguments(
        self,
        *,
        callable_obj: Callable[..., Any],
        bound: Mapping[str, Any],
        positional_count: int = 0,
    ) -> dict[str, Any]:
        """Select keyword arguments for a callable from the bound names.

        Positional-only parameters are never filled from bound names; the
        first ``positional_count`` of them are supplied positionally by the
        caller.

        Args:
            callable_obj: Resource expression or block body about to be called.
            bound: Names bound so far, in binding order.
            positional_count: Number of leading positional-only parameters the
                caller passes positionally.

        Raises:
            WithOpenUnboundNameError: A required parameter names nothing bound.

        """
        inspection = self.inspect_callable(callable_obj)
        supplied = {parameter.name for parameter in inspection.positional_only[:positional_count]}
        for parameter in inspection.positional_only[positional_count:]:
            if parameter.required:
                raise WithOpenUnboundNameError(parameter.name, bound, callable_obj)

        arguments: dict[str, Any] = {}
        for parameter in inspection.parameters:
            if parameter.name in bound:
                arguments[parameter.name] = bound[parameter.name]
            elif parameter.required:
                raise WithOpenUnboundNameError(parameter.name, bound, callable_obj)

        if inspection.accepts_var_keyword:
            for name, value in bound.items():
                if name not in supplied:
                    arguments.setdefault(name, value)
        return arguments

    def call(
        self,
        callable_obj: Callable[..., Any],
        bound: Mapping[str, Any],
        positional: Sequence[Any] = (),
    ) -> Any:
        """Call ``callable_obj`` with ``positional`` and the bound names it asks for."""
        arguments = self.build_arguments(
            callable_obj=callable_obj,
            bound=bound,
            positional_count=len(positional),
        )
        return callable_obj(*positional, **arguments)


__all__ = [
    "BindingArgumentsInspector",
    "BindingCallableInspection",
    "BindingParameter",
]
