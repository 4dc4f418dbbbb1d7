from withopen.composer import (
    Binding,
    ScopedResourceComposer,
    default_composer,
    scoped_block,
    with_open,
)
from withopen.exceptions import (
    WithOpenError,
    WithOpenInvalidBindingError,
    WithOpenInvalidResourceError,
    WithOpenUnboundNameError,
)
from withopen.resources import ResourceKind, ResourceNormalizer, default_normalizer, run_with

__all__ = [
    "Binding",
    "ResourceKind",
    "ResourceNormalizer",
    "ScopedResourceComposer",
    "WithOpenError",
    "WithOpenInvalidBindingError",
    "WithOpenInvalidResourceError",
    "WithOpenUnboundNameError",
    "default_composer",
    "default_normalizer",
    "run_with",
    "scoped_block",
    "with_open",
]
