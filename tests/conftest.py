"""Shared pytest fixtures for withopen tests."""

import pytest

from withopen import ResourceNormalizer, ScopedResourceComposer


@pytest.fixture()
def events() -> list[str]:
    """Shared acquire/release event log."""
    return []


@pytest.fixture()
def normalizer() -> ResourceNormalizer:
    """Normalizer with default settings."""
    return ResourceNormalizer()


@pytest.fixture()
def composer(normalizer: ResourceNormalizer) -> ScopedResourceComposer:
    """Composer bound to the default-settings normalizer."""
    return ScopedResourceComposer(normalizer=normalizer)
