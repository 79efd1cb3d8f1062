"""Pytest configuration for dataknobs_validator tests."""

import sys
from pathlib import Path

import pytest

# Add the package source to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from dataknobs_validator import Factory  # noqa: E402


@pytest.fixture
def factory():
    """Fresh factory so catalog and config changes do not leak between tests."""
    return Factory()


@pytest.fixture
def make(factory):
    """Shortcut building a validator with the fresh factory."""
    def _make(data, rules, messages=None, attributes=None):
        return factory.make(data, rules, messages, attributes)
    return _make
