"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from engine import Variant  # noqa: E402


@pytest.fixture
def abc():
    """Three variants at 50 / 30 / 20 with offers attached."""
    return [
        Variant(id="a", name="A", weight=50, offer_id="1"),
        Variant(id="b", name="B", weight=30, offer_id="2"),
        Variant(id="c", name="C", weight=20, offer_id="3"),
    ]
