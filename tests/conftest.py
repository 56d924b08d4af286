"""
Pytest configuration and fixtures.
"""

import pytest

from helpers import FIXED_NOW, make_record


@pytest.fixture
def three_records():
    """One incident per category, in the order the demo feed reports them."""
    return [
        make_record("1", "Theft"),
        make_record("2", "Assault"),
        make_record("3", "Burglary"),
    ]


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
