"""Tests for duplicated role naming."""

import pytest

from permissions_manager.modules.roles.services import copy_name


pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("attempt", "expected"),
    [
        (1, "Manager (Copy)"),
        (2, "Manager (Copy 2)"),
        (3, "Manager (Copy 3)"),
        (10, "Manager (Copy 10)"),
    ],
)
def test_copy_name(attempt, expected):
    assert copy_name("Manager", attempt) == expected
