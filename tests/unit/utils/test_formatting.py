"""Tests for file name formatting helpers."""

import pytest

from thor.core.utils.formatting import clean_filename


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("S1", "S1"),
        ("Gut sample 1", "Gut_sample_1"),
        ("a/b\\c", "a_b_c"),
        ("Café.day-2", "Cafe.day-2"),
        ("..hidden", "hidden"),
        ("///", "sample"),
    ],
)
def test_clean_filename(name: str, expected: str):
    """Test sample names become safe, non-empty file name components."""
    assert clean_filename(name) == expected


def test_custom_replacement():
    """Test the replacement character is configurable."""
    assert clean_filename("a b", replacement_char="-") == "a-b"
