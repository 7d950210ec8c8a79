"""Tests for input sanitization.

Identifiers are interpolated into SQL text, so these tests focus on what is
stripped or refused before anything reaches a statement.
"""

import math

import numpy as np
import pytest

from hanavectordb.exceptions import InvalidArgumentError
from hanavectordb.utils.sanitize import (
    is_valid_identifier,
    sanitize_int,
    sanitize_list_float,
    sanitize_metadata_keys,
    sanitize_name,
    sanitize_specific_metadata_columns,
)


class TestSanitizeName:
    """Tests for sanitize_name."""

    def test_keeps_safe_characters(self):
        """Test letters, digits and underscores are kept."""
        assert sanitize_name("My_Table_01") == "My_Table_01"

    def test_strips_quotes_and_spaces(self):
        """Test injection characters are removed."""
        assert sanitize_name('EMBEDDINGS"; DROP TABLE X') == "EMBEDDINGSDROPTABLEX"

    def test_can_return_empty(self):
        """Test a name with no safe characters becomes empty."""
        assert sanitize_name("-- ;") == ""


class TestSanitizeInt:
    """Tests for sanitize_int."""

    @pytest.mark.parametrize("value,expected", [(4, 4), ("10", 10), (" 7 ", 7), (3.0, 3)])
    def test_valid(self, value, expected):
        """Test integers and integer strings are parsed."""
        assert sanitize_int(value) == expected

    @pytest.mark.parametrize("value", ["abc", "1.5", 1.5, math.inf, None, True])
    def test_not_an_integer(self, value):
        """Test non-integers are rejected."""
        with pytest.raises(InvalidArgumentError):
            sanitize_int(value)

    def test_lower_bound(self):
        """Test values below the bound are rejected."""
        assert sanitize_int(-1, -1) == -1
        with pytest.raises(InvalidArgumentError):
            sanitize_int(-1)
        with pytest.raises(InvalidArgumentError):
            sanitize_int(-2, -1)

    def test_is_value_error(self):
        """Test sanitization errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            sanitize_int("x")


class TestSanitizeListFloat:
    """Tests for sanitize_list_float."""

    def test_valid(self):
        """Test ints and floats become floats."""
        assert sanitize_list_float([1, 2.5, -3]) == [1.0, 2.5, -3.0]

    def test_numpy_array(self):
        """Test numpy arrays are accepted."""
        assert sanitize_list_float(np.array([0.5, 0.25])) == [0.5, 0.25]

    @pytest.mark.parametrize("value", ["0.1,0.2", 5, None, {"a": 1}])
    def test_not_a_sequence(self, value):
        """Test strings, scalars and mappings are rejected."""
        with pytest.raises(InvalidArgumentError):
            sanitize_list_float(value)

    @pytest.mark.parametrize("value", [[0.1, "0.2"], [True, 1.0], [0.1, None], [math.nan]])
    def test_bad_elements(self, value):
        """Test non-numeric and non-finite elements are rejected."""
        with pytest.raises(InvalidArgumentError):
            sanitize_list_float(value)


class TestSanitizeMetadataKeys:
    """Tests for metadata key validation."""

    def test_valid_keys(self):
        """Test identifier-like keys pass through unchanged."""
        assert sanitize_metadata_keys({"source": "wiki", "_id": 1}) == {
            "source": "wiki",
            "_id": 1,
        }

    def test_empty(self):
        """Test None and {} give an empty dict."""
        assert sanitize_metadata_keys(None) == {}
        assert sanitize_metadata_keys({}) == {}

    @pytest.mark.parametrize("key", ["has space", "has-dash", "1starts_with_digit", "a.b"])
    def test_invalid_keys(self, key):
        """Test keys that cannot be JSON path segments are rejected."""
        with pytest.raises(InvalidArgumentError, match="Invalid metadata key"):
            sanitize_metadata_keys({key: "x"})


class TestIdentifiers:
    """Tests for identifier checks and promoted column names."""

    def test_is_valid_identifier(self):
        """Test the identifier pattern."""
        assert is_valid_identifier("title")
        assert is_valid_identifier("_x1")
        assert not is_valid_identifier("1x")
        assert not is_valid_identifier("")
        assert not is_valid_identifier(None)

    def test_specific_columns_sanitized(self):
        """Test promoted column names are sanitized."""
        assert sanitize_specific_metadata_columns(['ti"tle', "year"]) == [
            "title",
            "year",
        ]
        assert sanitize_specific_metadata_columns(None) == []

    def test_specific_columns_rejected(self):
        """Test names that stay invalid after sanitizing are rejected."""
        with pytest.raises(InvalidArgumentError):
            sanitize_specific_metadata_columns(["2024"])
