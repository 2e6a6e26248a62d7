"""
Tests for wildcard escaping of search text.
"""

import pytest

from order_management.repositories.filters import contains_pattern, sanitize_like_value


class TestSanitizeLikeValue:
    """Test escaping of wildcard metacharacters."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Contoso%Ltd", "Contoso[%]Ltd"),
            ("Adventure[Works]", "Adventure[[]Works]"),
            ("%_[", "[%][_][[]"),
            ("first_name", "first[_]name"),
            ("Fabrikam", "Fabrikam"),
        ],
    )
    def test_escapes_metacharacters(self, raw, expected):
        assert sanitize_like_value(raw) == expected

    def test_none_passes_through(self):
        assert sanitize_like_value(None) is None

    def test_empty_string_passes_through(self):
        assert sanitize_like_value("") == ""

    def test_bracket_escaped_before_other_characters(self):
        """Brackets introduced for % and _ are not escaped again."""
        assert sanitize_like_value("[%") == "[[][%]"


class TestContainsPattern:
    """Test contains pattern construction."""

    def test_wraps_sanitised_value(self):
        assert contains_pattern("50%") == "%50[%]%"

    def test_plain_value(self):
        assert contains_pattern("Contoso") == "%Contoso%"
