# Tests for shared helpers.
# Created: 2026-10-17

import pytest

from chatstore.shared.utils import escape_like, parse_id


class TestParseId:
    @pytest.mark.parametrize("value,expected", [(1, 1), ("42", 42), (" 7 ", 7)])
    def test_valid(self, value, expected):
        assert parse_id(value) == expected

    @pytest.mark.parametrize("value", [0, -1, True, "0", "007", "abc", "", "1e3", None, 3.0])
    def test_malformed(self, value):
        with pytest.raises(ValueError):
            parse_id(value)


class TestEscapeLike:
    def test_wildcards(self):
        assert escape_like("50%_off") == "50\\%\\_off"

    def test_escape_character(self):
        assert escape_like("a\\b") == "a\\\\b"

    def test_plain_text_untouched(self):
        assert escape_like("Team chat") == "Team chat"

