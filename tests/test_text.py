"""Tests for hoverpick.text -- display width helpers."""

from __future__ import annotations

from hoverpick.text import pad_to_width, visible_width


class TestVisibleWidth:
    def test_plain_ascii(self) -> None:
        assert visible_width("hello") == 5

    def test_empty_string(self) -> None:
        assert visible_width("") == 0

    def test_escape_sequences_do_not_count(self) -> None:
        assert visible_width("\x1b[1mhi\x1b[0m") == 2

    def test_wide_cjk_characters_count_as_two(self) -> None:
        assert visible_width("世") == 2

    def test_mixed_ascii_and_wide(self) -> None:
        assert visible_width("A世B") == 4

    def test_combining_mark_is_zero_width(self) -> None:
        assert visible_width("e\u0301") == 1

    def test_tab_counts_as_three_spaces(self) -> None:
        assert visible_width("\t") == 3


class TestPadToWidth:
    def test_pads(self) -> None:
        assert pad_to_width("1", 3) == "1  "

    def test_never_truncates(self) -> None:
        assert pad_to_width("12345", 3) == "12345"

    def test_pads_by_display_width(self) -> None:
        assert pad_to_width("世", 3) == "世 "
