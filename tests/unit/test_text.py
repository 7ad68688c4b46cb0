from __future__ import annotations

import pytest

from itscooked.services.text import normalize_lines, normalize_string_list, strip_list_prefix


class TestNormalizeLines:
    def test_bullets_become_dash_lines(self) -> None:
        assert normalize_lines("• 2 cups flour\n• 1 tsp salt") == ["- 2 cups flour", "- 1 tsp salt"]

    def test_inline_bullets_split_lines(self) -> None:
        assert normalize_lines("Shopping: ‣ eggs ◦ milk ⁃ butter") == [
            "Shopping:",
            "- eggs",
            "- milk",
            "- butter",
        ]

    def test_line_break_styles_unified(self) -> None:
        assert normalize_lines("one\r\ntwo\rthree\nfour") == ["one", "two", "three", "four"]

    def test_tabs_and_blank_lines_collapse(self) -> None:
        text = "Mix\t\tthe   batter\n\n\n   \nBake  well  "
        assert normalize_lines(text) == ["Mix the batter", "Bake well"]

    def test_hashtags_removed(self) -> None:
        assert normalize_lines("Best pancakes #easyrecipe #breakfast") == ["Best pancakes"]

    def test_hashtag_only_line_disappears(self) -> None:
        assert normalize_lines("Mix well\n#easyrecipe #foodie\nServe") == ["Mix well", "Serve"]

    def test_order_preserved(self) -> None:
        lines = [f"Step line {n}" for n in range(10)]
        assert normalize_lines("\n".join(lines)) == lines

    @pytest.mark.parametrize("text", ["", None, "   \n\t\n"])
    def test_empty_input(self, text) -> None:
        assert normalize_lines(text) == []


class TestStripListPrefix:
    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("- 2 eggs", "2 eggs"),
            ("* 1 cup milk", "1 cup milk"),
            ("1. Mix", "Mix"),
            ("12) Bake", "Bake"),
            ("Step 3: Serve", "Serve"),
            ("STEP 10:   Rest the dough", "Rest the dough"),
        ],
    )
    def test_removes_prefixes(self, line: str, expected: str) -> None:
        assert strip_list_prefix(line) == expected

    def test_lines_without_prefix_unchanged(self) -> None:
        assert strip_list_prefix("Mix well") == "Mix well"
        assert strip_list_prefix(strip_list_prefix("Mix well")) == "Mix well"

    def test_decimal_quantity_kept(self) -> None:
        assert strip_list_prefix("1.5 cups flour") == "1.5 cups flour"

    def test_only_prefix_becomes_empty(self) -> None:
        assert strip_list_prefix("- ") == ""


class TestNormalizeStringList:
    def test_keeps_trimmed_strings(self) -> None:
        assert normalize_string_list([" eggs ", "", 3, None, "milk"]) == ["eggs", "milk"]

    def test_non_list_is_empty(self) -> None:
        assert normalize_string_list("eggs") == []
        assert normalize_string_list(None) == []
