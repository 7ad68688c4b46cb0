from __future__ import annotations

from itscooked.services.grocery import build_grocery_list


class TestBuildGroceryList:
    def test_items_are_normalized(self) -> None:
        grocery = build_grocery_list("Pancakes", [" 2 eggs ", "", "1 cup milk"])

        assert grocery.items == ["2 eggs", "1 cup milk"]

    def test_text_with_title(self) -> None:
        grocery = build_grocery_list("Pancakes", ["2 eggs", "1 cup milk"])

        assert grocery.text == "Pancakes\n- 2 eggs\n- 1 cup milk"

    def test_text_without_title(self) -> None:
        grocery = build_grocery_list("   ", ["2 eggs"])

        assert grocery.text == "- 2 eggs"

    def test_missing_ingredients(self) -> None:
        grocery = build_grocery_list(None, None)

        assert grocery.items == []
        assert grocery.text == ""
