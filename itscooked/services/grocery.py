from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .text import normalize_string_list


@dataclass
class GroceryList:
    title: Optional[str]
    items: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        """Plain-text checklist: the title line (when present) then ``- item`` lines."""
        lines = "\n".join(f"- {item}" for item in self.items)
        title = (self.title or "").strip()
        if not title:
            return lines
        return f"{title}\n{lines}"


def build_grocery_list(title: Optional[str], ingredients: object) -> GroceryList:
    return GroceryList(title=title, items=normalize_string_list(ingredients))
