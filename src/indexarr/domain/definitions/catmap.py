"""Bidirectional mapping between site-local and canonical categories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping

from indexarr.domain.entities.categories import Category, parent_category, subset


@dataclass(frozen=True)
class CategoryMap:
    """Ordered ``local id -> canonical category`` mapping.

    Many local ids may map to the same canonical category; every local id
    maps to exactly one. Declaration order is kept so resolution results
    are deterministic.
    """

    entries: tuple[tuple[str, Category], ...] = ()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Category]) -> "CategoryMap":
        return cls(tuple((str(k), v) for k, v in mapping.items()))

    def __iter__(self) -> Iterator[tuple[str, Category]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, local_id: str) -> Category | None:
        for key, cat in self.entries:
            if key == local_id:
                return cat
        return None

    def categories(self) -> list[Category]:
        """Distinct canonical categories referenced; first occurrence wins."""
        seen: set[int] = set()
        out: list[Category] = []
        for _, cat in self.entries:
            if cat.id in seen:
                continue
            seen.add(cat.id)
            out.append(cat)
        return out

    def resolve(self, category: Category) -> list[str]:
        """Local ids for ``category``.

        Tries, in order: exact matches; local ids mapped to a child of the
        requested category (asked for Movies, only Movies/BluRay is mapped);
        local ids mapped to the requested category's parent (asked for
        TV/SD, only TV is mapped). Never raises; no match yields ``[]``.
        """
        exact = [key for key, cat in self.entries if cat.id == category.id]
        if exact:
            return exact

        children = [
            key
            for key, cat in self.entries
            if parent_category(cat).id == category.id
        ]
        if children:
            return children

        parent = parent_category(category)
        return [key for key, cat in self.entries if cat.id == parent.id]

    def resolve_all(self, categories: Iterable[Category]) -> list[str]:
        results: list[str] = []
        for cat in categories:
            results.extend(self.resolve(cat))
        return results

    def reverse_map(self, category_ids: Iterable[int]) -> list[str]:
        """Turn canonical category ids from a query into local ids."""
        return self.resolve_all(subset(category_ids))
