from __future__ import annotations

from typing import List

from roomkit.core.natural_order import NaturalOrderComparer
from roomkit.elements.cache import TypeCatalogCache
from roomkit.elements.contracts import ElementType


class _CountingCatalog:
    def __init__(self, names: List[str]) -> None:
        self.names = list(names)
        self.calls = 0

    def _fetch(self) -> List[ElementType]:
        self.calls += 1
        return [ElementType(f"id{k}", n) for k, n in enumerate(self.names)]

    def wall_types(self) -> List[ElementType]:
        return self._fetch()

    def floor_types(self) -> List[ElementType]:
        return self._fetch()

    def ceiling_types(self) -> List[ElementType]:
        return self._fetch()

    def levels(self) -> List[ElementType]:
        return self._fetch()


def test_types_are_sorted_naturally_by_name() -> None:
    catalog = _CountingCatalog(["Type 10", "Type 2", "type 1"])
    names = [t.name for t in TypeCatalogCache().wall_types("doc", catalog)]
    assert names == ["type 1", "Type 2", "Type 10"]


def test_second_lookup_is_served_from_cache() -> None:
    cache = TypeCatalogCache()
    catalog = _CountingCatalog(["A", "B"])
    first = cache.floor_types("doc", catalog)
    first.clear()
    again = cache.floor_types("doc", catalog)
    assert catalog.calls == 1
    assert [t.name for t in again] == ["A", "B"]
    assert "doc" in cache


def test_kinds_and_documents_are_cached_separately() -> None:
    cache = TypeCatalogCache()
    catalog = _CountingCatalog(["Level 1"])
    cache.levels("doc-a", catalog)
    cache.ceiling_types("doc-a", catalog)
    cache.levels("doc-b", catalog)
    assert catalog.calls == 3
    assert "doc-b" in cache
    assert "doc-c" not in cache


def test_invalidate_forces_refetch() -> None:
    cache = TypeCatalogCache()
    catalog = _CountingCatalog(["Finish"])
    cache.wall_types("doc", catalog)
    catalog.names.append("Finish 2")
    cache.invalidate("doc")
    assert "doc" not in cache
    assert [t.name for t in cache.wall_types("doc", catalog)] == ["Finish", "Finish 2"]
    assert catalog.calls == 2


def test_case_sensitive_comparer_is_honoured() -> None:
    cache = TypeCatalogCache(NaturalOrderComparer(ignore_case=False))
    names = [t.name for t in cache.wall_types("doc", _CountingCatalog(["b", "B", "a"]))]
    assert names == ["a", "b", "B"]
