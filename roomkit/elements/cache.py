from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from roomkit.core.natural_order import NaturalOrderComparer, natural_sorted
from roomkit.elements.contracts import ElementType, TypeCatalog


_KINDS = ("wall_types", "floor_types", "ceiling_types", "levels")


class TypeCatalogCache:
    """
    Per-session cache of a document's type lists.

    Entries are keyed by a stable document key supplied by the caller and
    sorted by name with the comparer given at construction.
    """

    def __init__(self, comparer: Optional[NaturalOrderComparer] = None) -> None:
        self.comparer = comparer or NaturalOrderComparer()
        self._entries: Dict[Tuple[str, str], List[ElementType]] = {}

    def _get(self, document_key: str, kind: str, fetch: Callable[[], List[ElementType]]) -> List[ElementType]:
        key = (str(document_key), kind)
        cached = self._entries.get(key)
        if cached is None:
            cached = natural_sorted(fetch(), key=lambda t: t.name, comparer=self.comparer)
            self._entries[key] = cached
        return list(cached)

    def wall_types(self, document_key: str, catalog: TypeCatalog) -> List[ElementType]:
        return self._get(document_key, "wall_types", catalog.wall_types)

    def floor_types(self, document_key: str, catalog: TypeCatalog) -> List[ElementType]:
        return self._get(document_key, "floor_types", catalog.floor_types)

    def ceiling_types(self, document_key: str, catalog: TypeCatalog) -> List[ElementType]:
        return self._get(document_key, "ceiling_types", catalog.ceiling_types)

    def levels(self, document_key: str, catalog: TypeCatalog) -> List[ElementType]:
        return self._get(document_key, "levels", catalog.levels)

    def invalidate(self, document_key: str) -> None:
        for kind in _KINDS:
            self._entries.pop((str(document_key), kind), None)

    def __contains__(self, document_key: object) -> bool:
        return any((document_key, kind) in self._entries for kind in _KINDS)
