from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Protocol


class Snapshottable(Protocol):
    def snapshot(self) -> Dict[str, Any]: ...

    def restore(self, state: Dict[str, Any]) -> None: ...


class TransactionError(RuntimeError):
    pass


@dataclass(frozen=True)
class TransactionRecord:
    op_name: str
    args: Dict[str, Any]
    before: Dict[str, Any] = field(repr=False)
    after: Dict[str, Any] = field(repr=False)
    created: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)


def _element_ids(state: Dict[str, Any]) -> List[str]:
    ids: List[str] = []
    for kind in ("walls", "floors", "ceilings"):
        ids.extend(str(k) for k in state.get(kind, {}))
    return ids


class TransactionManager:
    """
    Snapshot based transactions over a document.

    ``begin`` captures the document state, ``rollback`` restores it and
    ``commit`` records the before/after pair on the undo stack.
    """

    def __init__(self, target: Snapshottable) -> None:
        self.target = target
        self._active: Optional[Dict[str, Any]] = None
        self._undo: List[TransactionRecord] = []
        self._redo: List[TransactionRecord] = []

    def begin(self, op_name: str = "op", args: Optional[Dict[str, Any]] = None) -> None:
        if self._active is not None:
            raise TransactionError("transaction already active")
        self._active = {
            "op_name": str(op_name),
            "args": dict(args or {}),
            "before": self.target.snapshot(),
        }

    def commit(self) -> TransactionRecord:
        if self._active is None:
            raise TransactionError("no active transaction")
        before = self._active["before"]
        after = self.target.snapshot()
        before_ids = set(_element_ids(before))
        after_ids = set(_element_ids(after))
        rec = TransactionRecord(
            op_name=str(self._active["op_name"]),
            args=dict(self._active["args"]),
            before=before,
            after=after,
            created=sorted(after_ids - before_ids),
            deleted=sorted(before_ids - after_ids),
        )
        self._undo.append(rec)
        self._redo.clear()
        self._active = None
        return rec

    def rollback(self) -> None:
        if self._active is None:
            raise TransactionError("no active transaction")
        self.target.restore(self._active["before"])
        self._active = None

    def undo(self) -> bool:
        if not self._undo:
            return False
        rec = self._undo.pop()
        self.target.restore(rec.before)
        self._redo.append(rec)
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        rec = self._redo.pop()
        self.target.restore(rec.after)
        self._undo.append(rec)
        return True

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    @property
    def active(self) -> bool:
        return self._active is not None


@contextmanager
def scoped_transaction(scope: Any, name: str) -> Iterator[None]:
    """Begin on ``scope``; commit on normal exit, roll back and re-raise otherwise."""
    scope.begin(name)
    try:
        yield
        scope.commit()
    except BaseException:
        scope.rollback()
        raise
