from __future__ import annotations

import pytest

from roomkit.elements.contracts import CollaboratorRejection, ElementType
from roomkit.elements.memory import MemoryDocument
from roomkit.geometry.loops import CurveLoop
from roomkit.geometry.primitives import Point3
from roomkit.ops.transactions import TransactionError, scoped_transaction


def _doc() -> MemoryDocument:
    return MemoryDocument(key="tx", floor_types=[ElementType("f1", "Screed 50")])


def _square() -> CurveLoop:
    return CurveLoop.from_points([Point3(0, 0), Point3(2, 0), Point3(2, 2), Point3(0, 2)])


def test_transaction_begin_commit_undo_redo_smoke() -> None:
    doc = _doc()
    tx = doc.transactions

    tx.begin("manual")
    floor = doc.create_floor([_square()], "f1", None)
    rec = tx.commit()
    assert tx.undo_depth == 1
    assert rec.created == [floor.id]
    assert rec.deleted == []

    assert tx.undo() is True
    assert doc.floor_records == {}
    assert tx.redo_depth == 1
    assert tx.redo() is True
    assert list(doc.floor_records) == [floor.id]
    assert tx.undo_depth == 1


def test_nested_begin_and_stray_commit_are_rejected() -> None:
    tx = _doc().transactions
    with pytest.raises(TransactionError):
        tx.commit()
    tx.begin("outer")
    with pytest.raises(TransactionError):
        tx.begin("inner")
    tx.rollback()
    assert not tx.active


def test_scoped_transaction_rolls_back_on_exception() -> None:
    doc = _doc()
    with pytest.raises(CollaboratorRejection):
        with scoped_transaction(doc, "Create Floors"):
            doc.create_floor([_square()], "f1", None)
            doc.create_floor([_square()], "missing", None)
    assert doc.floor_records == {}
    assert doc.transactions.undo_depth == 0
    assert not doc.transactions.active


def test_scoped_transaction_commits_on_success() -> None:
    doc = _doc()
    with scoped_transaction(doc, "Create Floors"):
        doc.create_floor([_square()], "f1", None)
    assert len(doc.floor_records) == 1
    assert doc.transactions.undo_depth == 1
