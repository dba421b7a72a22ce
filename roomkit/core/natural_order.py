from __future__ import annotations

import functools
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, TypeVar


T = TypeVar("T")
CompareFunction = Callable[[Optional[str], Optional[str]], int]


class CharClass(Enum):
    DIGIT = "digit"
    LETTER = "letter"
    OTHER = "other"


def _classify(ch: str) -> CharClass:
    if ch.isdecimal():
        return CharClass.DIGIT
    if ch.isalpha():
        return CharClass.LETTER
    return CharClass.OTHER


def split_into_runs(text: str) -> List[str]:
    """Split into maximal runs of digits, letters and everything else."""
    if not text:
        return []
    runs: List[str] = []
    current = text[0]
    cls = _classify(text[0])
    for ch in text[1:]:
        c = _classify(ch)
        if c == cls:
            current += ch
            continue
        runs.append(current)
        current = ch
        cls = c
    runs.append(current)
    return runs


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


class NaturalOrderComparer:
    """
    Alphanumeric string ordering: "Type 2" sorts before "Type 10".

    Numeric runs compare by value, then by length so "7" < "07" < "007".
    Numeric runs sort before anything else, letter runs compare
    case-insensitively by default and other runs compare by code point.
    None sorts before every string. A supplied ``compare_function`` replaces
    all of the above.
    """

    def __init__(self, ignore_case: bool = True, compare_function: Optional[CompareFunction] = None) -> None:
        self.ignore_case = bool(ignore_case)
        self.compare_function = compare_function

    def __call__(self, x: Optional[str], y: Optional[str]) -> int:
        return self.compare(x, y)

    def _letters_key(self, s: str) -> Any:
        if self.ignore_case:
            return s.casefold()
        # Case-insensitive first, lowercase before uppercase on a tie.
        return (s.casefold(), s.swapcase())

    def compare(self, x: Optional[str], y: Optional[str]) -> int:
        if self.compare_function is not None:
            return _sign(int(self.compare_function(x, y)))
        if x is None and y is None:
            return 0
        if x is None:
            return -1
        if y is None:
            return 1

        xs = split_into_runs(x)
        ys = split_into_runs(y)
        for i in range(max(len(xs), len(ys))):
            if i >= len(xs):
                return -1
            if i >= len(ys):
                return 1
            a, b = xs[i], ys[i]
            a_num, b_num = a.isdecimal(), b.isdecimal()
            if a_num and b_num:
                r = _cmp(int(a), int(b)) or _cmp(len(a), len(b))
                if r:
                    return r
                continue
            if a_num != b_num:
                return -1 if a_num else 1

            a_alpha, b_alpha = a.isalpha(), b.isalpha()
            if a_alpha and b_alpha:
                r = _cmp(self._letters_key(a), self._letters_key(b))
                if r:
                    return r
                continue
            if not a_alpha and not b_alpha:
                r = _cmp(a, b)
                if r:
                    return r
                continue
            return -1 if a_alpha else 1
        return 0

    def sort_key(self) -> Callable[[Optional[str]], Any]:
        return functools.cmp_to_key(self.compare)


def natural_sorted(
    items: Iterable[T],
    key: Optional[Callable[[T], Optional[str]]] = None,
    comparer: Optional[NaturalOrderComparer] = None,
) -> List[T]:
    cmp = comparer or NaturalOrderComparer()
    get = key or (lambda item: item)  # type: ignore[assignment, return-value]
    return sorted(items, key=lambda item: functools.cmp_to_key(cmp.compare)(get(item)))
