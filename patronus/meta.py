"""Sparse and dense per-expression metadata maps and sets."""

from __future__ import annotations

from typing import Callable, Dict, Generic, Iterator, List, Optional, Set, Tuple, TypeVar

from patronus.nodes import ExprRef

T = TypeVar("T")


def _none() -> None:
    return None


class SparseExprMap(Generic[T]):
    """Hash map from expressions to values; missing keys read as the default."""

    def __init__(self, default_factory: Callable[[], T] = _none) -> None:
        self._default_factory = default_factory
        self._inner: Dict[ExprRef, T] = {}

    def __getitem__(self, key: ExprRef) -> T:
        if key in self._inner:
            return self._inner[key]
        return self._default_factory()

    def __setitem__(self, key: ExprRef, value: T) -> None:
        self._inner[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._inner

    def __len__(self) -> int:
        return len(self._inner)

    def items(self) -> Iterator[Tuple[ExprRef, T]]:
        return iter(list(self._inner.items()))

    def non_default_keys(self) -> Iterator[ExprRef]:
        default = self._default_factory()
        return (k for k, v in list(self._inner.items()) if v != default)

    def __repr__(self) -> str:
        return f"SparseExprMap({self._inner!r})"


class DenseExprMap(Generic[T]):
    """List-backed map indexed by expression index; missing keys read as the default."""

    def __init__(self, default_factory: Callable[[], T] = _none) -> None:
        self._default_factory = default_factory
        self._inner: List[T] = []

    def __getitem__(self, key: ExprRef) -> T:
        if key.index < len(self._inner):
            return self._inner[key.index]
        return self._default_factory()

    def __setitem__(self, key: ExprRef, value: T) -> None:
        missing = key.index + 1 - len(self._inner)
        if missing > 0:
            self._inner.extend(self._default_factory() for _ in range(missing))
        self._inner[key.index] = value

    def __len__(self) -> int:
        return len(self._inner)

    def items(self) -> Iterator[Tuple[ExprRef, T]]:
        return ((ExprRef(index), value) for index, value in enumerate(list(self._inner)))

    def non_default_keys(self) -> Iterator[ExprRef]:
        default = self._default_factory()
        return (k for k, v in self.items() if v != default)

    def to_list(self) -> List[T]:
        return list(self._inner)

    def __repr__(self) -> str:
        return f"DenseExprMap({self._inner!r})"


class DenseExprSet:
    """Set of expressions stored as a bit mask over expression indices."""

    def __init__(self) -> None:
        self._bits = 0

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, ExprRef):
            return False
        return bool((self._bits >> value.index) & 1)

    def insert(self, value: ExprRef) -> bool:
        """Adds `value`; returns True if it was not in the set before."""
        bit = 1 << value.index
        was_set = bool(self._bits & bit)
        self._bits |= bit
        return not was_set

    def remove(self, value: ExprRef) -> bool:
        """Removes `value`; returns True if it was in the set."""
        bit = 1 << value.index
        was_set = bool(self._bits & bit)
        self._bits &= ~bit
        return was_set

    def __iter__(self) -> Iterator[ExprRef]:
        bits, index = self._bits, 0
        while bits:
            if bits & 1:
                yield ExprRef(index)
            bits >>= 1
            index += 1

    def __len__(self) -> int:
        return bin(self._bits).count("1")


class SparseExprSet:
    """Hash set of expressions."""

    def __init__(self) -> None:
        self._inner: Set[ExprRef] = set()

    def __contains__(self, value: object) -> bool:
        return value in self._inner

    def insert(self, value: ExprRef) -> bool:
        """Adds `value`; returns True if it was not in the set before."""
        if value in self._inner:
            return False
        self._inner.add(value)
        return True

    def remove(self, value: ExprRef) -> bool:
        """Removes `value`; returns True if it was in the set."""
        if value in self._inner:
            self._inner.remove(value)
            return True
        return False

    def __iter__(self) -> Iterator[ExprRef]:
        return iter(list(self._inner))

    def __len__(self) -> int:
        return len(self._inner)


def get_fixed_point(mapping, key: ExprRef) -> Optional[ExprRef]:
    """Follows `key -> mapping[key]` until a value maps to itself.

    Every entry on the path is updated to point straight at the fixed point.
    Returns None if the chain reaches a key without a value.
    """
    value = mapping[key]
    if value is None:
        return None
    if value == key:
        return key

    current = key
    while True:
        following = mapping[current]
        if following is None:
            return None
        if following == current:
            break
        current = following

    final_value = current
    current = key
    while current != final_value:
        following = mapping[current]
        if following is None:
            return None
        mapping[current] = final_value
        current = following
    return current