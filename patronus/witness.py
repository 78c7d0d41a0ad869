"""Counterexample traces produced by model checking."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from patronus.values import ArrayValue, BitVecValue, Value


@dataclass
class ArrayInitValue:
    """Initial value of an array state together with the entries that are relevant."""

    value: ArrayValue
    indices: List[BitVecValue] = field(default_factory=list)


InitValue = Union[BitVecValue, ArrayInitValue, None]


def init_to_value(init: InitValue) -> Value:
    """Returns the plain value of an initial state value; raises if there is none."""
    if isinstance(init, BitVecValue):
        return init
    if isinstance(init, ArrayInitValue):
        return init.value
    if init is None:
        raise ValueError("no initial value available")
    raise TypeError(f"not an initial value: {init!r}")


@dataclass
class Witness:
    """The initial state and the inputs over a number of cycles."""

    init: List[InitValue] = field(default_factory=list)
    init_names: List[Optional[str]] = field(default_factory=list)
    inputs: List[List[Optional[Value]]] = field(default_factory=list)
    input_names: List[Optional[str]] = field(default_factory=list)
    failed_safety: List[int] = field(default_factory=list)