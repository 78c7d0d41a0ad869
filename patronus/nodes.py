"""Expression references, types and expression nodes."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from patronus.values import BitVecValue


@dataclass(frozen=True, order=True)
class ExprRef:
    """Identifies an expression interned in a context by its zero-based index."""

    index: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"invalid expression index {self.index}")

    @classmethod
    def from_index(cls, index: int) -> ExprRef:
        return cls(index)

    def __repr__(self) -> str:
        return f"ExprRef({self.index})"


@dataclass(frozen=True, order=True)
class StringRef:
    """Identifies a string interned in a context by its zero-based index."""

    index: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"invalid string index {self.index}")

    @classmethod
    def from_index(cls, index: int) -> StringRef:
        return cls(index)

    def __repr__(self) -> str:
        return f"StringRef({self.index})"


@dataclass(frozen=True)
class BVType:
    width: int

    def is_bit_vector(self) -> bool:
        return True

    def is_array(self) -> bool:
        return False

    def is_bool(self) -> bool:
        return self.width == 1

    def __str__(self) -> str:
        return f"bv<{self.width}>"


@dataclass(frozen=True)
class ArrayType:
    index_width: int
    data_width: int

    def data_type(self) -> BVType:
        return BVType(self.data_width)

    def index_type(self) -> BVType:
        return BVType(self.index_width)

    def is_bit_vector(self) -> bool:
        return False

    def is_array(self) -> bool:
        return True

    def is_bool(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"bv<{self.index_width}> -> bv<{self.data_width}>"


Type = Union[BVType, ArrayType]
BOOL = BVType(1)


class Expr:
    """Base class of all bit-vector and array expression nodes."""

    _children: Tuple[str, ...] = ()

    def children(self) -> Tuple[ExprRef, ...]:
        return tuple(getattr(self, name) for name in self._children)

    def num_children(self) -> int:
        return len(self._children)

    def with_children(self, children: Sequence[ExprRef]) -> Expr:
        """Returns the same kind of node with its children replaced."""
        children = tuple(children)
        if not self._children:
            raise ValueError(f"{type(self).__name__} has no children")
        if len(children) != len(self._children):
            raise ValueError(
                f"{type(self).__name__} takes {len(self._children)} children, "
                f"not {len(children)}"
            )
        return dataclasses.replace(self, **dict(zip(self._children, children)))

    def is_symbol(self) -> bool:
        return isinstance(self, (BVSymbol, ArraySymbol))

    def is_bv_lit(self) -> bool:
        return isinstance(self, BVLiteral)

    def symbol_name_ref(self) -> Optional[StringRef]:
        """Returns the name of a symbol, or None for any other expression."""
        if isinstance(self, (BVSymbol, ArraySymbol)):
            return self.name
        return None

    def is_true(self) -> bool:
        return False

    def is_false(self) -> bool:
        return False


# nullary bit-vector expressions


@dataclass(frozen=True)
class BVSymbol(Expr):
    name: StringRef
    width: int


@dataclass(frozen=True)
class BVLiteral(Expr):
    value: BitVecValue

    @property
    def width(self) -> int:
        return self.value.width

    def is_true(self) -> bool:
        return self.value.is_true()

    def is_false(self) -> bool:
        return self.value.is_false()


# unary bit-vector expressions


@dataclass(frozen=True)
class BVZeroExt(Expr):
    e: ExprRef
    by: int
    width: int
    _children = ("e",)


@dataclass(frozen=True)
class BVSignExt(Expr):
    e: ExprRef
    by: int
    width: int
    _children = ("e",)


@dataclass(frozen=True)
class BVSlice(Expr):
    e: ExprRef
    hi: int
    lo: int
    _children = ("e",)


@dataclass(frozen=True)
class BVNot(Expr):
    e: ExprRef
    width: int
    _children = ("e",)


@dataclass(frozen=True)
class BVNegate(Expr):
    e: ExprRef
    width: int
    _children = ("e",)


# binary bit-vector expressions


@dataclass(frozen=True)
class _BinaryOp(Expr):
    a: ExprRef
    b: ExprRef
    _children = ("a", "b")


@dataclass(frozen=True)
class _BinaryWidthOp(Expr):
    a: ExprRef
    b: ExprRef
    width: int
    _children = ("a", "b")


@dataclass(frozen=True)
class BVEqual(_BinaryOp):
    pass


@dataclass(frozen=True)
class BVImplies(_BinaryOp):
    pass


@dataclass(frozen=True)
class BVGreater(_BinaryOp):
    pass


@dataclass(frozen=True)
class BVGreaterSigned(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVGreaterEqual(_BinaryOp):
    pass


@dataclass(frozen=True)
class BVGreaterEqualSigned(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVConcat(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVAnd(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVOr(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVXor(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVShiftLeft(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVArithmeticShiftRight(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVShiftRight(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVAdd(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVMul(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVSignedDiv(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVUnsignedDiv(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVSignedMod(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVSignedRem(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVUnsignedRem(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVSub(_BinaryWidthOp):
    pass


@dataclass(frozen=True)
class BVArrayRead(Expr):
    array: ExprRef
    index: ExprRef
    width: int
    _children = ("array", "index")


@dataclass(frozen=True)
class BVIte(Expr):
    cond: ExprRef
    tru: ExprRef
    fals: ExprRef
    _children = ("cond", "tru", "fals")


# array expressions


@dataclass(frozen=True)
class ArraySymbol(Expr):
    name: StringRef
    index_width: int
    data_width: int


@dataclass(frozen=True)
class ArrayConstant(Expr):
    e: ExprRef
    index_width: int
    data_width: int
    _children = ("e",)


@dataclass(frozen=True)
class ArrayEqual(_BinaryOp):
    pass


@dataclass(frozen=True)
class ArrayStore(Expr):
    array: ExprRef
    index: ExprRef
    data: ExprRef
    _children = ("array", "index", "data")


@dataclass(frozen=True)
class ArrayIte(Expr):
    cond: ExprRef
    tru: ExprRef
    fals: ExprRef
    _children = ("cond", "tru", "fals")


def make_symbol(name: StringRef, tpe: Type) -> Expr:
    """Creates a symbol that matches the given type."""
    if isinstance(tpe, BVType):
        return BVSymbol(name, tpe.width)
    if isinstance(tpe, ArrayType):
        return ArraySymbol(name, tpe.index_width, tpe.data_width)
    raise TypeError(f"not a type: {tpe!r}")