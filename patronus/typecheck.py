"""Type checking of expression nodes and fast access to the type of an expression."""

from __future__ import annotations

from typing import Any, Optional, Union

from patronus.nodes import (
    ArrayConstant,
    ArrayEqual,
    ArrayIte,
    ArrayStore,
    ArraySymbol,
    ArrayType,
    BVAdd,
    BVAnd,
    BVArithmeticShiftRight,
    BVArrayRead,
    BVConcat,
    BVEqual,
    BVGreater,
    BVGreaterEqual,
    BVGreaterEqualSigned,
    BVGreaterSigned,
    BVImplies,
    BVIte,
    BVLiteral,
    BVMul,
    BVNegate,
    BVNot,
    BVOr,
    BVShiftLeft,
    BVShiftRight,
    BVSignedDiv,
    BVSignedMod,
    BVSignedRem,
    BVSignExt,
    BVSlice,
    BVSub,
    BVSymbol,
    BVType,
    BVUnsignedDiv,
    BVUnsignedRem,
    BVXor,
    BVZeroExt,
    Expr,
    ExprRef,
    Type,
)


class TypeCheckError(Exception):
    """Raised when an expression node has inconsistent type information."""

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg


_ARRAY_EXPRS = (ArraySymbol, ArrayConstant, ArrayIte, ArrayStore)

# operations that take two bit-vectors of the node's width and return that width
_SAME_WIDTH_OPS = {
    BVAnd: "and",
    BVOr: "or",
    BVXor: "xor",
    BVShiftLeft: "shift left",
    BVArithmeticShiftRight: "arithmetic shift right",
    BVShiftRight: "shift right",
    BVAdd: "add",
    BVMul: "mul",
    BVSignedDiv: "signed div",
    BVUnsignedDiv: "unsigned div",
    BVSignedMod: "signed mod",
    BVSignedRem: "signed rem",
    BVUnsignedRem: "unsigned rem",
    BVSub: "subtraction",
}

# comparisons that take two bit-vectors of the same width and return a boolean
_COMPARISONS = {
    BVEqual: "bit-vector equality",
    BVGreater: "greater",
    BVGreaterSigned: "greater signed",
    BVGreaterEqual: "greater or equals",
    BVGreaterEqualSigned: "greater or equals signed",
}


def is_array_expr(expr: Expr) -> bool:
    """True for expression nodes that produce an array."""
    return isinstance(expr, _ARRAY_EXPRS)


def is_bv_expr(expr: Expr) -> bool:
    """True for expression nodes that produce a bit-vector."""
    return not is_array_expr(expr)


def _resolve(ctx: Any, expr: Union[Expr, ExprRef]) -> Expr:
    return ctx[expr] if isinstance(expr, ExprRef) else expr


def _expect_bv(tpe: Type, op: str) -> int:
    if isinstance(tpe, BVType):
        return tpe.width
    raise TypeCheckError(f"{op} only works on bit-vectors, not arrays.")


def _expect_bv_of(tpe: Type, expected_width: int, op: str) -> BVType:
    if isinstance(tpe, BVType) and tpe.width == expected_width:
        return tpe
    raise TypeCheckError(
        f"{op} only works on bit-vectors of size {expected_width}, not {tpe}."
    )


def _expect_array(tpe: Type, op: str) -> ArrayType:
    if isinstance(tpe, ArrayType):
        return tpe
    raise TypeCheckError(f"{op} needs to be an array, not a {tpe}.")


def _same_width_bvs(ctx: Any, op: str, a: ExprRef, b: ExprRef) -> BVType:
    a_width = _expect_bv(get_type(ctx, a), op)
    b_width = _expect_bv(get_type(ctx, b), op)
    if a_width != b_width:
        raise TypeCheckError(
            f"{op} requires two bit-vectors of the same width, not {a_width} and {b_width}"
        )
    return BVType(a_width)


def _same_size_arrays(ctx: Any, op: str, a: ExprRef, b: ExprRef) -> ArrayType:
    a_tpe = _expect_array(get_type(ctx, a), op)
    b_tpe = _expect_array(get_type(ctx, b), op)
    if a_tpe != b_tpe:
        raise TypeCheckError(
            f"{op} requires two arrays of the same type, not {a_tpe} and {b_tpe}"
        )
    return a_tpe


def type_check(ctx: Any, expr: Union[Expr, ExprRef]) -> Type:
    """Checks a single expression node (not its children) and returns its type."""
    node = _resolve(ctx, expr)
    kind = type(node)

    if kind in _SAME_WIDTH_OPS:
        op = _SAME_WIDTH_OPS[kind]
        return _expect_bv_of(_same_width_bvs(ctx, op, node.a, node.b), node.width, op)
    if kind in _COMPARISONS:
        _same_width_bvs(ctx, _COMPARISONS[kind], node.a, node.b)
        return BVType(1)

    if isinstance(node, BVSymbol):
        return BVType(node.width)
    if isinstance(node, BVLiteral):
        return BVType(node.width)
    if isinstance(node, BVZeroExt):
        _expect_bv_of(get_type(ctx, node.e), node.width - node.by, "zero extend")
        return BVType(node.width)
    if isinstance(node, BVSignExt):
        _expect_bv_of(get_type(ctx, node.e), node.width - node.by, "sign extend")
        return BVType(node.width)
    if isinstance(node, BVSlice):
        e_width = _expect_bv(get_type(ctx, node.e), "slicing")
        if node.hi >= e_width:
            raise TypeCheckError(
                f"Bit-slice upper index must be smaller than the width {e_width}. "
                f"Not: {node.hi}"
            )
        if node.hi < node.lo:
            raise TypeCheckError(
                "Bit-slice upper index must be larger or the same as the lower index. "
                f"But {node.hi} < {node.lo}"
            )
        return BVType(node.hi - node.lo + 1)
    if isinstance(node, BVNot):
        return _expect_bv_of(get_type(ctx, node.e), node.width, "not")
    if isinstance(node, BVNegate):
        return _expect_bv_of(get_type(ctx, node.e), node.width, "negate")
    if isinstance(node, BVImplies):
        _expect_bv_of(get_type(ctx, node.a), 1, "implies")
        _expect_bv_of(get_type(ctx, node.b), 1, "implies")
        return BVType(1)
    if isinstance(node, BVConcat):
        a_width = _expect_bv(get_type(ctx, node.a), "concat")
        b_width = _expect_bv(get_type(ctx, node.b), "concat")
        return _expect_bv_of(BVType(a_width + b_width), node.width, "concat")
    if isinstance(node, BVArrayRead):
        array_tpe = _expect_array(
            get_type(ctx, node.array), "the first argument to the read operation"
        )
        index_width = _expect_bv(get_type(ctx, node.index), "array read index")
        if array_tpe.index_width != index_width:
            raise TypeCheckError(
                f"Underlying array requires index width {array_tpe.index_width} "
                f"not {index_width}"
            )
        if array_tpe.data_width != node.width:
            raise TypeCheckError(
                f"Underlying array requires data width {array_tpe.data_width} "
                f"not {node.width}"
            )
        return BVType(array_tpe.data_width)
    if isinstance(node, BVIte):
        _expect_bv_of(get_type(ctx, node.cond), 1, "ite condition")
        return _same_width_bvs(ctx, "ite branches", node.tru, node.fals)
    if isinstance(node, ArraySymbol):
        return ArrayType(node.index_width, node.data_width)
    if isinstance(node, ArrayConstant):
        _expect_bv_of(get_type(ctx, node.e), node.data_width, "array constant")
        return ArrayType(node.index_width, node.data_width)
    if isinstance(node, ArrayEqual):
        _same_size_arrays(ctx, "the array equals operation", node.a, node.b)
        return BVType(1)
    if isinstance(node, ArrayStore):
        tpe = _expect_array(
            get_type(ctx, node.array), "the first argument to the store operation"
        )
        _expect_bv_of(get_type(ctx, node.index), tpe.index_width, "array store index")
        _expect_bv_of(get_type(ctx, node.data), tpe.data_width, "array store data")
        return tpe
    if isinstance(node, ArrayIte):
        _expect_bv_of(get_type(ctx, node.cond), 1, "ite condition")
        return _same_size_arrays(ctx, "both ite branches", node.tru, node.fals)
    raise TypeError(f"not an expression: {node!r}")


def get_type(ctx: Any, expr: Union[Expr, ExprRef]) -> Type:
    """Returns the type of an expression without performing any checks."""
    node = _resolve(ctx, expr)
    # ite and store nodes carry no type themselves, so follow their operands
    while isinstance(node, (BVIte, ArrayIte, ArrayStore)):
        node = ctx[node.array] if isinstance(node, ArrayStore) else ctx[node.fals]

    if isinstance(node, (ArraySymbol, ArrayConstant)):
        return ArrayType(node.index_width, node.data_width)
    if isinstance(node, BVSlice):
        return BVType(node.hi - node.lo + 1)
    if isinstance(node, (BVEqual, BVImplies, BVGreater, BVGreaterSigned, BVGreaterEqual,
                         BVGreaterEqualSigned, ArrayEqual)):
        return BVType(1)
    width = getattr(node, "width", None)
    if width is None:
        raise TypeError(f"not an expression: {node!r}")
    return BVType(width)


def get_bv_type(ctx: Any, expr: Union[Expr, ExprRef]) -> Optional[int]:
    """Returns the width of a bit-vector expression, or None for arrays."""
    tpe = get_type(ctx, expr)
    return tpe.width if isinstance(tpe, BVType) else None


def get_array_type(ctx: Any, expr: Union[Expr, ExprRef]) -> Optional[ArrayType]:
    """Returns the type of an array expression, or None for bit-vectors."""
    tpe = get_type(ctx, expr)
    return tpe if isinstance(tpe, ArrayType) else None


def is_bool(ctx: Any, expr: Union[Expr, ExprRef]) -> bool:
    return get_bv_type(ctx, expr) == 1