"""Concrete evaluation of expressions given values for their symbols."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Tuple

from patronus.nodes import (
    ArrayConstant,
    ArrayEqual,
    ArrayIte,
    ArrayStore,
    ArraySymbol,
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
    BVUnsignedDiv,
    BVUnsignedRem,
    BVXor,
    BVZeroExt,
    Expr,
    ExprRef,
)
from patronus.typecheck import get_array_type, get_bv_type, is_bv_expr
from patronus.values import ArrayValue, BitVecValue, Value


class EvalError(Exception):
    """Raised when an expression cannot be evaluated."""


class SymbolValueStore:
    """Holds the values of bit-vector and array symbols."""

    def __init__(self) -> None:
        self._bvs: Dict[ExprRef, BitVecValue] = {}
        self._arrays: Dict[ExprRef, ArrayValue] = {}

    def _check_new(self, symbol: ExprRef) -> None:
        if symbol in self._bvs or symbol in self._arrays:
            raise KeyError(f"{symbol!r} is already defined")

    def define_bv(self, symbol: ExprRef, value: BitVecValue) -> None:
        self._check_new(symbol)
        self._bvs[symbol] = value

    def update_bv(self, symbol: ExprRef, value: BitVecValue) -> None:
        old = self._bvs[symbol]
        if old.width != value.width:
            raise ValueError(f"cannot assign a bv<{value.width}> to a bv<{old.width}>")
        self._bvs[symbol] = value

    def define_array(self, symbol: ExprRef, value: ArrayValue) -> None:
        self._check_new(symbol)
        self._arrays[symbol] = value

    def update_array(self, symbol: ExprRef, value: ArrayValue) -> None:
        if symbol not in self._arrays:
            raise KeyError(symbol)
        self._arrays[symbol] = value

    def update(self, symbol: ExprRef, value: Value) -> None:
        if isinstance(value, ArrayValue):
            self.update_array(symbol, value)
        else:
            self.update_bv(symbol, value)

    def clear(self) -> None:
        self._bvs.clear()
        self._arrays.clear()

    def get_bv(self, ctx: Any, symbol: ExprRef) -> Optional[BitVecValue]:
        if get_bv_type(ctx, symbol) is None:
            return None
        return self._bvs.get(symbol)

    def get_array(self, ctx: Any, symbol: ExprRef) -> Optional[ArrayValue]:
        tpe = get_array_type(ctx, symbol)
        value = self._arrays.get(symbol)
        if value is None:
            return None
        if tpe is not None and (
            value.index_width != tpe.index_width or value.data_width != tpe.data_width
        ):
            raise EvalError(f"value of {symbol!r} does not match its type {tpe}")
        return value.copy()


_Lookup = Callable[[ExprRef], Optional[Value]]


def _lookups(ctx: Any, values: Any) -> Tuple[_Lookup, _Lookup]:
    """Returns bit-vector and array lookup functions for any supported value source."""
    if hasattr(values, "get_bv") and hasattr(values, "get_array"):
        return (lambda e: values.get_bv(ctx, e)), (lambda e: values.get_array(ctx, e))
    if isinstance(values, Mapping):
        table = values
    else:
        table = {}
        for expr, value in values:
            table.setdefault(expr, value)

    def bv(e: ExprRef) -> Optional[Value]:
        value = table.get(e)
        return value if isinstance(value, BitVecValue) else None

    def array(e: ExprRef) -> Optional[Value]:
        value = table.get(e)
        return value.copy() if isinstance(value, ArrayValue) else None

    return bv, array


_BINARY: Dict[type, Callable[[BitVecValue, BitVecValue], BitVecValue]] = {
    BVEqual: lambda a, b: BitVecValue.from_bool(a == b),
    BVImplies: lambda a, b: a.not_().or_(b),
    BVGreater: lambda a, b: BitVecValue.from_bool(a.is_greater(b)),
    BVGreaterSigned: lambda a, b: BitVecValue.from_bool(a.is_greater_signed(b)),
    BVGreaterEqual: lambda a, b: BitVecValue.from_bool(a.is_greater_or_equal(b)),
    BVGreaterEqualSigned: lambda a, b: BitVecValue.from_bool(
        a.is_greater_or_equal_signed(b)
    ),
    BVConcat: BitVecValue.concat,
    BVAnd: BitVecValue.and_,
    BVOr: BitVecValue.or_,
    BVXor: BitVecValue.xor,
    BVShiftLeft: BitVecValue.shift_left,
    BVArithmeticShiftRight: BitVecValue.arithmetic_shift_right,
    BVShiftRight: BitVecValue.shift_right,
    BVAdd: BitVecValue.add,
    BVSub: BitVecValue.sub,
    BVMul: BitVecValue.mul,
    BVSignedDiv: BitVecValue.signed_div,
    BVUnsignedDiv: BitVecValue.unsigned_div,
    BVSignedMod: BitVecValue.signed_mod,
    BVSignedRem: BitVecValue.signed_rem,
    BVUnsignedRem: BitVecValue.unsigned_rem,
}


def _pop(stack: list, what: str):
    if not stack:
        raise EvalError(f"{what} argument is missing")
    return stack.pop()


def _apply(
    ctx: Any, node: Expr, bv_stack: List[BitVecValue], array_stack: List[ArrayValue]
) -> None:
    kind = type(node)
    if kind in _BINARY:
        a = _pop(bv_stack, "first")
        b = _pop(bv_stack, "second")
        bv_stack.append(_BINARY[kind](a, b))
    elif isinstance(node, BVSymbol):
        raise EvalError(f"No value found for symbol: {ctx[node.name]} : bv<{node.width}>")
    elif isinstance(node, ArraySymbol):
        raise EvalError(
            f"No value found for symbol: {ctx[node.name]} : "
            f"bv<{node.index_width}> -> bv<{node.data_width}>"
        )
    elif isinstance(node, BVLiteral):
        bv_stack.append(node.value)
    elif isinstance(node, BVZeroExt):
        bv_stack.append(_pop(bv_stack, "e").zero_extend(node.by))
    elif isinstance(node, BVSignExt):
        bv_stack.append(_pop(bv_stack, "e").sign_extend(node.by))
    elif isinstance(node, BVSlice):
        bv_stack.append(_pop(bv_stack, "e").slice(node.hi, node.lo))
    elif isinstance(node, BVNot):
        bv_stack.append(_pop(bv_stack, "e").not_())
    elif isinstance(node, BVNegate):
        bv_stack.append(_pop(bv_stack, "e").negate())
    elif isinstance(node, BVIte):
        cond = _pop(bv_stack, "condition").to_bool()
        tru = _pop(bv_stack, "true branch")
        if cond:
            _pop(bv_stack, "false branch")
            bv_stack.append(tru)
    elif isinstance(node, BVArrayRead):
        array = _pop(array_stack, "array")
        index = _pop(bv_stack, "index")
        bv_stack.append(array.select(index))
    elif isinstance(node, ArrayConstant):
        default = _pop(bv_stack, "default (e)")
        array_stack.append(ArrayValue(node.index_width, default))
    elif isinstance(node, ArrayEqual):
        a = _pop(array_stack, "array a")
        b = _pop(array_stack, "array b")
        bv_stack.append(BitVecValue.from_bool(a.is_equal(b)))
    elif isinstance(node, ArrayStore):
        if not array_stack:
            raise EvalError("array argument is missing")
        index = _pop(bv_stack, "index")
        data = _pop(bv_stack, "data")
        array_stack[-1].store(index, data)
    elif isinstance(node, ArrayIte):
        cond = _pop(bv_stack, "condition").to_bool()
        tru = _pop(array_stack, "true branch")
        if cond:
            _pop(array_stack, "false branch")
            array_stack.append(tru)
    else:
        raise TypeError(f"not an expression: {node!r}")


def _eval(
    ctx: Any, values: Any, expr: ExprRef
) -> Tuple[List[BitVecValue], List[ArrayValue]]:
    get_bv, get_array = _lookups(ctx, values)
    bv_stack: List[BitVecValue] = []
    array_stack: List[ArrayValue] = []
    todo: List[Tuple[ExprRef, bool]] = [(expr, False)]

    while todo:
        e, args_available = todo.pop()
        node = ctx[e]
        if not args_available:
            # a value that is provided directly replaces the whole sub-expression
            if is_bv_expr(node):
                value = get_bv(e)
                if value is not None:
                    bv_stack.append(value)
                    continue
            else:
                value = get_array(e)
                if value is not None:
                    array_stack.append(value)
                    continue
            children = node.children()
            if children:
                todo.append((e, True))
                todo.extend((c, False) for c in children)
                continue
        _apply(ctx, node, bv_stack, array_stack)

    assert len(bv_stack) + len(array_stack) == 1
    return bv_stack, array_stack


def eval_bv_expr(ctx: Any, values: Any, expr: ExprRef) -> BitVecValue:
    """Evaluates a bit-vector expression.

    `values` is a SymbolValueStore (or any object with get_bv and get_array),
    a mapping from expressions to values, or a sequence of (expression, value) pairs.
    """
    if get_bv_type(ctx, expr) is None:
        raise EvalError(f"Not a bit-vector expression: {ctx[expr]!r}")
    bv_stack, _ = _eval(ctx, values, expr)
    return bv_stack[0]


def eval_array_expr(ctx: Any, values: Any, expr: ExprRef) -> ArrayValue:
    """Evaluates an array expression."""
    if get_array_type(ctx, expr) is None:
        raise EvalError(f"Not an array expression: {ctx[expr]!r}")
    _, array_stack = _eval(ctx, values, expr)
    return array_stack[0]


def eval_expr(ctx: Any, values: Any, expr: ExprRef) -> Value:
    """Evaluates a bit-vector or an array expression."""
    bv_stack, array_stack = _eval(ctx, values, expr)
    return bv_stack[0] if bv_stack else array_stack[0]