"""Simplification rules for width-changing, shift and arithmetic bit-vector operations.

Each rule looks at one node given its (already simplified) operands and returns
a simpler equivalent expression, or None if no rule applies.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from patronus.nodes import (
    BVAdd,
    BVAnd,
    BVConcat,
    BVIte,
    BVLiteral,
    BVMul,
    BVNegate,
    BVNot,
    BVOr,
    BVSignExt,
    BVSlice,
    BVSub,
    BVXor,
    ExprRef,
)
from patronus.values import BitVecValue


def _split_literals(
    ctx: Any, a: ExprRef, b: ExprRef
) -> Tuple[List[Tuple[BitVecValue, ExprRef]], List[ExprRef]]:
    """Splits the operands of a commutative operation into literals and the rest."""
    lits: List[Tuple[BitVecValue, ExprRef]] = []
    others: List[ExprRef] = []
    for operand in (a, b):
        node = ctx[operand]
        if isinstance(node, BVLiteral):
            lits.append((node.value, operand))
        else:
            others.append(operand)
    return lits, others


def _width(ctx: Any, e: ExprRef) -> int:
    width = ctx.get_bv_type(e)
    if width is None:
        raise TypeError(f"expected a bit-vector expression, not {ctx[e]!r}")
    return width


def simplify_bv_concat(ctx: Any, a: ExprRef, b: ExprRef) -> Optional[ExprRef]:
    na, nb = ctx[a], ctx[b]
    if isinstance(na, BVConcat):
        # normalize concatenations to be right recursive
        return ctx.concat(na.a, ctx.concat(na.b, b))
    if isinstance(na, BVLiteral) and isinstance(nb, BVLiteral):
        return ctx.bv_lit(na.value.concat(nb.value))
    if isinstance(na, BVLiteral) and isinstance(nb, BVConcat):
        inner = ctx[nb.a]
        if isinstance(inner, BVLiteral):
            lit = ctx.bv_lit(na.value.concat(inner.value))
            return ctx.concat(lit, nb.b)
        return None
    if isinstance(na, BVSlice) and isinstance(nb, BVSlice):
        # adjacent slices of the same expression
        if na.e == nb.e and na.lo == nb.hi + 1:
            return ctx.slice(na.e, na.hi, nb.lo)
    return None


_BITWISE = {BVAnd: "and_", BVOr: "or_", BVXor: "xor"}
# information only flows from low to high bits in these operations
_LOW_TO_HIGH = {BVAdd: "add", BVSub: "sub", BVMul: "mul"}


def simplify_bv_slice(ctx: Any, e: ExprRef, hi: int, lo: int) -> Optional[ExprRef]:
    if hi < lo:
        raise ValueError(f"{hi} < {lo} ... not allowed!")
    node = ctx[e]
    kind = type(node)

    if isinstance(node, BVSlice):
        return ctx.slice(node.e, hi + node.lo, lo + node.lo)
    if isinstance(node, BVLiteral):
        return ctx.bv_lit(node.value.slice(hi, lo))
    if isinstance(node, BVConcat):
        b_width = _width(ctx, node.b)
        if hi < b_width:
            return ctx.slice(node.b, hi, lo)
        if lo >= b_width:
            return ctx.slice(node.a, hi - b_width, lo - b_width)
        a_slice = ctx.slice(node.a, hi - b_width, 0)
        b_slice = ctx.slice(node.b, b_width - 1, lo)
        return ctx.concat(a_slice, b_slice)
    if isinstance(node, BVSignExt):
        e_width = _width(ctx, node.e)
        if hi < e_width:
            return ctx.slice(node.e, hi, lo)
        inner = ctx.slice(node.e, e_width - 1, lo)
        return ctx.sign_extend(inner, hi - e_width + 1)
    if isinstance(node, BVIte):
        tru = ctx.slice(node.tru, hi, lo)
        fals = ctx.slice(node.fals, hi, lo)
        return ctx.ite(node.cond, tru, fals)
    if isinstance(node, BVNot):
        return ctx.not_(ctx.slice(node.e, hi, lo))
    if isinstance(node, BVNegate) and lo == 0:
        return ctx.negate(ctx.slice(node.e, hi, lo))
    if kind in _BITWISE or (kind in _LOW_TO_HIGH and lo == 0):
        method = getattr(ctx, _BITWISE.get(kind) or _LOW_TO_HIGH[kind])
        a_slice = ctx.slice(node.a, hi, lo)
        b_slice = ctx.slice(node.b, hi, lo)
        return method(a_slice, b_slice)
    return None


def simplify_bv_zero_ext(ctx: Any, e: ExprRef, by: int) -> Optional[ExprRef]:
    if by == 0:
        return e
    node = ctx[e]
    if isinstance(node, BVLiteral):
        return ctx.bv_lit(node.value.zero_extend(by))
    # normalize to a concatenation with zeros
    return ctx.concat(ctx.zero(by), e)


def simplify_bv_sign_ext(ctx: Any, e: ExprRef, by: int) -> Optional[ExprRef]:
    if by == 0:
        return e
    node = ctx[e]
    if isinstance(node, BVLiteral):
        return ctx.bv_lit(node.value.sign_extend(by))
    if isinstance(node, BVSignExt):
        return ctx.sign_extend(node.e, by + node.by)
    return None


def _shift_amount(ctx: Any, b: ExprRef) -> Optional[int]:
    node = ctx[b]
    return node.value.value if isinstance(node, BVLiteral) else None


def simplify_bv_shift_left(
    ctx: Any, a: ExprRef, b: ExprRef, width: int
) -> Optional[ExprRef]:
    by = _shift_amount(ctx, b)
    if by is None:
        return None
    na = ctx[a]
    if isinstance(na, BVLiteral):
        return ctx.bv_lit(na.value.shift_left(ctx[b].value))
    if by >= width:
        return ctx.zero(width)
    if by == 0:
        return a
    return ctx.concat(ctx.slice(a, width - 1 - by, 0), ctx.zero(by))


def simplify_bv_shift_right(
    ctx: Any, a: ExprRef, b: ExprRef, width: int
) -> Optional[ExprRef]:
    by = _shift_amount(ctx, b)
    if by is None:
        return None
    na = ctx[a]
    if isinstance(na, BVLiteral):
        return ctx.bv_lit(na.value.shift_right(ctx[b].value))
    if by >= width:
        return ctx.zero(width)
    if by == 0:
        return a
    return ctx.zero_extend(ctx.slice(a, width - 1, by), by)


def simplify_bv_arithmetic_shift_right(
    ctx: Any, a: ExprRef, b: ExprRef, width: int
) -> Optional[ExprRef]:
    by = _shift_amount(ctx, b)
    if by is None:
        return None
    na = ctx[a]
    if isinstance(na, BVLiteral):
        return ctx.bv_lit(na.value.arithmetic_shift_right(ctx[b].value))
    if by >= width:
        # every bit becomes a copy of the sign bit
        return ctx.sign_extend(ctx.slice(a, width - 1, width - 1), width - 1)
    if by == 0:
        return a
    return ctx.sign_extend(ctx.slice(a, width - 1, by), by)


def simplify_bv_add(ctx: Any, a: ExprRef, b: ExprRef) -> Optional[ExprRef]:
    lits, others = _split_literals(ctx, a, b)
    if len(lits) == 2:
        return ctx.bv_lit(lits[0][0].add(lits[1][0]))
    if len(lits) == 1 and lits[0][0].is_zero():
        return others[0]
    return None


def simplify_bv_mul(ctx: Any, a: ExprRef, b: ExprRef) -> Optional[ExprRef]:
    lits, others = _split_literals(ctx, a, b)
    if len(lits) == 2:
        return ctx.bv_lit(lits[0][0].mul(lits[1][0]))
    if len(lits) == 1:
        value, lit_expr = lits[0]
        other = others[0]
        if value.is_zero():
            return lit_expr
        if value.is_one():
            return other
        log_2 = value.is_pow_2()
        if log_2 is not None:
            return ctx.shift_left(other, ctx.bit_vec_val(log_2, value.width))
    return None