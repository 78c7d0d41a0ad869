"""Simplification rules for boolean, bit-wise and comparison bit-vector operations.

Each rule looks at one node given its (already simplified) operands and returns
a simpler equivalent expression, or None if no rule applies.
"""

from __future__ import annotations

from functools import reduce
from typing import Any, List, Optional, Tuple

from patronus.nodes import BVConcat, BVLiteral, BVNot, ExprRef
from patronus.values import BitVecValue


def _literal(ctx: Any, e: ExprRef) -> Optional[BitVecValue]:
    node = ctx[e]
    return node.value if isinstance(node, BVLiteral) else None


def _literal_operands(
    ctx: Any, a: ExprRef, b: ExprRef
) -> Tuple[List[Tuple[BitVecValue, ExprRef]], List[ExprRef]]:
    """Splits the operands of a commutative operation into literals and the rest."""
    lits: List[Tuple[BitVecValue, ExprRef]] = []
    others: List[ExprRef] = []
    for operand in (a, b):
        value = _literal(ctx, operand)
        if value is None:
            others.append(operand)
        else:
            lits.append((value, operand))
    return lits, others


def _is_bool_true(value: BitVecValue) -> bool:
    return value.width == 1 and value.value == 1


def _is_bool_false(value: BitVecValue) -> bool:
    return value.width == 1 and value.value == 0


def _one_runs(value: int, width: int) -> List[Tuple[int, int]]:
    """Returns the half-open bit ranges [start, end) in which `value` has ones."""
    runs: List[Tuple[int, int]] = []
    start: Optional[int] = None
    for bit in range(width + 1):
        is_set = bit < width and bool((value >> bit) & 1)
        if is_set and start is None:
            start = bit
        elif not is_set and start is not None:
            runs.append((start, bit))
            start = None
    return runs


def _negation_of(ctx: Any, a: ExprRef, b: ExprRef) -> Optional[int]:
    """Returns the width if one operand is the bit-wise negation of the other."""
    na, nb = ctx[a], ctx[b]
    if isinstance(na, BVNot) and na.e == b:
        return na.width
    if isinstance(nb, BVNot) and nb.e == a:
        return nb.width
    return None


def simplify_ite(
    ctx: Any, cond: ExprRef, tru: ExprRef, fals: ExprRef
) -> Optional[ExprRef]:
    # ite(_, a, a) -> a
    if tru == fals:
        return tru

    cond_value = _literal(ctx, cond)
    if cond_value is not None:
        return fals if cond_value.is_zero() else tru

    if ctx.get_bv_type(tru) != 1:
        return None

    vt, vf = _literal(ctx, tru), _literal(ctx, fals)
    if vt is not None and vf is not None:
        # both literals differ, otherwise they would be the same reference
        if vt.to_bool():
            return cond
        return ctx.not_(cond)
    if vt is not None:
        if vt.to_bool():
            # ite(c, true, b) -> c | b
            return ctx.or_(cond, fals)
        # ite(c, false, b) -> !c & b
        return ctx.and_(ctx.not_(cond), fals)
    if vf is not None:
        if vf.to_bool():
            # ite(c, a, true) -> !c | a
            return ctx.or_(ctx.not_(cond), tru)
        # ite(c, a, false) -> c & a
        return ctx.and_(cond, tru)
    return None


def simplify_bv_equal(ctx: Any, a: ExprRef, b: ExprRef) -> Optional[ExprRef]:
    if a == b:
        return ctx.get_true()

    lits, others = _literal_operands(ctx, a, b)
    if len(lits) == 2:
        # equal literals are always interned to the same reference
        return ctx.get_false()
    if len(lits) == 1:
        lit = lits[0][0]
        if _is_bool_true(lit):
            return others[0]
        if _is_bool_false(lit):
            return ctx.not_(others[0])

    na, nb = ctx[a], ctx[b]
    if isinstance(na, BVConcat):
        concat, other = na, b
    elif isinstance(nb, BVConcat):
        concat, other = nb, a
    else:
        return None
    a_width = ctx.get_bv_type(concat.a)
    b_width = ctx.get_bv_type(concat.b)
    width = a_width + b_width
    eq_a = ctx.equal(concat.a, ctx.slice(other, width - 1, width - a_width))
    eq_b = ctx.equal(concat.b, ctx.slice(other, b_width - 1, 0))
    return ctx.and_(eq_a, eq_b)


def _and_with_mask(ctx: Any, lit: BitVecValue, expr: ExprRef) -> ExprRef:
    node = ctx[expr]
    if isinstance(node, BVConcat):
        # (a # b) & mask -> (a & mask_upper) # (b & mask_lower)
        width = node.width
        b_width = ctx.get_bv_type(node.b)
        a_mask = ctx.bv_lit(lit.slice(width - 1, b_width))
        b_mask = ctx.bv_lit(lit.slice(b_width - 1, 0))
        return ctx.concat(ctx.and_(node.a, a_mask), ctx.and_(node.b, b_mask))

    width = ctx.get_bv_type(expr)
    parts: List[ExprRef] = []
    bit = 0
    for start, end in _one_runs(lit.value, lit.width):
        if start > bit:
            parts.append(ctx.zero(start - bit))
        parts.append(ctx.slice(expr, end - 1, start))
        bit = end
    if bit < width:
        parts.append(ctx.zero(width - bit))
    # parts go from the least to the most significant bits
    return reduce(ctx.concat, reversed(parts))


def simplify_bv_and(ctx: Any, a: ExprRef, b: ExprRef) -> Optional[ExprRef]:
    if a == b:
        return a

    lits, others = _literal_operands(ctx, a, b)
    if len(lits) == 2:
        return ctx.bv_lit(lits[0][0].and_(lits[1][0]))
    if len(lits) == 1:
        lit, lit_expr = lits[0]
        expr = others[0]
        if lit.is_zero():
            return lit_expr
        if lit.is_all_ones():
            return expr
        return _and_with_mask(ctx, lit, expr)

    width = _negation_of(ctx, a, b)
    if width is not None:
        return ctx.zero(width)
    na, nb = ctx[a], ctx[b]
    if isinstance(na, BVNot) and isinstance(nb, BVNot):
        return ctx.or_(na.e, nb.e)
    return None


def simplify_bv_or(ctx: Any, a: ExprRef, b: ExprRef) -> Optional[ExprRef]:
    if a == b:
        return a

    lits, others = _literal_operands(ctx, a, b)
    if len(lits) == 2:
        return ctx.bv_lit(lits[0][0].or_(lits[1][0]))
    if len(lits) == 1:
        lit, lit_expr = lits[0]
        if lit.is_zero():
            return others[0]
        if lit.is_all_ones():
            return lit_expr
        return None

    width = _negation_of(ctx, a, b)
    if width is not None:
        return ctx.ones(width)
    na, nb = ctx[a], ctx[b]
    if isinstance(na, BVNot) and isinstance(nb, BVNot):
        return ctx.and_(na.e, nb.e)
    return None


def simplify_bv_xor(ctx: Any, a: ExprRef, b: ExprRef) -> Optional[ExprRef]:
    if a == b:
        return ctx.zero(ctx.get_bv_type(a))

    lits, others = _literal_operands(ctx, a, b)
    if len(lits) == 2:
        return ctx.bv_lit(lits[0][0].xor(lits[1][0]))
    if len(lits) == 1:
        lit = lits[0][0]
        if lit.is_zero():
            return others[0]
        if lit.is_all_ones():
            return ctx.not_(others[0])
        return None

    width = _negation_of(ctx, a, b)
    if width is not None:
        return ctx.ones(width)
    return None


def simplify_bv_implies(ctx: Any, a: ExprRef, b: ExprRef) -> Optional[ExprRef]:
    premise = _literal(ctx, a)
    if premise is None:
        return None
    if premise.is_zero():
        return ctx.get_true()
    return b


def simplify_bv_greater_equal(ctx: Any, a: ExprRef, b: ExprRef) -> Optional[ExprRef]:
    va, vb = _literal(ctx, a), _literal(ctx, b)
    if va is None or vb is None:
        return None
    return ctx.bv_lit(BitVecValue.from_bool(va.is_greater_or_equal(vb)))


def simplify_bv_not(ctx: Any, e: ExprRef) -> Optional[ExprRef]:
    node = ctx[e]
    if isinstance(node, BVNot):
        return node.e
    if isinstance(node, BVLiteral):
        return ctx.bv_lit(node.value.not_())
    return None