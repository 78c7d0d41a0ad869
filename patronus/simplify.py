"""Simplification and canonicalization of expressions with a result cache."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Sequence

from patronus.meta import SparseExprMap, get_fixed_point
from patronus.nodes import (
    BVAdd,
    BVAnd,
    BVArithmeticShiftRight,
    BVConcat,
    BVEqual,
    BVGreaterEqual,
    BVImplies,
    BVIte,
    BVMul,
    BVNot,
    BVOr,
    BVShiftLeft,
    BVShiftRight,
    BVSignExt,
    BVSlice,
    BVXor,
    BVZeroExt,
    ExprRef,
)
from patronus.simplify_bits import (
    simplify_bv_add,
    simplify_bv_arithmetic_shift_right,
    simplify_bv_concat,
    simplify_bv_mul,
    simplify_bv_shift_left,
    simplify_bv_shift_right,
    simplify_bv_sign_ext,
    simplify_bv_slice,
    simplify_bv_zero_ext,
)
from patronus.simplify_logic import (
    simplify_bv_and,
    simplify_bv_equal,
    simplify_bv_greater_equal,
    simplify_bv_implies,
    simplify_bv_not,
    simplify_bv_or,
    simplify_bv_xor,
    simplify_ite,
)
from patronus.transform import ExprTransformMode, do_transform_expr

_Rule = Callable[..., Optional[ExprRef]]

_RULES: Dict[type, _Rule] = {
    BVNot: lambda ctx, node, e: simplify_bv_not(ctx, e),
    BVZeroExt: lambda ctx, node, e: simplify_bv_zero_ext(ctx, e, node.by),
    BVSlice: lambda ctx, node, e: simplify_bv_slice(ctx, e, node.hi, node.lo),
    BVIte: lambda ctx, node, c, t, f: simplify_ite(ctx, c, t, f),
    BVConcat: lambda ctx, node, a, b: simplify_bv_concat(ctx, a, b),
    BVEqual: lambda ctx, node, a, b: simplify_bv_equal(ctx, a, b),
    BVAnd: lambda ctx, node, a, b: simplify_bv_and(ctx, a, b),
    BVOr: lambda ctx, node, a, b: simplify_bv_or(ctx, a, b),
    BVXor: lambda ctx, node, a, b: simplify_bv_xor(ctx, a, b),
    BVImplies: lambda ctx, node, a, b: simplify_bv_implies(ctx, a, b),
    BVGreaterEqual: lambda ctx, node, a, b: simplify_bv_greater_equal(ctx, a, b),
    BVAdd: lambda ctx, node, a, b: simplify_bv_add(ctx, a, b),
    BVMul: lambda ctx, node, a, b: simplify_bv_mul(ctx, a, b),
    BVShiftLeft: lambda ctx, node, a, b: simplify_bv_shift_left(ctx, a, b, node.width),
    BVShiftRight: lambda ctx, node, a, b: simplify_bv_shift_right(
        ctx, a, b, node.width
    ),
    BVSignExt: lambda ctx, node, e: simplify_bv_sign_ext(ctx, e, node.by),
    BVArithmeticShiftRight: lambda ctx, node, a, b: simplify_bv_arithmetic_shift_right(
        ctx, a, b, node.width
    ),
}


def simplify_node(
    ctx: Any, expr: ExprRef, children: Sequence[ExprRef]
) -> Optional[ExprRef]:
    """Simplifies one expression (not its children) given its simplified children."""
    node = ctx[expr]
    rule = _RULES.get(type(node))
    if rule is None or len(children) != node.num_children():
        return None
    return rule(ctx, node, *children)


class Simplifier:
    """Simplifies expressions and caches the results across calls."""

    def __init__(self, cache: Any = None) -> None:
        self.cache = SparseExprMap() if cache is None else cache

    def simplify(self, ctx: Any, e: ExprRef) -> ExprRef:
        do_transform_expr(
            ctx, ExprTransformMode.FIXED_POINT, self.cache, [e], simplify_node
        )
        result = get_fixed_point(self.cache, e)
        assert result is not None
        return result


def simplify_single_expression(ctx: Any, expr: ExprRef) -> ExprRef:
    """Simplifies a single expression with a fresh cache."""
    return Simplifier(SparseExprMap()).simplify(ctx, expr)