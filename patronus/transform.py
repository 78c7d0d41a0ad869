"""Bottom-up rewriting of expression DAGs with a cache of transformed expressions."""

from __future__ import annotations

import enum
from typing import Any, Callable, Iterable, List, Optional, Sequence

from patronus.meta import SparseExprMap, get_fixed_point
from patronus.nodes import ExprRef

Transform = Callable[[Any, ExprRef, Sequence[ExprRef]], Optional[ExprRef]]


class ExprTransformMode(enum.Enum):
    SINGLE_STEP = enum.auto()
    FIXED_POINT = enum.auto()


def simple_transform_expr(ctx: Any, e: ExprRef, tran: Transform) -> ExprRef:
    """Transforms an expression in a single step (no fixed point) without a persistent cache."""
    cache: SparseExprMap[Optional[ExprRef]] = SparseExprMap()
    do_transform_expr(ctx, ExprTransformMode.SINGLE_STEP, cache, [e], tran)
    result = cache[e]
    assert result is not None
    return result


def do_transform_expr(
    ctx: Any,
    mode: ExprTransformMode,
    transformed: Any,
    todo: Iterable[ExprRef],
    tran: Transform,
) -> None:
    """Transforms every expression in `todo` and records the results in `transformed`.

    `tran` is called with the context, the original expression and its already
    transformed children. It returns a replacement or None to keep the node; a
    node whose children changed is then rebuilt with the new children. In
    FIXED_POINT mode a replacement is transformed again until nothing changes.
    """
    fixed_point = mode is ExprTransformMode.FIXED_POINT
    pending: List[ExprRef] = list(todo)

    while pending:
        expr_ref = pending.pop()
        children: List[ExprRef] = []
        missing: List[ExprRef] = []
        children_changed = False
        for child in ctx[expr_ref].children():
            new_child = (
                get_fixed_point(transformed, child) if fixed_point else transformed[child]
            )
            if new_child is None:
                missing.append(child)
            else:
                children_changed = children_changed or new_child != child
                children.append(new_child)
        if missing:
            # come back to this node once all of its children are done
            pending.append(expr_ref)
            pending.extend(missing)
            continue

        new_expr_ref = tran(ctx, expr_ref, tuple(children))
        if new_expr_ref is None:
            if children_changed:
                new_expr_ref = ctx.add_expr(ctx[expr_ref].with_children(children))
            else:
                new_expr_ref = expr_ref
        transformed[expr_ref] = new_expr_ref

        if fixed_point and new_expr_ref != expr_ref and transformed[new_expr_ref] is None:
            pending.append(new_expr_ref)