"""Use counting over expression DAGs."""

from __future__ import annotations

from typing import Any, Iterable, List

from patronus.meta import SparseExprMap
from patronus.nodes import ExprRef

MAX_USE_COUNT = 0xFFFF


def count_expr_uses(ctx: Any, roots: Iterable[ExprRef]) -> SparseExprMap[int]:
    """Counts how often each expression in the DAGs below `roots` is used.

    Every root starts with a count of one.
    """
    use_count: SparseExprMap[int] = SparseExprMap(int)
    todo: List[ExprRef] = list(roots)
    for root in todo:
        use_count[root] = 1
    while todo:
        update_expr_child_uses(ctx, todo.pop(), use_count, todo)
    return use_count


def update_expr_child_uses(
    ctx: Any, expr: ExprRef, use_count: Any, todo: List[ExprRef]
) -> None:
    """Increments the use counts of the children of `expr`.

    Children seen for the first time are appended to `todo`. Counts saturate
    at MAX_USE_COUNT.
    """
    for child in ctx[expr].children():
        count = use_count[child]
        use_count[child] = min(count + 1, MAX_USE_COUNT)
        if count == 0:
            todo.append(child)