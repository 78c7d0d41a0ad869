"""Non-recursive traversals of expression DAGs."""

from __future__ import annotations

import enum
from typing import Any, Callable, Iterable, List, Sequence, Tuple, TypeVar

from patronus.nodes import Expr, ExprRef

R = TypeVar("R")


class TraversalCmd(enum.Enum):
    STOP = enum.auto()
    CONTINUE = enum.auto()


def bottom_up(
    ctx: Any,
    expr: ExprRef,
    f: Callable[[Any, ExprRef, Sequence[R]], R],
) -> R:
    """Visits expression nodes bottom up while propagating values.

    `f` receives the values computed for the node's children; they come in
    reverse child order (the value of the last child first).
    """
    return bottom_up_multi_pat(ctx, expr, lambda _ctx, node: node.children(), f)


def bottom_up_multi_pat(
    ctx: Any,
    expr: ExprRef,
    get_children: Callable[[Any, Expr], Iterable[ExprRef]],
    f: Callable[[Any, ExprRef, Sequence[R]], R],
) -> R:
    """Visits expression nodes bottom up while propagating values.

    `get_children` decides which expressions are computed before a node, which
    lets a single call of `f` cover a pattern of several nodes.
    """
    todo: List[Tuple[ExprRef, bool, int]] = [(expr, False, 0)]
    stack: List[R] = []

    while todo:
        e, children_done, num_values = todo.pop()
        if not children_done:
            children = list(get_children(ctx, ctx[e]))
            if children:
                todo.append((e, True, len(children)))
                todo.extend((c, False, 0) for c in children)
                continue

        split = len(stack) - num_values
        values = stack[split:]
        del stack[split:]
        stack.append(f(ctx, e, values))

    assert len(stack) == 1
    return stack[0]


def top_down(
    ctx: Any,
    expr: ExprRef,
    f: Callable[[Any, ExprRef], TraversalCmd],
) -> None:
    """Visits expressions from the top; children of a node are skipped when `f` returns STOP."""
    todo = [expr]
    while todo:
        e = todo.pop()
        if f(ctx, e) == TraversalCmd.CONTINUE:
            todo.extend(ctx[e].children())