import pytest

from patronus.nodes import BVAnd, BVConcat, BVNot, BVSymbol, ExprRef, StringRef
from patronus.traversal import TraversalCmd, bottom_up, bottom_up_multi_pat, top_down


class _Ctx:
    """Minimal interning store of expression nodes and names."""

    def __init__(self):
        self._exprs = []
        self._lookup = {}
        self.names = []

    def add(self, expr):
        if expr not in self._lookup:
            self._lookup[expr] = len(self._exprs)
            self._exprs.append(expr)
        return ExprRef(self._lookup[expr])

    def sym(self, name, width):
        self.names.append(name)
        return self.add(BVSymbol(StringRef(len(self.names) - 1), width))

    def __getitem__(self, ref):
        return self._exprs[ref.index]


@pytest.fixture
def ctx():
    return _Ctx()


def _node_count(ctx, e, values):
    return 1 + sum(values)


def test_bottom_up_leaf(ctx):
    a = ctx.sym("a", 1)
    assert bottom_up(ctx, a, _node_count) == 1


def test_bottom_up_counts_tree_nodes(ctx):
    a = ctx.sym("a", 1)
    b = ctx.sym("b", 1)
    e = ctx.add(BVAnd(a, ctx.add(BVNot(b, 1)), 1))
    assert bottom_up(ctx, e, _node_count) == 4


def test_bottom_up_shared_child_visited_per_use(ctx):
    a = ctx.sym("a", 1)
    e = ctx.add(BVAnd(a, a, 1))
    calls = []

    def f(c, ref, values):
        calls.append(ref)
        return 0

    bottom_up(ctx, e, f)
    assert calls.count(a) == 2
    assert calls[-1] == e


def test_bottom_up_child_value_order(ctx):
    a = ctx.sym("a", 2)
    b = ctx.sym("b", 3)
    e = ctx.add(BVConcat(a, b, 5))

    def f(c, ref, values):
        node = c[ref]
        if isinstance(node, BVSymbol):
            return c.names[node.name.index]
        return list(values)

    assert bottom_up(ctx, e, f) == ["b", "a"]


def test_bottom_up_multi_pat_skips_double_not(ctx):
    x = ctx.sym("x", 4)
    inner = ctx.add(BVNot(x, 4))
    outer = ctx.add(BVNot(inner, 4))

    def get_children(c, node):
        if isinstance(node, BVNot) and isinstance(c[node.e], BVNot):
            return [c[node.e].e]
        return node.children()

    visited = []

    def f(c, ref, values):
        visited.append(ref)
        return 1 + sum(values)

    assert bottom_up_multi_pat(ctx, outer, get_children, f) == 2
    assert inner not in visited
    assert visited == [x, outer]


def test_top_down_visits_all(ctx):
    a = ctx.sym("a", 1)
    b = ctx.sym("b", 1)
    e = ctx.add(BVAnd(a, b, 1))
    seen = []

    def f(c, ref):
        seen.append(ref)
        return TraversalCmd.CONTINUE

    top_down(ctx, e, f)
    assert seen[0] == e
    assert sorted(seen) == sorted([e, a, b])


def test_top_down_stop_prunes_children(ctx):
    a = ctx.sym("a", 1)
    b = ctx.sym("b", 1)
    not_b = ctx.add(BVNot(b, 1))
    e = ctx.add(BVAnd(a, not_b, 1))
    seen = []

    def f(c, ref):
        seen.append(ref)
        return TraversalCmd.STOP if isinstance(c[ref], BVNot) else TraversalCmd.CONTINUE

    top_down(ctx, e, f)
    assert b not in seen
    assert set(seen) == {e, a, not_b}


def test_top_down_stop_at_root(ctx):
    a = ctx.sym("a", 1)
    e = ctx.add(BVNot(a, 1))
    seen = []

    def f(c, ref):
        seen.append(ref)
        return TraversalCmd.STOP

    top_down(ctx, e, f)
    assert seen == [e]


def test_bottom_up_deep_chain(ctx):
    e = ctx.sym("x", 8)
    for _ in range(5000):
        e = ctx.add(BVNot(e, 8))
    assert bottom_up(ctx, e, _node_count) == 5001