import pytest

from patronus.nodes import (
    ArrayConstant,
    ArrayEqual,
    ArrayStore,
    ArraySymbol,
    ArrayType,
    BVAdd,
    BVAnd,
    BVArrayRead,
    BVConcat,
    BVEqual,
    BVImplies,
    BVIte,
    BVLiteral,
    BVNot,
    BVSlice,
    BVSymbol,
    BVType,
    BVZeroExt,
    ExprRef,
    StringRef,
)
from patronus.typecheck import (
    TypeCheckError,
    get_array_type,
    get_bv_type,
    get_type,
    is_array_expr,
    is_bool,
    is_bv_expr,
    type_check,
)
from patronus.values import BitVecValue


class _Ctx:
    """Minimal interning store of expression nodes."""

    def __init__(self):
        self._exprs = []
        self._lookup = {}

    def add(self, expr):
        if expr not in self._lookup:
            self._lookup[expr] = len(self._exprs)
            self._exprs.append(expr)
        return ExprRef(self._lookup[expr])

    def __getitem__(self, ref):
        return self._exprs[ref.index]


@pytest.fixture
def ctx():
    return _Ctx()


def _sym(ctx, name_index, width):
    return ctx.add(BVSymbol(StringRef(name_index), width))


def test_symbol_and_literal(ctx):
    a = _sym(ctx, 0, 4)
    lit = ctx.add(BVLiteral(BitVecValue(3, 7)))
    assert type_check(ctx, a) == BVType(4)
    assert get_type(ctx, lit) == BVType(7)
    assert get_bv_type(ctx, a) == 4


def test_slice_types_and_errors(ctx):
    a = _sym(ctx, 0, 10)
    ok = ctx.add(BVSlice(a, 7, 3))
    assert type_check(ctx, ok) == BVType(5)
    assert get_type(ctx, ok) == BVType(5)
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVSlice(a, 10, 0))
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVSlice(a, 2, 3))


def test_binary_width_mismatch(ctx):
    a = _sym(ctx, 0, 4)
    b = _sym(ctx, 1, 5)
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVAnd(a, b, 4))
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVEqual(a, b))
    c = _sym(ctx, 2, 4)
    assert type_check(ctx, BVAdd(a, c, 4)) == BVType(4)
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVAdd(a, c, 5))


def test_comparison_is_bool(ctx):
    a = _sym(ctx, 0, 8)
    b = _sym(ctx, 1, 8)
    eq = ctx.add(BVEqual(a, b))
    assert type_check(ctx, eq) == BVType(1)
    assert is_bool(ctx, eq)
    assert not is_bool(ctx, a)


def test_implies_requires_booleans(ctx):
    a = _sym(ctx, 0, 1)
    b = _sym(ctx, 1, 2)
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVImplies(a, b))
    assert type_check(ctx, BVImplies(a, a)) == BVType(1)


def test_concat_width(ctx):
    a = _sym(ctx, 0, 3)
    b = _sym(ctx, 1, 5)
    assert type_check(ctx, BVConcat(a, b, 8)) == BVType(8)
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVConcat(a, b, 7))


def test_zero_ext_and_not(ctx):
    a = _sym(ctx, 0, 3)
    assert type_check(ctx, BVZeroExt(a, 2, 5)) == BVType(5)
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVZeroExt(a, 2, 6))
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVNot(a, 4))


def test_ite_type_follows_branches(ctx):
    c = _sym(ctx, 0, 1)
    a = _sym(ctx, 1, 6)
    b = _sym(ctx, 2, 6)
    ite = ctx.add(BVIte(c, a, b))
    assert get_type(ctx, ite) == BVType(6)
    assert type_check(ctx, ite) == BVType(6)
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVIte(a, a, b))


def test_deep_ite_chain_does_not_recurse(ctx):
    c = _sym(ctx, 0, 1)
    e = _sym(ctx, 1, 9)
    for _ in range(5000):
        e = ctx.add(BVIte(c, e, e))
    assert get_bv_type(ctx, e) == 9


def test_array_expressions(ctx):
    mem = ctx.add(ArraySymbol(StringRef(0), 4, 32))
    idx = _sym(ctx, 1, 4)
    data = _sym(ctx, 2, 32)
    store = ctx.add(ArrayStore(mem, idx, data))
    tpe = ArrayType(4, 32)
    assert type_check(ctx, store) == tpe
    assert get_array_type(ctx, store) == tpe
    assert get_bv_type(ctx, store) is None
    assert get_array_type(ctx, idx) is None
    read = ctx.add(BVArrayRead(store, idx, 32))
    assert type_check(ctx, read) == BVType(32)
    eq = ctx.add(ArrayEqual(mem, store))
    assert type_check(ctx, eq) == BVType(1)


def test_array_errors(ctx):
    mem = ctx.add(ArraySymbol(StringRef(0), 4, 32))
    bad_idx = _sym(ctx, 1, 3)
    data = _sym(ctx, 2, 32)
    with pytest.raises(TypeCheckError):
        type_check(ctx, ArrayStore(mem, bad_idx, data))
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVArrayRead(mem, bad_idx, 32))
    with pytest.raises(TypeCheckError):
        type_check(ctx, BVArrayRead(data, data, 32))
    other = ctx.add(ArraySymbol(StringRef(3), 4, 8))
    with pytest.raises(TypeCheckError):
        type_check(ctx, ArrayEqual(mem, other))
    with pytest.raises(TypeCheckError):
        type_check(ctx, ArrayConstant(bad_idx, 4, 32))


def test_array_constant(ctx):
    zero = ctx.add(BVLiteral(BitVecValue.zero(8)))
    const = ctx.add(ArrayConstant(zero, 3, 8))
    assert type_check(ctx, const) == ArrayType(3, 8)


def test_is_array_expr(ctx):
    mem = ArraySymbol(StringRef(0), 4, 32)
    assert is_array_expr(mem)
    assert not is_bv_expr(mem)
    assert is_bv_expr(ArrayEqual(ExprRef(0), ExprRef(0)))
    assert not is_array_expr(BVSymbol(StringRef(0), 1))


def test_error_message_is_kept(ctx):
    a = _sym(ctx, 0, 10)
    with pytest.raises(TypeCheckError) as info:
        type_check(ctx, BVSlice(a, 2, 3))
    assert "2 < 3" in info.value.msg