import pytest

from patronus.builder import build
from patronus.context import Context
from patronus.evaluate import (
    EvalError,
    SymbolValueStore,
    eval_array_expr,
    eval_bv_expr,
    eval_expr,
)
from patronus.values import ArrayValue, BitVecValue


def test_eval_bv_expr_boolean():
    c = Context()
    a = c.bv_symbol("a", 1)
    a_and_1 = build(c, lambda b: b.and_(a, b.one(1)))
    assert eval_bv_expr(c, [(a, BitVecValue.from_bool(True))], a_and_1).is_true()
    assert eval_bv_expr(c, [(a, BitVecValue.from_bool(False))], a_and_1).is_false()
    bb = c.bv_symbol("b", 1)
    expr = build(c, lambda b: b.or_(b.and_(a, b.not_(bb)), b.and_(a, bb)))
    values = [(a, BitVecValue.from_bool(False)), (bb, BitVecValue.from_bool(False))]
    assert eval_bv_expr(c, values, expr).is_false()


@pytest.mark.parametrize(
    "a_v, b_v, expected",
    [(1, 0, -1), (-1, 0, -1), (-1, -2, -3), (-1, 2000, 2000 - 1), (1000, 2000, 2000 - 1000)],
)
def test_eval_bv_expr_arithmetic_and_ite(a_v, b_v, expected):
    c = Context()
    a = c.bv_symbol("a", 128)
    b = c.bv_symbol("b", 128)
    expr = build(
        c,
        lambda x: x.ite(
            x.greater_signed(a, x.bv_lit(BitVecValue.zero(128))),
            x.sub(b, a),
            x.add(b, a),
        ),
    )
    symbols = [
        (a, BitVecValue.from_signed(a_v, 128)),
        (b, BitVecValue.from_signed(b_v, 128)),
    ]
    assert eval_bv_expr(c, symbols, expr).to_signed() == expected


def test_eval_bv_expr_with_array_expr():
    c = Context()
    a = c.array_symbol("a", 4, 32)
    a_values = ArrayValue(4, BitVecValue.zero(32))
    for ii in range(1 << 4):
        a_values.store(BitVecValue(ii, 4), BitVecValue(ii * ii, 32))
    for ii in range(1 << 4):
        read_ii = build(c, lambda x: x.array_read(a, x.bv_lit(BitVecValue(ii, 4))))
        assert eval_bv_expr(c, [(a, a_values)], read_ii).value == ii * ii


def test_eval_array_expr():
    c = Context()
    const_array = build(c, lambda x: x.array_const(x.bv_lit(BitVecValue.zero(64)), 4))
    for ii in range(1 << 4):
        addr = BitVecValue(ii, 4)
        value = BitVecValue(ii * ii * ii, 64)
        expr = build(c, lambda x: x.array_store(const_array, x.bv_lit(addr), x.bv_lit(value)))
        res = eval_array_expr(c, SymbolValueStore(), expr)
        for jj in range(1 << 4):
            got = res.select(BitVecValue(jj, 4)).value
            assert got == (jj * jj * jj if jj == ii else 0)


def test_missing_symbol_raises():
    c = Context()
    a = c.bv_symbol("a", 8)
    expr = c.add(a, c.one(8))
    with pytest.raises(EvalError, match="a : bv<8>"):
        eval_bv_expr(c, {}, expr)


def test_store_does_not_modify_provided_array():
    c = Context()
    a = c.array_symbol("mem", 2, 8)
    original = ArrayValue(2, BitVecValue.zero(8))
    expr = c.array_store(a, c.bit_vec_val(1, 2), c.bit_vec_val(7, 8))
    res = eval_array_expr(c, {a: original}, expr)
    assert res.select(BitVecValue(1, 2)) == BitVecValue(7, 8)
    assert original.select(BitVecValue(1, 2)) == BitVecValue(0, 8)


def test_symbol_value_store_define_update_clear():
    c = Context()
    x = c.bv_symbol("x", 4)
    store = SymbolValueStore()
    store.define_bv(x, BitVecValue(3, 4))
    expr = c.mul(x, c.bit_vec_val(2, 4))
    assert eval_bv_expr(c, store, expr) == BitVecValue(6, 4)
    store.update(x, BitVecValue(9, 4))
    assert eval_bv_expr(c, store, expr) == BitVecValue(2, 4)
    with pytest.raises(KeyError):
        store.define_bv(x, BitVecValue(1, 4))
    with pytest.raises(ValueError):
        store.update_bv(x, BitVecValue(1, 5))
    store.clear()
    assert store.get_bv(c, x) is None
    with pytest.raises(KeyError):
        store.update_bv(x, BitVecValue(1, 4))


def test_symbol_value_store_arrays():
    c = Context()
    m = c.array_symbol("m", 2, 4)
    store = SymbolValueStore()
    store.define_array(m, ArrayValue(2, BitVecValue(5, 4)))
    read = c.array_read(m, c.zero(2))
    assert eval_bv_expr(c, store, read) == BitVecValue(5, 4)
    store.update(m, ArrayValue(2, BitVecValue(1, 4)))
    assert eval_bv_expr(c, store, read) == BitVecValue(1, 4)


def test_division_and_width_ops():
    c = Context()
    x = c.bv_symbol("x", 8)
    y = c.bv_symbol("y", 8)
    values = {x: BitVecValue.from_signed(-7, 8), y: BitVecValue(2, 8)}
    assert eval_bv_expr(c, values, c.signed_div(x, y)).to_signed() == -3
    assert eval_bv_expr(c, values, c.signed_remainder(x, y)).to_signed() == -1
    assert eval_bv_expr(c, values, c.signed_mod(x, y)).to_signed() == 1
    assert eval_bv_expr(c, values, c.div(y, y)) == BitVecValue(1, 8)
    assert eval_bv_expr(c, values, c.concat(y, y)) == BitVecValue(0x0202, 16)
    assert eval_bv_expr(c, values, c.slice(x, 7, 4)) == BitVecValue(0xF, 4)
    assert eval_bv_expr(c, values, c.zero_extend(y, 4)) == BitVecValue(2, 12)
    assert eval_bv_expr(c, values, c.sign_extend(x, 8)).to_signed() == -7


def test_implies_and_array_ite_and_equal():
    c = Context()
    p = c.bv_symbol("p", 1)
    q = c.bv_symbol("q", 1)
    imp = c.implies(p, q)
    assert eval_bv_expr(c, {p: BitVecValue(1, 1), q: BitVecValue(0, 1)}, imp).is_false()
    assert eval_bv_expr(c, {p: BitVecValue(0, 1), q: BitVecValue(0, 1)}, imp).is_true()

    zeros = c.array_const(c.zero(4), 2)
    ones = c.array_const(c.ones(4), 2)
    choice = c.ite(p, ones, zeros)
    res = eval_expr(c, {p: BitVecValue(1, 1)}, choice)
    assert res.select(BitVecValue(3, 2)) == BitVecValue(15, 4)
    res = eval_expr(c, {p: BitVecValue(0, 1)}, choice)
    assert res.select(BitVecValue(3, 2)) == BitVecValue(0, 4)
    assert eval_bv_expr(c, {}, c.equal(zeros, zeros)).is_true()
    assert eval_bv_expr(c, {}, c.equal(zeros, ones)).is_false()


def test_wrong_kind_raises():
    c = Context()
    arr = c.array_const(c.zero(4), 2)
    with pytest.raises(EvalError):
        eval_bv_expr(c, {}, arr)
    with pytest.raises(EvalError):
        eval_array_expr(c, {}, c.zero(4))