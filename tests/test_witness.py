import pytest

from patronus.values import ArrayValue, BitVecValue
from patronus.witness import ArrayInitValue, Witness, init_to_value


def test_bitvec_init_to_value():
    value = BitVecValue(5, 8)
    assert init_to_value(value) == value


def test_array_init_to_value():
    array = ArrayValue(2, BitVecValue.zero(4))
    array.store(BitVecValue(1, 2), BitVecValue(3, 4))
    indices = [BitVecValue(1, 2)]
    init = ArrayInitValue(array, indices)
    result = init_to_value(init)
    assert result is array
    assert init.indices == indices


def test_missing_init_value_raises():
    with pytest.raises(ValueError):
        init_to_value(None)


def test_invalid_init_value_raises():
    with pytest.raises(TypeError):
        init_to_value("not a value")


def test_witness_defaults_are_independent():
    w1 = Witness()
    w2 = Witness()
    w1.failed_safety.append(0)
    w1.init.append(BitVecValue(1, 1))
    assert w2.failed_safety == []
    assert w2.init == []
    assert w1.failed_safety == [0]


def test_witness_holds_trace():
    value = BitVecValue(2, 4)
    w = Witness(init=[value], init_names=["s"], inputs=[[value], [None]], input_names=["i"])
    assert len(w.inputs) == 2
    assert w.inputs[1] == [None]
    assert init_to_value(w.init[0]) == value
    assert w.init_names == ["s"]