"""Interning context that creates and owns bit-vector and array expressions.

The same expression always maps to the same reference, so two equal
references always point to equivalent expressions. References from
different contexts are not distinguished; mixing contexts is an error that
is not detected.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from patronus.nodes import (
    ArrayConstant,
    ArrayEqual,
    ArrayIte,
    ArrayStore,
    ArraySymbol,
    ArrayType,
    BVAdd,
    BVAnd,
    BVArithmeticShiftRight,
    BVArrayRead,
    BVConcat,
    BVEqual,
    BVGreater,
    BVGreaterEqual,
    BVGreaterEqualSigned,
    BVGreaterSigned,
    BVImplies,
    BVIte,
    BVLiteral,
    BVMul,
    BVNegate,
    BVNot,
    BVOr,
    BVShiftLeft,
    BVShiftRight,
    BVSignedDiv,
    BVSignedMod,
    BVSignedRem,
    BVSignExt,
    BVSlice,
    BVSub,
    BVSymbol,
    BVType,
    BVUnsignedDiv,
    BVUnsignedRem,
    BVXor,
    BVZeroExt,
    Expr,
    ExprRef,
    StringRef,
    Type,
    make_symbol,
)
from patronus.typecheck import TypeCheckError, get_bv_type, get_type
from patronus.values import ArrayValue, BitVecValue, Value


class Context:
    """Creates all expressions and interns them together with symbol names."""

    def __init__(self) -> None:
        self._strings: List[str] = []
        self._string_lookup: Dict[str, int] = {}
        self._exprs: List[Expr] = []
        self._expr_lookup: Dict[Expr, int] = {}
        self._false = self.zero(1)
        self._true = self.one(1)

    # interning

    def __getitem__(self, ref: Union[ExprRef, StringRef]) -> Union[Expr, str]:
        if isinstance(ref, ExprRef):
            table: list = self._exprs
        elif isinstance(ref, StringRef):
            table = self._strings
        else:
            raise TypeError(f"not a reference: {ref!r}")
        if ref.index >= len(table):
            raise KeyError(f"invalid reference {ref!r}")
        return table[ref.index]

    def string(self, value: str) -> StringRef:
        """Interns a string."""
        index = self._string_lookup.get(value)
        if index is None:
            index = len(self._strings)
            self._strings.append(value)
            self._string_lookup[value] = index
        return StringRef(index)

    def add_expr(self, expr: Expr) -> ExprRef:
        """Interns an expression node."""
        index = self._expr_lookup.get(expr)
        if index is None:
            index = len(self._exprs)
            self._exprs.append(expr)
            self._expr_lookup[expr] = index
        return ExprRef(index)

    def get_symbol_name(self, ref: ExprRef) -> Optional[str]:
        name = self[ref].symbol_name_ref()
        return None if name is None else self[name]

    def num_exprs(self) -> int:
        return len(self._exprs)

    def get_expr(self, ref: ExprRef) -> Expr:
        return self[ref]

    def expr_index(self, ref: ExprRef) -> int:
        return ref.index

    def bv_value(self, literal: Union[ExprRef, BVLiteral]) -> BitVecValue:
        """Returns the value of a bit-vector literal."""
        node = self[literal] if isinstance(literal, ExprRef) else literal
        if not isinstance(node, BVLiteral):
            raise TypeError(f"not a bit-vector literal: {node!r}")
        return node.value

    def get_type(self, ref: ExprRef) -> Type:
        return get_type(self, ref)

    def get_bv_type(self, ref: ExprRef) -> Optional[int]:
        return get_bv_type(self, ref)

    # checks

    def _bv_width(self, e: ExprRef, op: str) -> int:
        width = get_bv_type(self, e)
        if width is None:
            raise TypeCheckError(f"{op} only works on bit-vectors, not arrays.")
        return width

    def _same_width(self, a: ExprRef, b: ExprRef, op: str) -> int:
        a_width = self._bv_width(a, op)
        b_width = self._bv_width(b, op)
        if a_width != b_width:
            raise TypeCheckError(
                f"{op} requires two bit-vectors of the same width, not {a_width} and {b_width}"
            )
        return b_width

    def _expect_bool(self, e: ExprRef, op: str) -> None:
        if self._bv_width(e, op) != 1:
            raise TypeCheckError(f"{op} only works on bit-vectors of size 1.")

    # symbols and literals

    def bv_symbol(self, name: str, width: int) -> ExprRef:
        if width <= 0:
            raise ValueError("0-bit bitvectors are not allowed")
        return self.add_expr(BVSymbol(self.string(name), width))

    def array_symbol(self, name: str, index_width: int, data_width: int) -> ExprRef:
        if index_width <= 0 or data_width <= 0:
            raise ValueError("0-bit bitvectors are not allowed")
        return self.add_expr(ArraySymbol(self.string(name), index_width, data_width))

    def symbol(self, name: Union[StringRef, str], tpe: Type) -> ExprRef:
        if tpe == BVType(0):
            raise ValueError("0-bit bitvectors are not allowed")
        if isinstance(name, str):
            name = self.string(name)
        return self.add_expr(make_symbol(name, tpe))

    def lit(self, value: Value) -> ExprRef:
        """Creates a literal expression; arrays become a constant with stores on top."""
        if isinstance(value, BitVecValue):
            return self.bv_lit(value)
        if isinstance(value, ArrayValue):
            array = self.array_const(self.bv_lit(value.default), value.index_width)
            for index, data in value.non_default_entries():
                array = self.array_store(array, self.bv_lit(index), self.bv_lit(data))
            return array
        raise TypeError(f"not a value: {value!r}")

    def bv_lit(self, value: BitVecValue) -> ExprRef:
        return self.add_expr(BVLiteral(value))

    def bit_vec_val(self, value: int, width: int) -> ExprRef:
        if value < 0 or width < 0:
            raise ValueError("failed to convert value or width! Both must be positive!")
        return self.bv_lit(BitVecValue(value, width))

    def zero(self, width: int) -> ExprRef:
        return self.bv_lit(BitVecValue.zero(width))

    def zero_array(self, tpe: ArrayType) -> ExprRef:
        return self.array_const(self.zero(tpe.data_width), tpe.index_width)

    def get_true(self) -> ExprRef:
        return self._true

    def get_false(self) -> ExprRef:
        return self._false

    def one(self, width: int) -> ExprRef:
        return self.bv_lit(BitVecValue(1, width))

    def ones(self, width: int) -> ExprRef:
        return self.bv_lit(BitVecValue.ones(width))

    # operations

    def equal(self, a: ExprRef, b: ExprRef) -> ExprRef:
        a_tpe, b_tpe = get_type(self, a), get_type(self, b)
        if a_tpe != b_tpe:
            raise TypeCheckError(f"cannot compare {a_tpe} and {b_tpe}")
        if a_tpe.is_bit_vector():
            return self.add_expr(BVEqual(a, b))
        return self.add_expr(ArrayEqual(a, b))

    def ite(self, cond: ExprRef, tru: ExprRef, fals: ExprRef) -> ExprRef:
        self._expect_bool(cond, "ite condition")
        tru_tpe, fals_tpe = get_type(self, tru), get_type(self, fals)
        if tru_tpe != fals_tpe:
            raise TypeCheckError(f"ite branches differ: {tru_tpe} and {fals_tpe}")
        if tru_tpe.is_bit_vector():
            return self.add_expr(BVIte(cond, tru, fals))
        return self.add_expr(ArrayIte(cond, tru, fals))

    def implies(self, a: ExprRef, b: ExprRef) -> ExprRef:
        self._expect_bool(a, "implies")
        self._expect_bool(b, "implies")
        return self.add_expr(BVImplies(a, b))

    def greater_signed(self, a: ExprRef, b: ExprRef) -> ExprRef:
        width = self._same_width(a, b, "greater signed")
        return self.add_expr(BVGreaterSigned(a, b, width))

    def greater(self, a: ExprRef, b: ExprRef) -> ExprRef:
        self._same_width(a, b, "greater")
        return self.add_expr(BVGreater(a, b))

    def greater_or_equal_signed(self, a: ExprRef, b: ExprRef) -> ExprRef:
        width = self._same_width(a, b, "greater or equals signed")
        return self.add_expr(BVGreaterEqualSigned(a, b, width))

    def greater_or_equal(self, a: ExprRef, b: ExprRef) -> ExprRef:
        self._same_width(a, b, "greater or equals")
        return self.add_expr(BVGreaterEqual(a, b))

    def not_(self, e: ExprRef) -> ExprRef:
        return self.add_expr(BVNot(e, self._bv_width(e, "not")))

    def negate(self, e: ExprRef) -> ExprRef:
        return self.add_expr(BVNegate(e, self._bv_width(e, "negate")))

    def and_(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVAnd(a, b, self._same_width(a, b, "and")))

    def or_(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVOr(a, b, self._same_width(a, b, "or")))

    def xor(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVXor(a, b, self._same_width(a, b, "xor")))

    def shift_left(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVShiftLeft(a, b, self._same_width(a, b, "shift left")))

    def arithmetic_shift_right(self, a: ExprRef, b: ExprRef) -> ExprRef:
        width = self._same_width(a, b, "arithmetic shift right")
        return self.add_expr(BVArithmeticShiftRight(a, b, width))

    def shift_right(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVShiftRight(a, b, self._same_width(a, b, "shift right")))

    def add(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVAdd(a, b, self._same_width(a, b, "add")))

    def sub(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVSub(a, b, self._same_width(a, b, "subtraction")))

    def mul(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVMul(a, b, self._same_width(a, b, "mul")))

    def div(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVUnsignedDiv(a, b, self._same_width(a, b, "unsigned div")))

    def signed_div(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVSignedDiv(a, b, self._same_width(a, b, "signed div")))

    def signed_mod(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVSignedMod(a, b, self._same_width(a, b, "signed mod")))

    def signed_remainder(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVSignedRem(a, b, self._same_width(a, b, "signed rem")))

    def remainder(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.add_expr(BVUnsignedRem(a, b, self._same_width(a, b, "unsigned rem")))

    def concat(self, a: ExprRef, b: ExprRef) -> ExprRef:
        width = self._bv_width(a, "concat") + self._bv_width(b, "concat")
        return self.add_expr(BVConcat(a, b, width))

    def slice(self, e: ExprRef, hi: int, lo: int) -> ExprRef:
        if lo == 0 and hi + 1 == self._bv_width(e, "slicing"):
            return e
        if hi < lo:
            raise ValueError(f"{hi} < {lo} ... not allowed!")
        return self.add_expr(BVSlice(e, hi, lo))

    def zero_extend(self, e: ExprRef, by: int) -> ExprRef:
        if by == 0:
            return e
        width = self._bv_width(e, "zero extend") + by
        return self.add_expr(BVZeroExt(e, by, width))

    def sign_extend(self, e: ExprRef, by: int) -> ExprRef:
        if by == 0:
            return e
        width = self._bv_width(e, "sign extend") + by
        return self.add_expr(BVSignExt(e, by, width))

    def extend(self, e: ExprRef, by: int, signed: bool) -> ExprRef:
        """Sign or zero extends depending on `signed`."""
        return self.sign_extend(e, by) if signed else self.zero_extend(e, by)

    def array_store(self, array: ExprRef, index: ExprRef, data: ExprRef) -> ExprRef:
        return self.add_expr(ArrayStore(array, index, data))

    def array_const(self, e: ExprRef, index_width: int) -> ExprRef:
        data_width = self._bv_width(e, "array constant")
        return self.add_expr(ArrayConstant(e, index_width, data_width))

    def array_read(self, array: ExprRef, index: ExprRef) -> ExprRef:
        tpe = get_type(self, array)
        if not isinstance(tpe, ArrayType):
            raise TypeCheckError(f"the first argument to the read operation needs to be an array, not a {tpe}.")
        return self.add_expr(BVArrayRead(array, index, tpe.data_width))