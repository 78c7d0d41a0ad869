"""Builder that creates nested expressions in a context with short, chainable calls."""

from __future__ import annotations

from typing import Callable, TypeVar, Union

from patronus.context import Context
from patronus.nodes import ArrayType, ExprRef, StringRef, Type
from patronus.values import BitVecValue

R = TypeVar("R")


class Builder:
    """Creates expressions in the context it wraps."""

    def __init__(self, ctx: Context) -> None:
        self.ctx = ctx

    def bv_symbol(self, name: str, width: int) -> ExprRef:
        return self.ctx.bv_symbol(name, width)

    def symbol(self, name: Union[StringRef, str], tpe: Type) -> ExprRef:
        return self.ctx.symbol(name, tpe)

    def bv_lit(self, value: BitVecValue) -> ExprRef:
        return self.ctx.bv_lit(value)

    def bit_vec_val(self, value: int, width: int) -> ExprRef:
        return self.ctx.bit_vec_val(value, width)

    def zero(self, width: int) -> ExprRef:
        return self.ctx.zero(width)

    def get_true(self) -> ExprRef:
        return self.ctx.get_true()

    def get_false(self) -> ExprRef:
        return self.ctx.get_false()

    def zero_array(self, tpe: ArrayType) -> ExprRef:
        return self.ctx.zero_array(tpe)

    def one(self, width: int) -> ExprRef:
        return self.ctx.one(width)

    def ones(self, width: int) -> ExprRef:
        return self.ctx.ones(width)

    def equal(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.equal(a, b)

    def ite(self, cond: ExprRef, tru: ExprRef, fals: ExprRef) -> ExprRef:
        return self.ctx.ite(cond, tru, fals)

    def implies(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.implies(a, b)

    def greater_signed(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.greater_signed(a, b)

    def greater(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.greater(a, b)

    def greater_or_equal_signed(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.greater_or_equal_signed(a, b)

    def greater_or_equal(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.greater_or_equal(a, b)

    def not_(self, e: ExprRef) -> ExprRef:
        return self.ctx.not_(e)

    def negate(self, e: ExprRef) -> ExprRef:
        return self.ctx.negate(e)

    def and_(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.and_(a, b)

    def or_(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.or_(a, b)

    def xor(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.xor(a, b)

    def shift_left(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.shift_left(a, b)

    def arithmetic_shift_right(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.arithmetic_shift_right(a, b)

    def shift_right(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.shift_right(a, b)

    def add(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.add(a, b)

    def sub(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.sub(a, b)

    def mul(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.mul(a, b)

    def div(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.div(a, b)

    def signed_div(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.signed_div(a, b)

    def signed_mod(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.signed_mod(a, b)

    def signed_remainder(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.signed_remainder(a, b)

    def remainder(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.remainder(a, b)

    def concat(self, a: ExprRef, b: ExprRef) -> ExprRef:
        return self.ctx.concat(a, b)

    def slice(self, e: ExprRef, hi: int, lo: int) -> ExprRef:
        return self.ctx.slice(e, hi, lo)

    def zero_extend(self, e: ExprRef, by: int) -> ExprRef:
        return self.ctx.zero_extend(e, by)

    def sign_extend(self, e: ExprRef, by: int) -> ExprRef:
        return self.ctx.sign_extend(e, by)

    def extend(self, e: ExprRef, by: int, signed: bool) -> ExprRef:
        """Sign or zero extends depending on `signed`."""
        return self.ctx.extend(e, by, signed)

    def array_store(self, array: ExprRef, index: ExprRef, data: ExprRef) -> ExprRef:
        return self.ctx.array_store(array, index, data)

    def array_const(self, e: ExprRef, index_width: int) -> ExprRef:
        return self.ctx.array_const(e, index_width)

    def array_read(self, array: ExprRef, index: ExprRef) -> ExprRef:
        return self.ctx.array_read(array, index)


def build(ctx: Context, fn: Callable[[Builder], R]) -> R:
    """Calls `fn` with a builder for `ctx` and returns what it returns."""
    return fn(Builder(ctx))