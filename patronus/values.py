"""Fixed-width bit-vector values and sparse array values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple, Union


def _mask(width: int) -> int:
    return (1 << width) - 1


@dataclass(frozen=True)
class BitVecValue:
    """An unsigned bit-vector of a fixed width; arithmetic wraps around."""

    value: int
    width: int

    def __post_init__(self) -> None:
        if isinstance(self.width, bool) or not isinstance(self.width, int):
            raise TypeError(f"width must be an int, not {self.width!r}")
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"value must be an int, not {self.value!r}")
        if self.width < 1:
            raise ValueError(f"bit-vector width must be positive, not {self.width}")
        if not 0 <= self.value <= _mask(self.width):
            raise ValueError(f"{self.value} does not fit into {self.width} bits")

    # construction

    @classmethod
    def zero(cls, width: int) -> BitVecValue:
        return cls(0, width)

    @classmethod
    def ones(cls, width: int) -> BitVecValue:
        return cls(_mask(width), width)

    @classmethod
    def from_signed(cls, value: int, width: int) -> BitVecValue:
        """Creates a value from a signed integer using two's complement."""
        if width < 1:
            raise ValueError(f"bit-vector width must be positive, not {width}")
        low, high = -(1 << (width - 1)), (1 << (width - 1))
        if not low <= value < high:
            raise ValueError(f"{value} does not fit into {width} signed bits")
        return cls(value & _mask(width), width)

    @classmethod
    def from_bool(cls, value: bool) -> BitVecValue:
        return cls(1 if value else 0, 1)

    @classmethod
    def from_str_radix(cls, text: str, radix: int, width: int) -> BitVecValue:
        """Parses digits in the given radix; a leading '-' denotes a negative number."""
        digits = text[1:] if text.startswith("-") else text
        if not digits:
            raise ValueError(f"no digits in {text!r}")
        for char in digits:
            int(char, radix)  # raises ValueError on an invalid digit
        number = int(text, radix)
        if number < 0:
            return cls.from_signed(number, width)
        return cls(number, width)

    # conversion

    def to_signed(self) -> int:
        if self.value >> (self.width - 1):
            return self.value - (1 << self.width)
        return self.value

    def to_bool(self) -> bool:
        if self.width != 1:
            raise ValueError(f"a bv<{self.width}> is not a boolean")
        return self.value == 1

    def to_bit_str(self) -> str:
        return format(self.value, f"0{self.width}b")

    def to_hex_str(self) -> str:
        return format(self.value, "x")

    # predicates

    def is_zero(self) -> bool:
        return self.value == 0

    def is_one(self) -> bool:
        return self.value == 1

    def is_all_ones(self) -> bool:
        return self.value == _mask(self.width)

    def is_true(self) -> bool:
        return self.width == 1 and self.value == 1

    def is_false(self) -> bool:
        return self.width == 1 and self.value == 0

    def is_pow_2(self) -> Optional[int]:
        """Returns log2 of the value if it is a power of two."""
        if self.value and not self.value & (self.value - 1):
            return self.value.bit_length() - 1
        return None

    def bit_set_intervals(self) -> List[range]:
        """Returns the runs of consecutive one bits, starting from the least significant."""
        intervals: List[range] = []
        remaining, position = self.value, 0
        while remaining:
            zeros = (remaining & -remaining).bit_length() - 1
            remaining >>= zeros
            position += zeros
            ones = (remaining ^ (remaining + 1)).bit_length() - 1
            intervals.append(range(position, position + ones))
            remaining >>= ones
            position += ones
        return intervals

    # helpers

    def _same_width(self, other: BitVecValue) -> None:
        if self.width != other.width:
            raise ValueError(f"width mismatch: bv<{self.width}> and bv<{other.width}>")

    def _new(self, value: int) -> BitVecValue:
        return BitVecValue(value & _mask(self.width), self.width)

    def _msb(self) -> int:
        return self.value >> (self.width - 1)

    def _abs(self) -> BitVecValue:
        return self.negate() if self._msb() else self

    # bit-wise and arithmetic operations

    def not_(self) -> BitVecValue:
        return self._new(~self.value)

    def negate(self) -> BitVecValue:
        return self._new(-self.value)

    def and_(self, other: BitVecValue) -> BitVecValue:
        self._same_width(other)
        return self._new(self.value & other.value)

    def or_(self, other: BitVecValue) -> BitVecValue:
        self._same_width(other)
        return self._new(self.value | other.value)

    def xor(self, other: BitVecValue) -> BitVecValue:
        self._same_width(other)
        return self._new(self.value ^ other.value)

    def add(self, other: BitVecValue) -> BitVecValue:
        self._same_width(other)
        return self._new(self.value + other.value)

    def sub(self, other: BitVecValue) -> BitVecValue:
        self._same_width(other)
        return self._new(self.value - other.value)

    def mul(self, other: BitVecValue) -> BitVecValue:
        self._same_width(other)
        return self._new(self.value * other.value)

    def unsigned_div(self, other: BitVecValue) -> BitVecValue:
        """Unsigned division; dividing by zero yields all ones."""
        self._same_width(other)
        if other.value == 0:
            return BitVecValue.ones(self.width)
        return self._new(self.value // other.value)

    def unsigned_rem(self, other: BitVecValue) -> BitVecValue:
        """Unsigned remainder; the remainder of a division by zero is the dividend."""
        self._same_width(other)
        if other.value == 0:
            return self
        return self._new(self.value % other.value)

    def signed_div(self, other: BitVecValue) -> BitVecValue:
        """Signed division rounding towards zero."""
        self._same_width(other)
        quotient = self._abs().unsigned_div(other._abs())
        return quotient.negate() if self._msb() != other._msb() else quotient

    def signed_rem(self, other: BitVecValue) -> BitVecValue:
        """Signed remainder whose sign follows the dividend."""
        self._same_width(other)
        remainder = self._abs().unsigned_rem(other._abs())
        return remainder.negate() if self._msb() else remainder

    def signed_mod(self, other: BitVecValue) -> BitVecValue:
        """Signed modulus whose sign follows the divisor."""
        self._same_width(other)
        remainder = self._abs().unsigned_rem(other._abs())
        if remainder.is_zero():
            return remainder
        match (self._msb(), other._msb()):
            case (0, 0):
                return remainder
            case (1, 0):
                return remainder.negate().add(other)
            case (0, 1):
                return remainder.add(other)
            case _:
                return remainder.negate()

    def shift_left(self, other: BitVecValue) -> BitVecValue:
        self._same_width(other)
        if other.value >= self.width:
            return BitVecValue.zero(self.width)
        return self._new(self.value << other.value)

    def shift_right(self, other: BitVecValue) -> BitVecValue:
        self._same_width(other)
        if other.value >= self.width:
            return BitVecValue.zero(self.width)
        return self._new(self.value >> other.value)

    def arithmetic_shift_right(self, other: BitVecValue) -> BitVecValue:
        self._same_width(other)
        return self._new(self.to_signed() >> other.value)

    # width changing operations

    def concat(self, other: BitVecValue) -> BitVecValue:
        """Places `self` in the upper and `other` in the lower bits."""
        return BitVecValue((self.value << other.width) | other.value, self.width + other.width)

    def slice(self, hi: int, lo: int) -> BitVecValue:
        if not 0 <= lo <= hi < self.width:
            raise ValueError(f"invalid slice [{hi}:{lo}] of a bv<{self.width}>")
        return BitVecValue((self.value >> lo) & _mask(hi - lo + 1), hi - lo + 1)

    def zero_extend(self, by: int) -> BitVecValue:
        if by < 0:
            raise ValueError(f"cannot extend by {by} bits")
        return BitVecValue(self.value, self.width + by)

    def sign_extend(self, by: int) -> BitVecValue:
        if by < 0:
            raise ValueError(f"cannot extend by {by} bits")
        width = self.width + by
        return BitVecValue(self.to_signed() & _mask(width), width)

    # comparisons

    def is_greater(self, other: BitVecValue) -> bool:
        self._same_width(other)
        return self.value > other.value

    def is_greater_signed(self, other: BitVecValue) -> bool:
        self._same_width(other)
        return self.to_signed() > other.to_signed()

    def is_greater_or_equal(self, other: BitVecValue) -> bool:
        self._same_width(other)
        return self.value >= other.value

    def is_greater_or_equal_signed(self, other: BitVecValue) -> bool:
        self._same_width(other)
        return self.to_signed() >= other.to_signed()


class ArrayValue:
    """A mutable array of bit-vectors that stores only entries differing from a default."""

    __slots__ = ("index_width", "default", "_entries")

    def __init__(self, index_width: int, default: BitVecValue) -> None:
        if index_width < 1:
            raise ValueError(f"index width must be positive, not {index_width}")
        self.index_width = index_width
        self.default = default
        self._entries: Dict[int, BitVecValue] = {}

    @property
    def data_width(self) -> int:
        return self.default.width

    @property
    def num_elements(self) -> int:
        return 1 << self.index_width

    def _check_index(self, index: BitVecValue) -> None:
        if index.width != self.index_width:
            raise ValueError(
                f"index must be a bv<{self.index_width}>, not a bv<{index.width}>"
            )

    def select(self, index: BitVecValue) -> BitVecValue:
        self._check_index(index)
        return self._entries.get(index.value, self.default)

    def store(self, index: BitVecValue, data: BitVecValue) -> None:
        self._check_index(index)
        if data.width != self.data_width:
            raise ValueError(f"data must be a bv<{self.data_width}>, not a bv<{data.width}>")
        if data == self.default:
            self._entries.pop(index.value, None)
        else:
            self._entries[index.value] = data

    def non_default_entries(self) -> Iterator[Tuple[BitVecValue, BitVecValue]]:
        for key in sorted(self._entries):
            yield BitVecValue(key, self.index_width), self._entries[key]

    def is_equal(self, other: ArrayValue) -> bool:
        """Element-wise equality; arrays of different shapes are never equal."""
        if self.index_width != other.index_width or self.data_width != other.data_width:
            return False
        keys = self._entries.keys() | other._entries.keys()
        for key in keys:
            index = BitVecValue(key, self.index_width)
            if self.select(index) != other.select(index):
                return False
        return len(keys) == self.num_elements or self.default == other.default

    def copy(self) -> ArrayValue:
        out = ArrayValue(self.index_width, self.default)
        out._entries = dict(self._entries)
        return out

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArrayValue):
            return NotImplemented
        return self.is_equal(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        entries = ", ".join(f"{k}: {v.value}" for k, v in sorted(self._entries.items()))
        return (
            f"ArrayValue(bv<{self.index_width}> -> bv<{self.data_width}>, "
            f"default={self.default.value}, {{{entries}}})"
        )


Value = Union[BitVecValue, ArrayValue]