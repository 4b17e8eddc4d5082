"""Field-valued circuit values and boolean helpers.

A Num pairs a linear combination with its witness value. Linear operations
(+, -, scalar *) are free; everything else allocates and constrains.
"""

from typing import List, Sequence, Union

from primitives.convert import low_k_bits, nat_to_bits_le
from primitives.field import BN254_PRIME, FIELD_BITS, inv
from constraints.system import ONE, ConstraintSystem, LinearCombination

# Split point used by the canonical-decomposition check
_SPLIT = 128


class Num:
    """A field element in a circuit: linear combination plus value."""

    __slots__ = ("lc", "value")

    def __init__(self, lc: LinearCombination, value: int):
        self.lc = lc
        self.value = value % BN254_PRIME

    @classmethod
    def alloc(cls, cs: ConstraintSystem, value: int, name: str = "num") -> "Num":
        return cls(cs.alloc(value, name), value)

    @classmethod
    def constant(cls, value: int) -> "Num":
        return cls(LinearCombination.constant(value), value)

    def __add__(self, other: Union["Num", int]) -> "Num":
        other = _as_num(other)
        return Num(self.lc + other.lc, self.value + other.value)

    __radd__ = __add__

    def __sub__(self, other: Union["Num", int]) -> "Num":
        other = _as_num(other)
        return Num(self.lc - other.lc, self.value - other.value)

    def __rsub__(self, other: Union["Num", int]) -> "Num":
        return _as_num(other) - self

    def __neg__(self) -> "Num":
        return Num(-self.lc, -self.value)

    def __mul__(self, scalar: int) -> "Num":
        return Num(self.lc * scalar, self.value * scalar)

    __rmul__ = __mul__

    def mul(self, cs: ConstraintSystem, other: "Num", name: str = "mul") -> "Num":
        """Allocate self * other."""
        product = Num.alloc(cs, self.value * other.value, name)
        cs.enforce(self.lc, other.lc, product.lc, name)
        return product

    def square(self, cs: ConstraintSystem, name: str = "square") -> "Num":
        return self.mul(cs, self, name)

    def is_zero(self, cs: ConstraintSystem, name: str = "is zero") -> "Num":
        """Boolean that is 1 iff self == 0.

        x * inv = 1 - eq and x * eq = 0 force eq = [x == 0].
        """
        with cs.namespace(name):
            inverse = Num.alloc(cs, inv(self.value) if self.value else 0, "inverse")
            eq = Num.alloc(cs, 0 if self.value else 1, "eq")
            cs.enforce(self.lc, inverse.lc, ONE - eq.lc, "x * inv = 1 - eq")
            cs.enforce(self.lc, eq.lc, 0, "x * eq = 0")
        return eq

    def into_bits_le_strict(self, cs: ConstraintSystem, name: str = "bits") -> List["Num"]:
        """Decompose into FIELD_BITS booleans whose integer value is < r.

        The canonical check splits the bits at _SPLIT and compares the halves
        against those of r - 1.
        """
        with cs.namespace(name):
            bits = [
                alloc_bit(cs, b, f"bit {i}")
                for i, b in enumerate(nat_to_bits_le(self.value, FIELD_BITS))
            ]
            lo = pack_bits(bits[:_SPLIT])
            hi = pack_bits(bits[_SPLIT:])
            cs.enforce_zero(lo.lc + hi.lc * (1 << _SPLIT) - self.lc, "packing")

            max_lo = low_k_bits(BN254_PRIME - 1, _SPLIT)
            max_hi = (BN254_PRIME - 1) >> _SPLIT
            hi_gap = Num.constant(max_hi) - hi
            cs.enforce_range(hi_gap.lc, FIELD_BITS - _SPLIT, "hi <= max hi")
            hi_is_max = hi_gap.is_zero(cs, "hi is max")
            lo_gap = hi_is_max.mul(cs, Num.constant(max_lo) - lo, "lo gap")
            cs.enforce_range(lo_gap.lc, _SPLIT, "lo <= max lo when hi is max")
        return bits

    def low_k_bits(self, cs: ConstraintSystem, k: int, name: str = "low bits") -> "Num":
        """The integer formed by the k least significant bits of self."""
        if k > FIELD_BITS:
            raise ValueError(f"cannot take {k} bits of a {FIELD_BITS}-bit field element")
        bits = self.into_bits_le_strict(cs, name)
        return pack_bits(bits[:k])

    def __repr__(self) -> str:
        return f"Num(value={self.value})"


def _as_num(x: Union[Num, int]) -> Num:
    return x if isinstance(x, Num) else Num.constant(x)


# --- Booleans ---

def alloc_bit(cs: ConstraintSystem, value: int, name: str = "bit") -> Num:
    """Allocate a value constrained to {0, 1}."""
    if value not in (0, 1):
        raise ValueError(f"bit witness must be 0 or 1, got {value}")
    bit = Num.alloc(cs, value, name)
    cs.enforce(bit.lc, ONE - bit.lc, 0, f"{name} boolean")
    return bit


def pack_bits(bits: Sequence[Num]) -> Num:
    """Little-endian weighted sum of booleans (no constraints)."""
    acc = Num.constant(0)
    for i, bit in enumerate(bits):
        acc = acc + bit * (1 << i)
    return acc


def and_(cs: ConstraintSystem, a: Num, b: Num, name: str = "and") -> Num:
    """Conjunction of two booleans."""
    return a.mul(cs, b, name)


def enforce_equal(cs: ConstraintSystem, a: Num, b: Union[Num, int], name: str = "equal") -> None:
    cs.enforce_zero((a - b).lc, name)
