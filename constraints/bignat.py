"""Arbitrary-precision naturals inside a constraint system.

A BigNat is a little-endian vector of limbs, each a linear combination with a
known integer value. Limbs of freshly allocated numbers are range checked to
limb_width bits; sums and polynomial products are left unnormalized and carry
static bounds (BigNatParams) instead.

Multiplication is checked in two steps:
    1. A(t) * B(t) = C(t) at deg + 1 points pins down the coefficient vector C
       of the product polynomial (coefficients never wrap the field).
    2. equal_when_carried() compares two coefficient vectors as integers by
       propagating range-checked signed carries from the lowest limb up.

Reductions (mult_mod, coprimality) allocate quotient and remainder as normal
BigNats and check a*b = q*n + r this way. Remainders are not forced below the
modulus; every relation built on them (equality with 1, coprimality) holds
for any representative.
"""

from dataclasses import dataclass, replace
from typing import List, Sequence

from primitives.convert import limbs_to_nat, nat_to_limbs
from primitives.field import BN254_PRIME, FIELD_BITS
from constraints.num import Num, alloc_bit
from constraints.system import (
    ConstraintSystem,
    LinearCombination,
    SynthesisError,
    weighted_sum,
)


def limbs_for(bits: int, limb_width: int) -> int:
    """Limbs needed to hold a `bits`-bit natural (at least one)."""
    return max(1, -(-bits // limb_width))


@dataclass(frozen=True)
class BigNatParams:
    """Static bounds of a BigNat.

    Attributes:
        limb_width: Bits per normalized limb
        n_limbs: Number of limbs
        max_word: Upper bound on every limb value
        max_value: Upper bound on the represented natural
        min_bits: Lower bound on the bit length of the represented natural
    """
    limb_width: int
    n_limbs: int
    max_word: int
    max_value: int
    min_bits: int = 0


class BigNat:
    """A natural number as limbs in a constraint system."""

    def __init__(self, limbs: List[LinearCombination], limb_values: List[int], params: BigNatParams):
        if not len(limbs) == len(limb_values) == params.n_limbs:
            raise ValueError(
                f"limb count mismatch: {len(limbs)} limbs, {len(limb_values)} values, "
                f"params say {params.n_limbs}"
            )
        self.limbs = limbs
        self.limb_values = limb_values
        self.params = params

    @property
    def value(self) -> int:
        return limbs_to_nat(self.limb_values, self.params.limb_width)

    @property
    def limb_width(self) -> int:
        return self.params.limb_width

    def __repr__(self) -> str:
        return f"BigNat(value={self.value}, params={self.params})"

    # --- Construction ---

    @classmethod
    def alloc_from_nat(
        cls,
        cs: ConstraintSystem,
        value: int,
        limb_width: int,
        n_limbs: int,
        name: str = "bignat",
    ) -> "BigNat":
        """Allocate `value` as n_limbs range-checked limbs."""
        try:
            values = nat_to_limbs(value, limb_width, n_limbs)
        except ValueError as e:
            raise SynthesisError(f"{name}: {e}") from e
        limbs = []
        with cs.namespace(name):
            for i, v in enumerate(values):
                limb = cs.alloc(v, f"limb {i}")
                cs.enforce_range(limb, limb_width, f"limb {i} range")
                limbs.append(limb)
        params = BigNatParams(
            limb_width=limb_width,
            n_limbs=n_limbs,
            max_word=(1 << limb_width) - 1,
            max_value=(1 << (limb_width * n_limbs)) - 1,
        )
        return cls(limbs, values, params)

    @classmethod
    def constant(cls, value: int, limb_width: int) -> "BigNat":
        n_limbs = limbs_for(value.bit_length(), limb_width)
        values = nat_to_limbs(value, limb_width, n_limbs)
        params = BigNatParams(
            limb_width=limb_width,
            n_limbs=n_limbs,
            max_word=max(values),
            max_value=value,
            min_bits=value.bit_length(),
        )
        return cls([LinearCombination.constant(v) for v in values], values, params)

    @classmethod
    def one(cls, limb_width: int) -> "BigNat":
        return cls.constant(1, limb_width)

    @classmethod
    def from_num(cls, num: Num, limb_width: int, max_value: int) -> "BigNat":
        """Single-limb BigNat from a field value known to be at most max_value."""
        if max_value >= BN254_PRIME:
            raise ValueError("a single-limb BigNat must stay below the field modulus")
        params = BigNatParams(limb_width=limb_width, n_limbs=1, max_word=max_value, max_value=max_value)
        return cls([num.lc], [num.value], params)

    @classmethod
    def from_bits(cls, bits: Sequence[Num], limb_width: int, min_bits: int = 0) -> "BigNat":
        """Pack little-endian booleans (or constant 0/1 Nums) into limbs."""
        n_limbs = limbs_for(len(bits), limb_width)
        limbs, values = [], []
        for j in range(n_limbs):
            chunk = bits[j * limb_width:(j + 1) * limb_width]
            limbs.append(weighted_sum((b.lc, 1 << i) for i, b in enumerate(chunk)))
            values.append(sum(b.value << i for i, b in enumerate(chunk)))
        params = BigNatParams(
            limb_width=limb_width,
            n_limbs=n_limbs,
            max_word=(1 << min(limb_width, len(bits))) - 1,
            max_value=(1 << len(bits)) - 1,
            min_bits=min_bits,
        )
        return cls(limbs, values, params)

    # --- Linear operations (no constraints) ---

    def _padded(self, n: int):
        zero = LinearCombination.zero()
        limbs = self.limbs + [zero] * (n - self.params.n_limbs)
        values = self.limb_values + [0] * (n - self.params.n_limbs)
        return limbs, values

    def add(self, other: "BigNat") -> "BigNat":
        self._check_width(other)
        n = max(self.params.n_limbs, other.params.n_limbs)
        a_limbs, a_values = self._padded(n)
        b_limbs, b_values = other._padded(n)
        params = BigNatParams(
            limb_width=self.limb_width,
            n_limbs=n,
            max_word=self.params.max_word + other.params.max_word,
            max_value=self.params.max_value + other.params.max_value,
            min_bits=max(self.params.min_bits, other.params.min_bits),
        )
        return BigNat(
            [x + y for x, y in zip(a_limbs, b_limbs)],
            [x + y for x, y in zip(a_values, b_values)],
            params,
        )

    def shift(self, constant: int = 1) -> "BigNat":
        """Add a small constant to the lowest limb."""
        limbs = [self.limbs[0] + constant] + self.limbs[1:]
        values = [self.limb_values[0] + constant] + self.limb_values[1:]
        params = replace(
            self.params,
            max_word=self.params.max_word + constant,
            max_value=self.params.max_value + constant,
        )
        return BigNat(limbs, values, params)

    def as_num(self) -> Num:
        """The whole value as one field element; only for values below r."""
        if self.params.max_value >= BN254_PRIME:
            raise SynthesisError("value may exceed the field modulus")
        w = self.limb_width
        lc = weighted_sum((limb, 1 << (w * j)) for j, limb in enumerate(self.limbs))
        return Num(lc, self.value)

    def _check_width(self, other: "BigNat") -> None:
        if self.limb_width != other.limb_width:
            raise ValueError(f"limb width mismatch: {self.limb_width} vs {other.limb_width}")

    # --- Constrained operations ---

    def _poly_product(self, cs: ConstraintSystem, other: "BigNat", name: str) -> "BigNat":
        """Allocate the coefficients of the limb-polynomial product."""
        self._check_width(other)
        na, nb = self.params.n_limbs, other.params.n_limbs
        n_out = na + nb - 1
        values = [0] * n_out
        for i, x in enumerate(self.limb_values):
            for j, y in enumerate(other.limb_values):
                values[i + j] += x * y
        with cs.namespace(name):
            coeffs = [cs.alloc(v, f"coeff {k}") for k, v in enumerate(values)]
            for t in range(n_out):
                powers = [pow(t, k, BN254_PRIME) for k in range(n_out)]
                a_t = weighted_sum(zip(self.limbs, powers))
                b_t = weighted_sum(zip(other.limbs, powers))
                c_t = weighted_sum(zip(coeffs, powers))
                cs.enforce(a_t, b_t, c_t, f"product at {t}")
        a_min, b_min = self.params.min_bits, other.params.min_bits
        params = BigNatParams(
            limb_width=self.limb_width,
            n_limbs=n_out,
            max_word=min(na, nb) * self.params.max_word * other.params.max_word,
            max_value=self.params.max_value * other.params.max_value,
            min_bits=a_min + b_min - 1 if a_min and b_min else 0,
        )
        return BigNat(coeffs, values, params)

    def equal_when_carried(self, cs: ConstraintSystem, other: "BigNat", name: str = "carry") -> None:
        """Constrain self and other to represent the same natural."""
        self._check_width(other)
        w = self.limb_width
        n = max(self.params.n_limbs, other.params.n_limbs)
        max_word = max(self.params.max_word, other.params.max_word)
        carry_bits = max(max_word.bit_length() - w + 1, 1)
        if max_word.bit_length() + 2 >= FIELD_BITS - 1:
            raise SynthesisError(f"{name}: limbs of {max_word.bit_length()} bits would wrap the field")
        offset = 1 << carry_bits
        a_limbs, a_values = self._padded(n)
        b_limbs, b_values = other._padded(n)

        with cs.namespace(name):
            carry = LinearCombination.zero()
            carry_value = 0
            for i in range(n):
                diff = a_limbs[i] - b_limbs[i] + carry
                diff_value = a_values[i] - b_values[i] + carry_value
                if i == n - 1:
                    cs.enforce_zero(diff, "top limb")
                    break
                carry_value = diff_value >> w
                carry = cs.alloc(carry_value, f"carry {i}")
                cs.enforce_zero(diff - carry * (1 << w), f"limb {i}")
                cs.enforce_range(carry + offset, carry_bits + 1, f"carry {i} range")

    def equal(self, cs: ConstraintSystem, other: "BigNat", name: str = "equal") -> None:
        self.equal_when_carried(cs, other, name)

    def is_equal(self, cs: ConstraintSystem, other: "BigNat", name: str = "is equal") -> Num:
        """Boolean [self == other] for values below the field modulus."""
        return (self.as_num() - other.as_num()).is_zero(cs, name)

    def mult(self, cs: ConstraintSystem, other: "BigNat", name: str = "mult") -> "BigNat":
        """Normalized product self * other."""
        with cs.namespace(name):
            coeffs = self._poly_product(cs, other, "coeffs")
            n_limbs = limbs_for(coeffs.params.max_value.bit_length(), self.limb_width)
            product = BigNat.alloc_from_nat(cs, self.value * other.value, self.limb_width, n_limbs, "product")
            product.equal_when_carried(cs, coeffs)
        params = replace(product.params, max_value=coeffs.params.max_value, min_bits=coeffs.params.min_bits)
        return BigNat(product.limbs, product.limb_values, params)

    def sub(self, cs: ConstraintSystem, other: "BigNat", name: str = "sub") -> "BigNat":
        """self - other, which must be non-negative."""
        diff_value = max(self.value - other.value, 0)
        with cs.namespace(name):
            n_limbs = limbs_for(self.params.max_value.bit_length(), self.limb_width)
            diff = BigNat.alloc_from_nat(cs, diff_value, self.limb_width, n_limbs, "diff")
            self.equal_when_carried(cs, diff.add(other))
        return BigNat(diff.limbs, diff.limb_values, replace(diff.params, max_value=self.params.max_value))

    def _quotient_bound(self, product: "BigNat", modulus: "BigNat") -> int:
        # Without a known bit length, only n >= 1 bounds the quotient
        min_bits = max(modulus.params.min_bits, 1)
        q_max = product.params.max_value >> (min_bits - 1)
        return limbs_for(q_max.bit_length(), self.limb_width)

    def mult_mod(self, cs: ConstraintSystem, other: "BigNat", modulus: "BigNat", name: str = "mult mod") -> "BigNat":
        """self * other mod modulus."""
        w = self.limb_width
        n = modulus.value
        with cs.namespace(name):
            ab = self._poly_product(cs, other, "a*b")
            q_value, r_value = divmod(self.value * other.value, n) if n else (0, 0)
            quotient = BigNat.alloc_from_nat(cs, q_value, w, self._quotient_bound(ab, modulus), "quotient")
            r_limbs = limbs_for(modulus.params.max_value.bit_length(), w)
            remainder = BigNat.alloc_from_nat(cs, r_value, w, r_limbs, "remainder")
            qn = quotient._poly_product(cs, modulus, "q*n")
            ab.equal_when_carried(cs, qn.add(remainder))
        return remainder

    def select(self, cs: ConstraintSystem, bit: Num, other: "BigNat", name: str = "select") -> "BigNat":
        """bit ? self : other, limb by limb."""
        self._check_width(other)
        n = max(self.params.n_limbs, other.params.n_limbs)
        x_limbs, x_values = self._padded(n)
        y_limbs, y_values = other._padded(n)
        limbs, values = [], []
        with cs.namespace(name):
            for j in range(n):
                t = cs.alloc(bit.value * (x_values[j] - y_values[j]), f"limb {j}")
                cs.enforce(bit.lc, x_limbs[j] - y_limbs[j], t, f"limb {j}")
                limbs.append(y_limbs[j] + t)
                values.append(x_values[j] if bit.value else y_values[j])
        params = BigNatParams(
            limb_width=self.limb_width,
            n_limbs=n,
            max_word=max(self.params.max_word, other.params.max_word),
            max_value=max(self.params.max_value, other.params.max_value),
            min_bits=min(self.params.min_bits, other.params.min_bits),
        )
        return BigNat(limbs, values, params)

    def decompose_bits(self, cs: ConstraintSystem, name: str = "bits") -> List[Num]:
        """Little-endian booleans of the value, as many as max_value needs."""
        n_bits = self.params.max_value.bit_length()
        value = self.value
        with cs.namespace(name):
            bits = [alloc_bit(cs, (value >> i) & 1, f"bit {i}") for i in range(n_bits)]
            BigNat.from_bits(bits, self.limb_width).equal_when_carried(cs, self, "packing")
        return bits

    def pow_mod_bits(self, cs: ConstraintSystem, bits: Sequence[Num], modulus: "BigNat", name: str = "pow mod") -> "BigNat":
        """self ^ (little-endian exponent bits) mod modulus by square-and-multiply."""
        one = BigNat.one(self.limb_width)
        result = None
        power = self
        with cs.namespace(name):
            for i, bit in enumerate(bits):
                with cs.namespace(f"bit {i}"):
                    selected = power.select(cs, bit, one)
                    if result is None:
                        result = selected
                    else:
                        result = result.mult_mod(cs, selected, modulus, "accumulate")
                    if i + 1 < len(bits):
                        power = power.mult_mod(cs, power, modulus, "square")
            if result is None:
                result = one
            if len(bits) <= 1:
                result = result.mult_mod(cs, one, modulus, "reduce")
        return result

    def pow_mod(self, cs: ConstraintSystem, exponent: "BigNat", modulus: "BigNat", name: str = "pow mod") -> "BigNat":
        """self ^ exponent mod modulus."""
        with cs.namespace(name):
            bits = exponent.decompose_bits(cs, "exponent")
            return self.pow_mod_bits(cs, bits, modulus, "ladder")

    def enforce_coprime(self, cs: ConstraintSystem, modulus: "BigNat", name: str = "coprime") -> None:
        """Constrain gcd(self, modulus) == 1 by exhibiting an inverse."""
        w = self.limb_width
        a, n = self.value, modulus.value
        try:
            x_value = pow(a, -1, n)
        except ValueError:
            # No inverse: leave a witness that fails the constraint below
            x_value = 0
        with cs.namespace(name):
            x_limbs = limbs_for(modulus.params.max_value.bit_length(), w)
            inverse = BigNat.alloc_from_nat(cs, x_value, w, x_limbs, "inverse")
            ax = self._poly_product(cs, inverse, "a*x")
            q_value = max(a * x_value - 1, 0) // n if n else 0
            quotient = BigNat.alloc_from_nat(cs, q_value, w, self._quotient_bound(ax, modulus), "quotient")
            qn = quotient._poly_product(cs, modulus, "q*n")
            ax.equal_when_carried(cs, qn.shift(1), "a*x = q*n + 1")
