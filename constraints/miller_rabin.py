"""Miller-Rabin gadget for 32-bit numbers congruent to 3 mod 4.

For such n, n - 1 = 2 * d with d = n >> 1, so every base needs exactly one
exponentiation and the circuit shape does not depend on n. The congruence
itself is enforced.
"""

from primitives.miller_rabin import BASES_32B
from constraints.bignat import BigNat
from constraints.num import Num, and_, enforce_equal
from constraints.system import ConstraintSystem, SynthesisError


def miller_rabin_32b(cs: ConstraintSystem, n: BigNat, name: str = "miller rabin") -> Num:
    """Boolean that is 1 iff n passes Miller-Rabin for bases 2, 7 and 61."""
    if n.params.max_value >= 1 << 32:
        raise SynthesisError(f"{name}: expected a 32-bit number")
    with cs.namespace(name):
        bits = n.decompose_bits(cs, "bits")
        enforce_equal(cs, bits[0], 1, "n odd")
        enforce_equal(cs, bits[1], 1, "n = 3 mod 4")
        d_bits = bits[1:]
        passes_all = None
        for a in BASES_32B:
            with cs.namespace(f"base {a}"):
                x = BigNat.constant(a, n.limb_width).pow_mod_bits(cs, d_bits, n, "a^d")
                is_one = x.is_equal(cs, BigNat.one(n.limb_width), "a^d == 1")
                is_minus_one = x.shift(1).is_equal(cs, n, "a^d == n - 1")
                passes = is_one + is_minus_one
            passes_all = passes if passes_all is None else and_(cs, passes_all, passes, f"and {a}")
    return passes_all
