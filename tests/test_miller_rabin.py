"""Tests for native Miller-Rabin and the 32-bit gadget."""

import pytest

from primitives.miller_rabin import miller_rabin, miller_rabin_32b
from constraints.bignat import BigNat
from constraints.miller_rabin import miller_rabin_32b as miller_rabin_32b_gadget
from constraints.system import ConstraintSystem, SynthesisError

# 2^32 - 5, the largest 32-bit prime (3 mod 4)
LARGEST_32B_PRIME = 4294967291


class TestMillerRabin:
    """Tests for the native tests."""

    @pytest.mark.parametrize("n", [2, 3, 5, 97, 7919, 2 ** 61 - 1, 2 ** 127 - 1])
    def test_primes(self, n: int) -> None:
        """Primes pass."""
        assert miller_rabin(n, 20)

    @pytest.mark.parametrize("n", [0, 1, 4, 561, 1105, 3215031751, (2 ** 61 - 1) * (2 ** 31 - 1)])
    def test_composites(self, n: int) -> None:
        """Composites, including Carmichael numbers and strong pseudoprimes, fail."""
        assert not miller_rabin(n, 20)

    def test_rounds_validated(self) -> None:
        """At least one round and no more than the base table."""
        with pytest.raises(ValueError):
            miller_rabin(7, 0)

    def test_32b_agrees_with_multi_round(self) -> None:
        """The three-base test agrees with 20 rounds on a window of 32-bit numbers."""
        for n in range(LARGEST_32B_PRIME - 2000, LARGEST_32B_PRIME + 1):
            assert miller_rabin_32b(n) == miller_rabin(n, 20)

    def test_32b_strong_pseudoprime(self) -> None:
        """3215031751 fools bases 2, 3, 5 and 7 but not 2, 7, 61."""
        assert not miller_rabin_32b(3215031751)

    def test_32b_rejects_wide(self) -> None:
        """Only 32-bit inputs are accepted."""
        with pytest.raises(ValueError):
            miller_rabin_32b(1 << 32)


class TestMillerRabinGadget:
    """Tests for the in-circuit 32-bit test."""

    @pytest.mark.parametrize("n,expected", [
        (LARGEST_32B_PRIME, 1),
        (2147483659, 1),
        (4294967295, 0),
        (3215031751, 0),
    ])
    def test_matches_native(self, n: int, expected: int) -> None:
        """Gadget output equals the native test for n = 3 mod 4."""
        assert n % 4 == 3
        assert miller_rabin_32b(n) == bool(expected)
        cs = ConstraintSystem()
        out = miller_rabin_32b_gadget(cs, BigNat.alloc_from_nat(cs, n, 32, 1, "n"))
        assert out.value == expected
        assert cs.is_satisfied()

    def test_narrow_limbs(self) -> None:
        """The gadget works with 16-bit limbs."""
        cs = ConstraintSystem()
        out = miller_rabin_32b_gadget(cs, BigNat.alloc_from_nat(cs, LARGEST_32B_PRIME, 16, 2, "n"))
        assert out.value == 1
        assert cs.is_satisfied()

    def test_one_mod_four_rejected(self) -> None:
        """n = 1 mod 4 leaves the circuit unsatisfied."""
        cs = ConstraintSystem()
        miller_rabin_32b_gadget(cs, BigNat.alloc_from_nat(cs, 4294967293, 32, 1, "n"))
        assert "3 mod 4" in cs.which_is_unsatisfied()

    def test_wide_input_rejected(self) -> None:
        """Inputs that may exceed 32 bits cannot be synthesized."""
        cs = ConstraintSystem()
        with pytest.raises(SynthesisError):
            miller_rabin_32b_gadget(cs, BigNat.alloc_from_nat(cs, 5, 32, 2, "n"))
