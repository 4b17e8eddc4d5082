"""Tests for the Pocklington relation under both arithmetic contexts."""

import pytest

from primitives import mimc
from constraints.base import CircuitContext, NativeContext
from constraints.bignat import BigNat
from constraints.system import ConstraintSystem
from protocol.relation import StepVerdict, check, extend, nonce_mask

# (prior, random, base, verdict): 11 * 2 + 1 = 23 is prime, 11 * 4 + 1 = 45 is not,
# and 22 = -1 mod 23 has 22^2 = 1, so part - 1 = 0.
CASES = [
    (11, 2, 2, StepVerdict.VALID),
    (11, 4, 2, StepVerdict.FERMAT_FAILED),
    (11, 2, 22, StepVerdict.NOT_COPRIME),
]


class TestNativeRelation:
    """Tests for the relation on Python ints."""

    def test_extend(self) -> None:
        """extend builds random + mask and prior * extension + 1."""
        assert extend(NativeContext(), 11, 2, 1) == (3, 34)

    @pytest.mark.parametrize("prior,random,base,verdict", CASES)
    def test_check(self, prior: int, random: int, base: int, verdict: StepVerdict) -> None:
        """Each failure mode is reported."""
        ctx = NativeContext()
        extension, candidate = extend(ctx, prior, random, 0)
        assert check(ctx, prior, extension, candidate, base) == verdict

    def test_nonce_mask(self) -> None:
        """The mask is the low bits of the MiMC image."""
        for nonce in range(8):
            assert nonce_mask(nonce, 10) == mimc.permutation(nonce) % 1024
        assert nonce_mask(5, 0) == 0


class TestCircuitRelation:
    """The same relation as constraints."""

    @pytest.mark.parametrize("prior,random,base,verdict", CASES)
    def test_check(self, prior: int, random: int, base: int, verdict: StepVerdict) -> None:
        """The circuit is satisfied exactly for valid steps."""
        cs = ConstraintSystem()
        ctx = CircuitContext(cs, limb_width=32)
        p = BigNat.alloc_from_nat(cs, prior, 32, 1, "prior")
        r = BigNat.alloc_from_nat(cs, random, 32, 1, "random")
        a = BigNat.alloc_from_nat(cs, base, 32, 1, "base")
        extension, candidate = extend(ctx, p, r, BigNat.constant(0, 32))
        assert candidate.value == prior * random + 1
        assert check(ctx, p, extension, candidate, a) == StepVerdict.VALID
        assert cs.is_satisfied() == (verdict == StepVerdict.VALID)
