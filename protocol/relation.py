"""The Pocklington extension relation.

Given a prime p, an extension r and the candidate N = p * r + 1 (with r < p),
N is prime if some base a satisfies

    part = a^r mod N
    part^p == 1 (mod N)
    gcd(part - 1, N) == 1

The prover evaluates this with NativeContext to search for nonces and bases;
the verifier evaluates the same functions with CircuitContext, which turns
each check into constraints, so a certificate found by the prover satisfies
the circuit.

Example:
    ctx = NativeContext()
    extension, candidate = extend(ctx, prior, random, mask)
    verdict = check(ctx, prior, extension, candidate, base=2)
"""

from enum import Enum
from typing import Any, Tuple

from primitives import mimc
from primitives.convert import low_k_bits
from constraints.base import ArithmeticContext


class StepVerdict(Enum):
    """Outcome of checking one (candidate, base) pair."""
    VALID = "valid"
    # part^p != 1: the candidate is composite, no base will work
    FERMAT_FAILED = "fermat_failed"
    # part - 1 shares a factor with N: try the next base
    NOT_COPRIME = "not_coprime"


def nonce_mask(nonce: int, nonce_bits: int) -> int:
    """Low nonce_bits bits of the MiMC image of the nonce."""
    return low_k_bits(mimc.permutation(nonce), nonce_bits)


def extend(ctx: ArithmeticContext, prior: Any, random: Any, mask: Any) -> Tuple[Any, Any]:
    """Build (extension, candidate) = (random + mask, prior * extension + 1)."""
    extension = ctx.add(random, mask, "extension")
    candidate = ctx.mul_add_one(prior, extension, "candidate")
    return extension, candidate


def check(ctx: ArithmeticContext, prior: Any, extension: Any, candidate: Any, base: Any) -> StepVerdict:
    """Pocklington check of candidate = prior * extension + 1 with the given base."""
    part = ctx.pow_mod(base, extension, candidate, "a^r")
    fermat = ctx.pow_mod(part, prior, candidate, "a^rp")
    if not ctx.is_one(fermat, "a^rp == 1"):
        return StepVerdict.FERMAT_FAILED
    if not ctx.is_coprime(ctx.sub_one(part, "a^r - 1"), candidate, "gcd(a^r - 1, n) == 1"):
        return StepVerdict.NOT_COPRIME
    return StepVerdict.VALID
