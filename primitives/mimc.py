"""MiMC-7 permutation over BN254, used to mix extension nonces.

x -> (x + c_i)^7 for MIMC_ROUNDS rounds. 7 does not divide r - 1, so each
round (and therefore the whole map) is a bijection on the field.
"""

from primitives.field import BN254_PRIME
from primitives.constants import MIMC_RC


def _pow7(x: int) -> int:
    x2 = (x * x) % BN254_PRIME
    x4 = (x2 * x2) % BN254_PRIME
    x6 = (x4 * x2) % BN254_PRIME
    return (x6 * x) % BN254_PRIME


def permutation(x: int) -> int:
    """Apply the MiMC-7 permutation to a field element."""
    x = int(x) % BN254_PRIME
    for c in MIMC_RC:
        x = _pow7((x + c) % BN254_PRIME)
    return x
