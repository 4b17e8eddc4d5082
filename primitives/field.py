"""BN254 scalar field GF(r).

Uses galois for the field type FF. FF is what callers hand to the hashers
(inputs, counters); the hot loops in hashing, MiMC and the constraint system
work on plain Python ints reduced mod BN254_PRIME.

The multiplicative generator is passed explicitly so galois does not have to
factor r - 1 at import time.
"""

import galois

# --- Field Construction ---

BN254_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617

FIELD_BITS = BN254_PRIME.bit_length()  # 254

FF = galois.GF(BN254_PRIME, primitive_element=7, verify=False)
"""Scalar field of BN254 (the field circuits are written over)."""


def inv(x: int) -> int:
    """Multiplicative inverse of an int mod BN254_PRIME.

    Raises ZeroDivisionError for multiples of r.
    """
    return int(FF(x % BN254_PRIME) ** -1)
