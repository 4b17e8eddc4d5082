"""Width-explicit conversions between naturals, bits, limbs and field elements.

Every function here is pure and independent of the arithmetic backend, so the
native prover and the circuit builders derive bit patterns and limb layouts
from the same code.
"""

from typing import List, Sequence, Union

from primitives.field import BN254_PRIME, FF

FieldLike = Union[int, FF]


def f_to_nat(f: FieldLike) -> int:
    """Canonical integer representative of a field element."""
    return int(f) % BN254_PRIME


def nat_to_f(n: int) -> FF:
    """Reduce a natural number into the field."""
    if n < 0:
        raise ValueError(f"expected a natural number, got {n}")
    return FF(n % BN254_PRIME)


def usize_to_f(n: int) -> FF:
    """Embed a machine-size counter (nonce) into the field."""
    if n < 0 or n >= BN254_PRIME:
        raise ValueError(f"counter {n} does not fit in the field")
    return FF(n)


def low_k_bits(n: int, k: int) -> int:
    """The low `k` bits of `n`."""
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    return n & ((1 << k) - 1)


def nat_to_bits_le(n: int, n_bits: int) -> List[int]:
    """Little-endian bits of `n`, exactly `n_bits` long."""
    if n < 0 or n.bit_length() > n_bits:
        raise ValueError(f"{n} does not fit in {n_bits} bits")
    return [(n >> i) & 1 for i in range(n_bits)]


def bits_le_to_nat(bits: Sequence[int]) -> int:
    """Inverse of nat_to_bits_le."""
    acc = 0
    for i, b in enumerate(bits):
        if b not in (0, 1):
            raise ValueError(f"bit {i} is {b}, expected 0 or 1")
        acc |= b << i
    return acc


def nat_to_limbs(n: int, limb_width: int, n_limbs: int) -> List[int]:
    """Split `n` into `n_limbs` little-endian limbs of `limb_width` bits."""
    if n < 0 or n.bit_length() > limb_width * n_limbs:
        raise ValueError(f"{n} does not fit in {n_limbs} limbs of {limb_width} bits")
    mask = (1 << limb_width) - 1
    return [(n >> (limb_width * i)) & mask for i in range(n_limbs)]


def limbs_to_nat(limbs: Sequence[int], limb_width: int) -> int:
    """Recombine little-endian limbs. Limbs may exceed the limb width (unnormalized)."""
    acc = 0
    for limb in reversed(limbs):
        acc = (acc << limb_width) + limb
    return acc
