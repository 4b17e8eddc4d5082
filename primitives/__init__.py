"""Primitives - Native field arithmetic, hashes and the entropy stream."""

from primitives.field import (
    BN254_PRIME,
    FF,
    FIELD_BITS,
)
from primitives.convert import (
    f_to_nat,
    nat_to_f,
    usize_to_f,
    low_k_bits,
    nat_to_bits_le,
    bits_le_to_nat,
    nat_to_limbs,
    limbs_to_nat,
)
from primitives.entropy import (
    BITS_PER_BLOCK,
    SEED_TEMPLATE,
    EntropySource,
    NatTemplate,
    extension_template,
)
from primitives.miller_rabin import (
    miller_rabin,
    miller_rabin_32b,
)

__all__ = [
    # Field
    "BN254_PRIME",
    "FF",
    "FIELD_BITS",
    # Conversions
    "f_to_nat",
    "nat_to_f",
    "usize_to_f",
    "low_k_bits",
    "nat_to_bits_le",
    "bits_le_to_nat",
    "nat_to_limbs",
    "limbs_to_nat",
    # Entropy
    "BITS_PER_BLOCK",
    "SEED_TEMPLATE",
    "EntropySource",
    "NatTemplate",
    "extension_template",
    # Primality
    "miller_rabin",
    "miller_rabin_32b",
]
