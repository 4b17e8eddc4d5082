"""
Poseidon2 hash over the BN254 scalar field.

Width-3 permutation (rate 2, capacity 1) with S-box x^5, plus the sponge
used as the primary entropy source for prime derivation.

The circuit gadget in constraints/poseidon2.py follows this code round for
round; keep the two in lockstep.
"""

from typing import List, Sequence

from primitives.field import BN254_PRIME
from primitives.constants import (
    POSEIDON2_WIDTH, ROUNDS_F, ROUNDS_P,
    POSEIDON2_RC, POSEIDON2_DIAG,
)

RATE = 2
CAPACITY = 1


def _pow5(x: int) -> int:
    """
    Compute x^5 in the field.

    Uses x^5 = x^4 * x, the same decomposition the gadget constrains.
    """
    x2 = (x * x) % BN254_PRIME
    x4 = (x2 * x2) % BN254_PRIME
    return (x4 * x) % BN254_PRIME


def _matmul_external(state: List[int]) -> List[int]:
    """
    Apply the external matrix circ(2, 1, 1).

    For width 3 this is x[i] + sum(x).
    """
    total = sum(state) % BN254_PRIME
    return [(x + total) % BN254_PRIME for x in state]


def _matmul_internal(state: List[int]) -> List[int]:
    """Apply the internal matrix: x[i] = x[i] * D[i] + sum(x)."""
    total = sum(state) % BN254_PRIME
    return [(x * d + total) % BN254_PRIME for x, d in zip(state, POSEIDON2_DIAG)]


def _pow5add(state: List[int], constants: Sequence[int]) -> List[int]:
    """Compute (state + constants)^5 element-wise."""
    return [_pow5((x + c) % BN254_PRIME) for x, c in zip(state, constants)]


def poseidon2_permutation(input_data: Sequence[int]) -> List[int]:
    """
    Compute the full Poseidon2 permutation.

    Args:
        input_data: POSEIDON2_WIDTH field elements (as integers)

    Returns:
        POSEIDON2_WIDTH field elements after the permutation
    """
    if len(input_data) != POSEIDON2_WIDTH:
        raise ValueError(
            f"input_data must have {POSEIDON2_WIDTH} elements, got {len(input_data)}"
        )

    width = POSEIDON2_WIDTH
    half_full_rounds = ROUNDS_F // 2
    C = POSEIDON2_RC

    state = [x % BN254_PRIME for x in input_data]
    state = _matmul_external(state)

    # First half of full rounds
    for r in range(half_full_rounds):
        state = _pow5add(state, C[r * width:(r + 1) * width])
        state = _matmul_external(state)

    # Partial rounds: constant and S-box on the first lane only
    for r in range(ROUNDS_P):
        state[0] = _pow5((state[0] + C[half_full_rounds * width + r]) % BN254_PRIME)
        state = _matmul_internal(state)

    # Second half of full rounds
    for r in range(half_full_rounds):
        offset = half_full_rounds * width + ROUNDS_P + r * width
        state = _pow5add(state, C[offset:offset + width])
        state = _matmul_external(state)

    return state


def hash_seq(input_data: Sequence[int]) -> int:
    """
    Hash a variable-length sequence of field elements to one field element.

    Sponge with rate 2. The capacity lane starts at len(input_data) so that
    sequences differing only by trailing zeros hash differently.
    """
    state = [0] * RATE + [len(input_data) % BN254_PRIME]
    for offset in range(0, len(input_data), RATE):
        chunk = input_data[offset:offset + RATE]
        for i, x in enumerate(chunk):
            state[i] = (state[i] + int(x)) % BN254_PRIME
        state = poseidon2_permutation(state)
    if not input_data:
        state = poseidon2_permutation(state)
    return state[0]


__all__ = [
    "RATE",
    "CAPACITY",
    "poseidon2_permutation",
    "hash_seq",
]
