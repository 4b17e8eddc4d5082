"""Round constants for the Poseidon2 and MiMC permutations over BN254.

Constants are expanded from SHA-256 of a domain tag and a counter, reduced
mod r. Both the native permutations and their circuit gadgets read these
tables, so any change here changes every derived prime.
"""

import hashlib
from typing import List

from primitives.field import BN254_PRIME

# Poseidon2 (t = 3, alpha = 5)
POSEIDON2_WIDTH = 3
ROUNDS_F = 8
ROUNDS_P = 56
# Internal matrix is 1 + diag(POSEIDON2_DIAG)
POSEIDON2_DIAG = [1, 1, 2]

# MiMC-7
MIMC_ROUNDS = 91


def _expand(tag: str, count: int) -> List[int]:
    out = []
    for i in range(count):
        digest = hashlib.sha256(f"{tag}/{i}".encode()).digest()
        out.append(int.from_bytes(digest, "big") % BN254_PRIME)
    return out


# Full rounds use POSEIDON2_WIDTH constants each, partial rounds one.
POSEIDON2_RC: List[int] = _expand(
    "poseidon2-bn254-t3", ROUNDS_F * POSEIDON2_WIDTH + ROUNDS_P
)

# First MiMC constant is zero, as in the usual MiMC-p/p instantiation.
MIMC_RC: List[int] = [0] + _expand("mimc7-bn254", MIMC_ROUNDS - 1)
