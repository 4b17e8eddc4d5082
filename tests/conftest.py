"""Pytest configuration for the hash-to-prime tests."""

import sys
from functools import lru_cache
from pathlib import Path
from typing import Tuple

import pytest

# Add the repository root to the path so absolute imports work
# (tests/ is inside the root, so parent is the root)
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))


@pytest.fixture(scope="session")
def hasher():
    from protocol.hasher import PoseidonHasher
    return PoseidonHasher()


@lru_cache(maxsize=None)
def cached_certificate(inputs: Tuple[int, ...], entropy: int):
    """Derive once per (inputs, entropy); derivations are deterministic."""
    from protocol.prover import hash_to_pocklington_prime
    return hash_to_pocklington_prime(list(inputs), entropy)
