"""Miller-Rabin probable-prime tests.

miller_rabin_32b is the gate applied to the 32-bit seed of every derivation;
it is deterministic below 4_759_123_141 and mirrored by the circuit gadget in
constraints/miller_rabin.py. miller_rabin is the general multi-round test.
"""

from typing import Iterable, List

# Bases that make Miller-Rabin deterministic for n < 4_759_123_141
BASES_32B = (2, 7, 61)

_SMALL_PRIMES: List[int] = [
    2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67, 71,
    73, 79, 83, 89, 97, 101, 103, 107, 109, 113, 127, 131, 137, 139, 149, 151,
    157, 163, 167, 173, 179, 181, 191, 193, 197, 199, 211, 223, 227, 229,
]


def _is_witness_free(n: int, bases: Iterable[int]) -> bool:
    """True if no base in `bases` witnesses the compositeness of odd n > 2."""
    d, s = n - 1, 0
    while d % 2 == 0:
        d //= 2
        s += 1
    for a in bases:
        a %= n
        if a == 0:
            continue
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = (x * x) % n
            if x == n - 1:
                break
        else:
            return False
    return True


def miller_rabin(n: int, rounds: int) -> bool:
    """Miller-Rabin with the first `rounds` primes as bases."""
    if rounds < 1 or rounds > len(_SMALL_PRIMES):
        raise ValueError(f"rounds must be in [1, {len(_SMALL_PRIMES)}], got {rounds}")
    if n < 2:
        return False
    for p in _SMALL_PRIMES:
        if n == p:
            return True
        if n % p == 0:
            return False
    return _is_witness_free(n, _SMALL_PRIMES[:rounds])


def miller_rabin_32b(n: int) -> bool:
    """Deterministic primality test for 32-bit n."""
    if n >= 1 << 32:
        raise ValueError(f"{n} is wider than 32 bits")
    if n < 2:
        return False
    if n in BASES_32B:
        return True
    if n % 2 == 0:
        return False
    return _is_witness_free(n, BASES_32B)
