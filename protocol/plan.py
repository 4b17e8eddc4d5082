"""Bit-budget planning for recursive Pocklington primes.

A derived prime starts as a 32-bit seed and grows by extensions
N' = N * (r + nonce_mask) + 1. Each extension spends `random_bits` stream
bits, of which the low `nonce_bits` are searched over rather than random.
The planner picks, for a target entropy, the sequence of extensions that
reaches it with the smallest final bit length.

Plan construction is a dynamic program over entropy levels:

    table[e] = cheapest (bit length) way to reach entropy e

Each new level e + 1 tries every earlier level as its base; the random bits
needed are the entropy gap, and the nonce bits grow until they cover
nonce_bits_needed() of the resulting width. Pocklington's criterion needs the
extension factor to stay below the prime it extends, which bounds
random_bits + nonce_bits + 1 < base bits.

Example:
    plan = Plan.new(128)
    assert plan.entropy() == 128
"""

import math
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

# Seed: 32 bits, of which 3 are fixed by the seed template
SEED_BITS = 32
SEED_FIXED_BITS = 3
MIN_ENTROPY = SEED_BITS - SEED_FIXED_BITS

# Failure probability budget for each nonce search
P_FAIL = 2.0 ** -64


# --- Prime counting estimates ---

def prime_density(bits: int) -> float:
    """Probability that a uniform `bits`-bit number is prime.

    Second-order truncation of 1 / ln(2^bits):
        log2(e)/bits - (log2(e)/bits)^2
    """
    x = math.log2(math.e) / bits
    return x - x * x


def prime_trials(bits: int, p_fail: float) -> int:
    """Uniform `bits`-bit samples needed so that all are composite with probability <= p_fail."""
    p = prime_density(bits)
    return math.ceil(math.log(p_fail) / math.log(1.0 - p))


@lru_cache(maxsize=None)
def nonce_bits_needed(bits: int) -> int:
    """Nonce bits that find a `bits`-bit prime with all but 2^-64 probability."""
    return math.ceil(math.log2(prime_trials(bits, P_FAIL)))


# --- Plan ---

@dataclass(frozen=True)
class PlannedExtension:
    """Bit budget of one extension step."""
    nonce_bits: int
    random_bits: int


@dataclass(frozen=True)
class Plan:
    """How many random and nonce bits each step of a derivation consumes.

    Attributes:
        nonce_bits: Width of the outer hash counter (seed search)
        initial_entropy: Entropy contributed by the seed
        extensions: Extension budgets, in application order
    """
    nonce_bits: int
    initial_entropy: int
    extensions: Tuple[PlannedExtension, ...] = field(default_factory=tuple)

    @classmethod
    def new(cls, entropy: int) -> "Plan":
        """Plan for a prime carrying `entropy` bits of entropy (cached)."""
        if entropy < MIN_ENTROPY:
            raise ValueError(f"entropy must be at least {MIN_ENTROPY}, got {entropy}")
        return _plan(entropy)

    def entropy(self) -> int:
        return self.initial_entropy + sum(e.random_bits - e.nonce_bits for e in self.extensions)

    def max_bits(self) -> int:
        """Upper bound on the bit length of the certified number."""
        return SEED_BITS + sum(e.random_bits + 1 for e in self.extensions)

    def stream_bits(self) -> int:
        """Entropy-stream bits a derivation attempt consumes."""
        return SEED_BITS - SEED_FIXED_BITS + sum(e.random_bits for e in self.extensions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nonce_bits": self.nonce_bits,
            "initial_entropy": self.initial_entropy,
            "extensions": [
                {"nonce_bits": e.nonce_bits, "random_bits": e.random_bits}
                for e in self.extensions
            ],
        }


def plan(entropy: int) -> Plan:
    """Shorthand for Plan.new(entropy)."""
    return Plan.new(entropy)


@dataclass
class _Entry:
    """One level of the planning table."""
    entropy: int
    marginal_entropy: int
    bits: Optional[int]
    random_bits: int
    nonce_bits: int


def _best_extension(base: _Entry, random_bits: int) -> Optional[Tuple[int, int]]:
    """Smallest (nonce_bits, result_bits) extending `base` by random_bits of entropy.

    Returns None when no nonce width keeps the extension factor below the base.
    """
    nonce_bits = 0
    while True:
        if random_bits + nonce_bits + 1 >= base.bits:
            return None
        next_bits = nonce_bits + random_bits + base.bits + 1
        if nonce_bits >= nonce_bits_needed(next_bits):
            return nonce_bits, next_bits
        nonce_bits += 1


@lru_cache(maxsize=None)
def _plan(entropy: int) -> Plan:
    seed_nonce_bits = nonce_bits_needed(SEED_BITS)
    seed_entropy = SEED_BITS - SEED_FIXED_BITS - seed_nonce_bits
    table = [_Entry(
        entropy=seed_entropy,
        marginal_entropy=seed_entropy,
        bits=SEED_BITS,
        random_bits=0,
        nonce_bits=seed_nonce_bits,
    )]

    while table[-1].entropy < entropy:
        nxt = _Entry(entropy=table[-1].entropy + 1, marginal_entropy=0, bits=None, random_bits=0, nonce_bits=0)
        # Most recent entries first: on equal widths the shortest step wins
        for base in reversed(table):
            random_bits = nxt.entropy - base.entropy
            found = _best_extension(base, random_bits)
            if found is None:
                continue
            nonce_bits, next_bits = found
            if nxt.bits is None or next_bits < nxt.bits:
                nxt.bits = next_bits
                nxt.marginal_entropy = random_bits
                nxt.random_bits = random_bits + nonce_bits
                nxt.nonce_bits = nonce_bits
        assert nxt.bits is not None, f"no base extends to entropy {nxt.entropy}"
        table.append(nxt)

    assert table[-1].entropy == entropy

    extensions = []
    i = len(table) - 1
    while i > 0:
        extensions.append(PlannedExtension(nonce_bits=table[i].nonce_bits, random_bits=table[i].random_bits))
        i -= table[i].marginal_entropy
    assert i == 0, "plan walk overshot the seed entry"
    extensions.reverse()

    return Plan(
        nonce_bits=seed_nonce_bits,
        initial_entropy=seed_entropy,
        extensions=tuple(extensions),
    )
