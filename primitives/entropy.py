"""Deterministic pseudorandom bit stream keyed by a hash digest.

The stream is a sequence of blocks, block i = H(digest, i), of which the low
BITS_PER_BLOCK bits are used (least significant first). Taking 192 of the 254
bits of a uniform field element keeps the bias below 2^-61.

The circuit counterpart (constraints/entropy.py) produces the same bits in the
same order; only the representation differs (numpy bit arrays here, boolean
linear combinations there).
"""

from dataclasses import dataclass

import numpy as np

from primitives.convert import FieldLike, f_to_nat, low_k_bits

BITS_PER_BLOCK = 192


@dataclass(frozen=True)
class NatTemplate:
    """Shape of a drawn number: ones at the top, random bits, ones at the bottom."""
    leading_ones: int
    trailing_ones: int
    random_bits: int

    @property
    def total_bits(self) -> int:
        return self.leading_ones + self.random_bits + self.trailing_ones

    def assemble(self, random: int) -> int:
        """Place `random` between the fixed leading and trailing ones."""
        lead = (1 << self.leading_ones) - 1
        trail = (1 << self.trailing_ones) - 1
        return (lead << (self.random_bits + self.trailing_ones)) | (random << self.trailing_ones) | trail


# Seed drawn at the start of every derivation: 32 bits, top bit set, = 3 mod 4
SEED_TEMPLATE = NatTemplate(leading_ones=1, trailing_ones=2, random_bits=29)


def extension_template(random_bits: int) -> NatTemplate:
    """Template of the random part of a Pocklington extension."""
    return NatTemplate(leading_ones=1, trailing_ones=0, random_bits=random_bits)


def block_to_bits(block: int) -> np.ndarray:
    """Low BITS_PER_BLOCK bits of a block, little-endian, as a uint8 array."""
    raw = low_k_bits(block, BITS_PER_BLOCK).to_bytes(BITS_PER_BLOCK // 8, "little")
    return np.unpackbits(np.frombuffer(raw, dtype=np.uint8), bitorder="little")


def bits_to_nat(bits: np.ndarray) -> int:
    """Little-endian uint8 bit array to int."""
    if len(bits) == 0:
        return 0
    return int.from_bytes(np.packbits(bits, bitorder="little").tobytes(), "little")


class EntropySource:
    """Native bit stream.

    Attributes:
        digest: Field element the stream is keyed by
        hasher: Object with hash(Sequence[int]) -> int
        n_blocks: Blocks expanded so far
    """

    def __init__(self, digest: FieldLike, hasher):
        self.digest = f_to_nat(digest)
        self.hasher = hasher
        self.n_blocks = 0
        self._bits = np.zeros(0, dtype=np.uint8)
        self._cursor = 0

    def _expand(self) -> None:
        block = self.hasher.hash([self.digest, self.n_blocks])
        self._bits = np.concatenate([self._bits, block_to_bits(block)])
        self.n_blocks += 1

    def take_bits(self, n: int) -> np.ndarray:
        """Consume the next n bits of the stream."""
        while self._cursor + n > len(self._bits):
            self._expand()
        out = self._bits[self._cursor:self._cursor + n]
        self._cursor += n
        return out

    def get_bits_as_nat(self, template: NatTemplate) -> int:
        """Draw a number shaped by `template`, consuming template.random_bits bits."""
        return template.assemble(bits_to_nat(self.take_bits(template.random_bits)))


def blocks_needed(n_bits: int) -> int:
    """Number of stream blocks a consumer of n_bits bits expands."""
    return -(-n_bits // BITS_PER_BLOCK)
