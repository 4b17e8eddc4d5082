"""In-circuit counterpart of primitives.entropy.EntropySource.

Blocks are recomputed with the hasher gadget and decomposed canonically into
bits; drawn numbers are BigNats whose limbs are sums of those bits and the
template's constant ones.
"""

from typing import List

from primitives.entropy import BITS_PER_BLOCK, NatTemplate, blocks_needed
from constraints.bignat import BigNat
from constraints.num import Num
from constraints.system import ConstraintSystem


class EntropySource:
    """Bit stream over allocated hash blocks.

    Attributes:
        digest: Allocated field element the stream is keyed by
        hasher: Object with allocate_hash(cs, inputs) -> Num
        n_blocks: Blocks expanded so far
    """

    def __init__(self, cs: ConstraintSystem, digest: Num, hasher):
        self.cs = cs
        self.digest = digest
        self.hasher = hasher
        self.n_blocks = 0
        self._bits: List[Num] = []
        self._cursor = 0

    def _expand(self) -> None:
        cs = self.cs
        with cs.namespace(f"entropy block {self.n_blocks}"):
            block = self.hasher.allocate_hash(cs, [self.digest, Num.constant(self.n_blocks)])
            self._bits.extend(block.into_bits_le_strict(cs)[:BITS_PER_BLOCK])
        self.n_blocks += 1

    def reserve(self, n_bits: int) -> None:
        """Expand the blocks a consumer of n_bits bits will read."""
        while self.n_blocks < blocks_needed(n_bits):
            self._expand()

    def take_bits(self, n: int) -> List[Num]:
        while self._cursor + n > len(self._bits):
            self._expand()
        out = self._bits[self._cursor:self._cursor + n]
        self._cursor += n
        return out

    def get_bits_as_nat(self, template: NatTemplate, limb_width: int) -> BigNat:
        one = Num.constant(1)
        bits = (
            [one] * template.trailing_ones
            + self.take_bits(template.random_bits)
            + [one] * template.leading_ones
        )
        min_bits = template.total_bits if template.leading_ones else 0
        return BigNat.from_bits(bits, limb_width, min_bits=min_bits)
