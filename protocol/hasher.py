"""Hash capability used to key the entropy stream.

A Hasher hashes a list of field elements natively and inside a constraint
system; both must give the same value for the same inputs.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from primitives import poseidon2
from primitives.convert import FieldLike, f_to_nat
from constraints import poseidon2 as poseidon2_gadget
from constraints.num import Num
from constraints.system import ConstraintSystem


class Hasher(ABC):
    """Field-element sequence hash with a matching circuit gadget."""

    @abstractmethod
    def hash(self, inputs: Sequence[FieldLike]) -> int:
        pass

    @abstractmethod
    def allocate_hash(self, cs: ConstraintSystem, inputs: List[Num]) -> Num:
        pass


class PoseidonHasher(Hasher):
    """Poseidon2 sponge over BN254 (width 3, rate 2)."""

    def hash(self, inputs: Sequence[FieldLike]) -> int:
        return poseidon2.hash_seq([f_to_nat(x) for x in inputs])

    def allocate_hash(self, cs: ConstraintSystem, inputs: List[Num]) -> Num:
        with cs.namespace("poseidon2"):
            return poseidon2_gadget.hash_seq(cs, inputs)

    def __eq__(self, other) -> bool:
        return isinstance(other, PoseidonHasher)

    def __hash__(self) -> int:
        return hash(PoseidonHasher)

    def __repr__(self) -> str:
        return "PoseidonHasher()"
