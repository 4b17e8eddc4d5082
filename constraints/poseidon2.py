"""Poseidon2 gadget: the permutation and sponge of primitives/poseidon2.py as constraints.

Each S-box costs three constraints (x^2, x^4, x^5); linear layers are free.
"""

from typing import List, Sequence

from primitives.constants import (
    POSEIDON2_WIDTH, ROUNDS_F, ROUNDS_P,
    POSEIDON2_RC, POSEIDON2_DIAG,
)
from primitives.poseidon2 import RATE
from constraints.num import Num
from constraints.system import ConstraintSystem


def _pow5(cs: ConstraintSystem, x: Num, name: str) -> Num:
    with cs.namespace(name):
        x2 = x.square(cs, "x^2")
        x4 = x2.square(cs, "x^4")
        return x4.mul(cs, x, "x^5")


def _sum(state: Sequence[Num]) -> Num:
    total = state[0]
    for x in state[1:]:
        total = total + x
    return total


def _matmul_external(state: List[Num]) -> List[Num]:
    total = _sum(state)
    return [x + total for x in state]


def _matmul_internal(state: List[Num]) -> List[Num]:
    total = _sum(state)
    return [x * d + total for x, d in zip(state, POSEIDON2_DIAG)]


def poseidon2_permutation(cs: ConstraintSystem, state: Sequence[Num]) -> List[Num]:
    """Constrain the Poseidon2 permutation of a width-3 state."""
    if len(state) != POSEIDON2_WIDTH:
        raise ValueError(f"state must have {POSEIDON2_WIDTH} elements, got {len(state)}")

    width = POSEIDON2_WIDTH
    half_full_rounds = ROUNDS_F // 2
    C = POSEIDON2_RC

    state = _matmul_external(list(state))

    for r in range(half_full_rounds):
        with cs.namespace(f"full round {r}"):
            state = [
                _pow5(cs, x + c, f"sbox {i}")
                for i, (x, c) in enumerate(zip(state, C[r * width:(r + 1) * width]))
            ]
            state = _matmul_external(state)

    for r in range(ROUNDS_P):
        with cs.namespace(f"partial round {r}"):
            state[0] = _pow5(cs, state[0] + C[half_full_rounds * width + r], "sbox")
            state = _matmul_internal(state)

    for r in range(half_full_rounds):
        offset = half_full_rounds * width + ROUNDS_P + r * width
        with cs.namespace(f"full round {half_full_rounds + r}"):
            state = [
                _pow5(cs, x + c, f"sbox {i}")
                for i, (x, c) in enumerate(zip(state, C[offset:offset + width]))
            ]
            state = _matmul_external(state)

    return state


def hash_seq(cs: ConstraintSystem, inputs: Sequence[Num]) -> Num:
    """Constrain the sponge hash of primitives.poseidon2.hash_seq."""
    state = [Num.constant(0)] * RATE + [Num.constant(len(inputs))]
    for block, offset in enumerate(range(0, len(inputs), RATE)):
        for i, x in enumerate(inputs[offset:offset + RATE]):
            state[i] = state[i] + x
        with cs.namespace(f"absorb {block}"):
            state = poseidon2_permutation(cs, state)
    if not inputs:
        with cs.namespace("absorb 0"):
            state = poseidon2_permutation(cs, state)
    return state[0]
