"""MiMC-7 gadget matching primitives.mimc.permutation (four constraints per round)."""

from primitives.constants import MIMC_RC
from constraints.num import Num
from constraints.system import ConstraintSystem


def permutation(cs: ConstraintSystem, x: Num) -> Num:
    for i, c in enumerate(MIMC_RC):
        with cs.namespace(f"round {i}"):
            y = x + c
            y2 = y.square(cs, "y^2")
            y4 = y2.square(cs, "y^4")
            y6 = y4.mul(cs, y2, "y^6")
            x = y6.mul(cs, y, "y^7")
    return x
