"""Constraint system and gadgets.

ConstraintSystem collects rank-1 constraints and range checks together with a
witness. Num and BigNat build field and big-natural arithmetic on top of it,
and the hash, Miller-Rabin and entropy modules mirror their native
counterparts in primitives/, one gadget per native function.

Relations that must hold both natively and in-circuit are written once against
ArithmeticContext and run under NativeContext or CircuitContext.
"""

from .base import (
    ArithmeticContext,
    CircuitContext,
    NativeContext,
)
from .bignat import BigNat, BigNatParams
from .num import Num, alloc_bit, and_, enforce_equal
from .system import (
    ConstraintSystem,
    LinearCombination,
    SynthesisError,
    UnsatisfiedConstraint,
)

__all__ = [
    "ArithmeticContext",
    "NativeContext",
    "CircuitContext",
    "BigNat",
    "BigNatParams",
    "Num",
    "alloc_bit",
    "and_",
    "enforce_equal",
    "ConstraintSystem",
    "LinearCombination",
    "SynthesisError",
    "UnsatisfiedConstraint",
]
