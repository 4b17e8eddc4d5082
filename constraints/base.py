"""Arithmetic contexts for relations shared by the prover and the circuit.

ArithmeticContext provides a uniform interface for relation code that works
for both the native search (plain ints, checks return booleans) and circuit
synthesis (BigNat gadgets, checks are enforced as constraints). The same
relation code is used in both contexts.

Example:
    def fermat(ctx: ArithmeticContext, a, e, n):
        return ctx.is_one(ctx.pow_mod(a, e, n, "a^e"), "a^e == 1")

    # Native: returns True or False
    fermat(NativeContext(), 2, 10, 11)

    # Circuit: enforces the relation and returns True
    fermat(CircuitContext(cs, limb_width=32), a_nat, e_nat, n_nat)

Names are only used by the circuit context, to label constraints.
"""

import math
from abc import ABC, abstractmethod
from typing import Any

from constraints.bignat import BigNat
from constraints.system import ConstraintSystem


class ArithmeticContext(ABC):
    """Uniform interface for natural-number relations."""

    @abstractmethod
    def add(self, a: Any, b: Any, name: str) -> Any:
        """a + b"""
        pass

    @abstractmethod
    def mul_add_one(self, a: Any, b: Any, name: str) -> Any:
        """a * b + 1"""
        pass

    @abstractmethod
    def sub_one(self, a: Any, name: str) -> Any:
        """a - 1 (a must be at least 1)"""
        pass

    @abstractmethod
    def pow_mod(self, base: Any, exponent: Any, modulus: Any, name: str) -> Any:
        """base ^ exponent mod modulus"""
        pass

    @abstractmethod
    def is_one(self, a: Any, name: str) -> bool:
        """Check a == 1.

        Returns:
            Native: whether the check holds
            Circuit: True, after enforcing the check
        """
        pass

    @abstractmethod
    def is_coprime(self, a: Any, modulus: Any, name: str) -> bool:
        """Check gcd(a, modulus) == 1.

        Returns:
            Native: whether the check holds
            Circuit: True, after enforcing the check
        """
        pass


class NativeContext(ArithmeticContext):
    """Native implementation - Python ints."""

    def add(self, a: int, b: int, name: str) -> int:
        return a + b

    def mul_add_one(self, a: int, b: int, name: str) -> int:
        return a * b + 1

    def sub_one(self, a: int, name: str) -> int:
        return a - 1

    def pow_mod(self, base: int, exponent: int, modulus: int, name: str) -> int:
        return pow(base, exponent, modulus)

    def is_one(self, a: int, name: str) -> bool:
        return a == 1

    def is_coprime(self, a: int, modulus: int, name: str) -> bool:
        return math.gcd(a, modulus) == 1


class CircuitContext(ArithmeticContext):
    """Circuit implementation - BigNat gadgets in a constraint system.

    Every check is enforced; a relation that does not hold leaves the
    constraint system unsatisfied instead of returning False.
    """

    def __init__(self, cs: ConstraintSystem, limb_width: int):
        self.cs = cs
        self.limb_width = limb_width

    def add(self, a: BigNat, b: BigNat, name: str) -> BigNat:
        return a.add(b)

    def mul_add_one(self, a: BigNat, b: BigNat, name: str) -> BigNat:
        return a.mult(self.cs, b, name).shift(1)

    def sub_one(self, a: BigNat, name: str) -> BigNat:
        return a.sub(self.cs, BigNat.one(self.limb_width), name)

    def pow_mod(self, base: BigNat, exponent: BigNat, modulus: BigNat, name: str) -> BigNat:
        return base.pow_mod(self.cs, exponent, modulus, name)

    def is_one(self, a: BigNat, name: str) -> bool:
        a.equal_when_carried(self.cs, BigNat.one(self.limb_width), name)
        return True

    def is_coprime(self, a: BigNat, modulus: BigNat, name: str) -> bool:
        a.enforce_coprime(self.cs, modulus, name)
        return True
