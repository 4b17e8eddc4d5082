"""Rank-1 constraint system with lookup-style range checks.

A constraint is <a,x> * <b,x> = <c,x> over GF(r), where x is the assignment
vector and x[0] is the constant one. A range check asserts that the canonical
integer value of <a,x> is below 2^k; it stands for a lookup argument and is
what keeps BigNat limbs and carries small.

Witness values are computed eagerly while gadgets are synthesized, so a
finished ConstraintSystem can be checked directly with is_satisfied().

Example:
    cs = ConstraintSystem()
    with cs.namespace("square"):
        x = cs.alloc(3, "x")
        y = cs.alloc(9, "y")
        cs.enforce(x, x, y, "x*x = y")
    assert cs.is_satisfied()
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from primitives.field import BN254_PRIME


class SynthesisError(Exception):
    """A circuit could not be synthesized (missing or inconsistent witness)."""


class UnsatisfiedConstraint(SynthesisError):
    """A synthesized circuit has a constraint that does not hold."""

    def __init__(self, label: str):
        super().__init__(f"constraint not satisfied: {label}")
        self.label = label


class LinearCombination:
    """Sparse linear combination {variable index: coefficient} over GF(r)."""

    __slots__ = ("terms",)

    def __init__(self, terms: Optional[Dict[int, int]] = None):
        self.terms: Dict[int, int] = terms if terms is not None else {}

    @classmethod
    def zero(cls) -> "LinearCombination":
        return cls()

    @classmethod
    def constant(cls, value: int) -> "LinearCombination":
        value %= BN254_PRIME
        return cls({0: value} if value else {})

    @classmethod
    def variable(cls, index: int) -> "LinearCombination":
        return cls({index: 1})

    def __add__(self, other: "LcLike") -> "LinearCombination":
        other = as_lc(other)
        terms = dict(self.terms)
        for var, coeff in other.terms.items():
            c = (terms.get(var, 0) + coeff) % BN254_PRIME
            if c:
                terms[var] = c
            else:
                terms.pop(var, None)
        return LinearCombination(terms)

    __radd__ = __add__

    def __neg__(self) -> "LinearCombination":
        return LinearCombination({v: (-c) % BN254_PRIME for v, c in self.terms.items()})

    def __sub__(self, other: "LcLike") -> "LinearCombination":
        return self + (-as_lc(other))

    def __rsub__(self, other: "LcLike") -> "LinearCombination":
        return as_lc(other) - self

    def __mul__(self, scalar: int) -> "LinearCombination":
        scalar %= BN254_PRIME
        if scalar == 0:
            return LinearCombination()
        return LinearCombination({v: (c * scalar) % BN254_PRIME for v, c in self.terms.items()})

    __rmul__ = __mul__

    def evaluate(self, assignment: List[int]) -> int:
        return sum(c * assignment[v] for v, c in self.terms.items()) % BN254_PRIME

    def __len__(self) -> int:
        return len(self.terms)

    def __repr__(self) -> str:
        return f"LinearCombination({self.terms})"


LcLike = Union[LinearCombination, int]


def as_lc(x: LcLike) -> LinearCombination:
    if isinstance(x, LinearCombination):
        return x
    return LinearCombination.constant(x)


ONE = LinearCombination.constant(1)


@dataclass
class Constraint:
    a: LinearCombination
    b: LinearCombination
    c: LinearCombination
    label: str


@dataclass
class RangeCheck:
    value: LinearCombination
    n_bits: int
    label: str


class ConstraintSystem:
    """Witness-carrying constraint system.

    Attributes:
        assignment: Variable values, assignment[0] == 1
        constraints: Rank-1 constraints in synthesis order
        range_checks: Range checks in synthesis order
    """

    def __init__(self):
        self.assignment: List[int] = [1]
        self.constraints: List[Constraint] = []
        self.range_checks: List[RangeCheck] = []
        self._path: List[str] = []

    # --- Labels ---

    @contextmanager
    def namespace(self, name: str) -> Iterator["ConstraintSystem"]:
        """Prefix every label created inside the block with `name/`."""
        self._path.append(name)
        try:
            yield self
        finally:
            self._path.pop()

    def _label(self, name: str) -> str:
        return "/".join(self._path + [name])

    # --- Synthesis ---

    def alloc(self, value: int, name: str = "") -> LinearCombination:
        """Introduce a witness variable holding `value`."""
        if value is None:
            raise SynthesisError(f"missing witness for {self._label(name)}")
        self.assignment.append(int(value) % BN254_PRIME)
        return LinearCombination.variable(len(self.assignment) - 1)

    def enforce(self, a: LcLike, b: LcLike, c: LcLike, name: str) -> None:
        """Add the constraint a * b = c."""
        self.constraints.append(Constraint(as_lc(a), as_lc(b), as_lc(c), self._label(name)))

    def enforce_zero(self, lc: LcLike, name: str) -> None:
        """Add the linear constraint lc = 0."""
        self.enforce(lc, ONE, 0, name)

    def enforce_range(self, lc: LcLike, n_bits: int, name: str) -> None:
        """Add the check 0 <= lc < 2^n_bits."""
        if n_bits < 0 or n_bits >= BN254_PRIME.bit_length():
            raise ValueError(f"range check width must be in [0, 253], got {n_bits}")
        self.range_checks.append(RangeCheck(as_lc(lc), n_bits, self._label(name)))

    def eval(self, lc: LcLike) -> int:
        """Current value of a linear combination."""
        return as_lc(lc).evaluate(self.assignment)

    # --- Checking ---

    def which_is_unsatisfied(self) -> Optional[str]:
        """Label of the first failing constraint or range check, else None."""
        values = self.assignment
        for con in self.constraints:
            lhs = con.a.evaluate(values) * con.b.evaluate(values) % BN254_PRIME
            if lhs != con.c.evaluate(values):
                return con.label
        for check in self.range_checks:
            if check.value.evaluate(values) >> check.n_bits:
                return check.label
        return None

    def is_satisfied(self) -> bool:
        return self.which_is_unsatisfied() is None

    def assert_satisfied(self) -> None:
        label = self.which_is_unsatisfied()
        if label is not None:
            raise UnsatisfiedConstraint(label)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    @property
    def num_range_checks(self) -> int:
        return len(self.range_checks)

    @property
    def num_variables(self) -> int:
        return len(self.assignment)


def weighted_sum(items: Iterable[Tuple[LinearCombination, int]]) -> LinearCombination:
    """Sum of lc * weight over items, accumulated in one pass."""
    terms: Dict[int, int] = {}
    for lc, weight in items:
        weight %= BN254_PRIME
        if not weight:
            continue
        for var, coeff in lc.terms.items():
            terms[var] = (terms.get(var, 0) + coeff * weight) % BN254_PRIME
    return LinearCombination({v: c for v, c in terms.items() if c})
