"""In-circuit verification of a hash-to-prime derivation.

synthesize_hash_to_prime() re-runs the derivation inside a constraint system
with the certificate as witness: the hash, the entropy stream and every
extension are recomputed by gadgets, and each Pocklington step is checked
through the same relation code the prover searched with (protocol.relation
under CircuitContext). The constraint system is satisfiable exactly when the
certificate is a valid derivation for the allocated inputs.

The circuit shape depends only on the plan, the number of inputs and the limb
width, never on witness values.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from primitives.convert import FieldLike, f_to_nat
from primitives.entropy import SEED_TEMPLATE, extension_template
from constraints import mimc as mimc_gadget
from constraints.base import CircuitContext
from constraints.bignat import BigNat, limbs_for
from constraints.entropy import EntropySource
from constraints.miller_rabin import miller_rabin_32b
from constraints.num import Num, enforce_equal
from constraints.system import ConstraintSystem, SynthesisError
from protocol.certificate import Certificate
from protocol.config import HashToPrimeConfig
from protocol.hasher import Hasher
from protocol.plan import Plan
from protocol.relation import check, extend

logger = logging.getLogger(__name__)


def synthesize_hash_to_prime(
    cs: ConstraintSystem,
    inputs: List[Num],
    plan: Plan,
    hasher: Hasher,
    certificate: Optional[Certificate],
    limb_width: int = 32,
) -> BigNat:
    """Constrain the derivation of a prime from `inputs` and return it.

    Args:
        cs: Constraint system to synthesize into
        inputs: Allocated input field elements
        plan: Plan the certificate was built with
        hasher: Hash keying the entropy stream
        certificate: Witness; None is a programming error
        limb_width: Bits per BigNat limb

    Returns:
        The derived prime as a BigNat
    """
    if certificate is None:
        raise SynthesisError("hash to prime needs a certificate as witness")
    if len(certificate.extensions) != len(plan.extensions):
        raise SynthesisError(
            f"certificate has {len(certificate.extensions)} extensions, plan has {len(plan.extensions)}"
        )

    with cs.namespace("hash to prime"):
        nonce = Num.alloc(cs, certificate.base_nonce, "base nonce")
        cs.enforce_range(nonce.lc, plan.nonce_bits, "base nonce range")
        digest = hasher.allocate_hash(cs, list(inputs) + [nonce])
        source = EntropySource(cs, digest, hasher)
        source.reserve(plan.stream_bits())

        prime = source.get_bits_as_nat(SEED_TEMPLATE, limb_width)
        is_prime = miller_rabin_32b(cs, prime, "seed miller rabin")
        enforce_equal(cs, is_prime, 1, "seed is prime")

        ctx = CircuitContext(cs, limb_width)
        for i, (planned, ext) in enumerate(zip(plan.extensions, certificate.extensions)):
            with cs.namespace(f"extension {i}"):
                ext_nonce = Num.alloc(cs, ext.nonce, "nonce")
                cs.enforce_range(ext_nonce.lc, planned.nonce_bits, "nonce range")
                with cs.namespace("mimc"):
                    mixed = mimc_gadget.permutation(cs, ext_nonce)
                mask = BigNat.from_num(
                    mixed.low_k_bits(cs, planned.nonce_bits, "mask bits"),
                    limb_width,
                    (1 << planned.nonce_bits) - 1,
                )
                random = source.get_bits_as_nat(extension_template(planned.random_bits), limb_width)
                base = BigNat.alloc_from_nat(cs, ext.checking_base, limb_width, 1, "base")
                extension, candidate = extend(ctx, prime, random, mask)
                check(ctx, prime, extension, candidate, base)
                prime = candidate

    return prime


@dataclass
class VerificationReport:
    """Result of CircuitVerifier.check.

    Fields:
        satisfied: Whether every constraint and range check holds
        unsatisfied: Label of the first failing constraint, if any
        prime: Value of the prime the circuit derived
        num_constraints: Rank-1 constraints synthesized
        num_range_checks: Range checks synthesized
        num_variables: Variables allocated (including the constant one)
    """
    satisfied: bool
    unsatisfied: Optional[str]
    prime: int
    num_constraints: int
    num_range_checks: int
    num_variables: int


class CircuitVerifier:
    """Circuit verification bound to a configuration."""

    def __init__(self, config: HashToPrimeConfig):
        self.config = config

    def synthesize(self, cs: ConstraintSystem, inputs: List[Num], certificate: Optional[Certificate]) -> BigNat:
        return synthesize_hash_to_prime(
            cs,
            inputs,
            self.config.plan,
            self.config.hasher,
            certificate,
            self.config.limb_width,
        )

    def check(self, input_values: Sequence[FieldLike], certificate: Optional[Certificate]) -> VerificationReport:
        """Synthesize against the certificate and the claimed output prime.

        The expected output is allocated with enough limbs for plan.max_bits()
        and constrained equal to the derived prime.
        """
        cs = ConstraintSystem()
        with cs.namespace("inputs"):
            inputs = [Num.alloc(cs, f_to_nat(v), f"input {i}") for i, v in enumerate(input_values)]
        prime = self.synthesize(cs, inputs, certificate)

        w = self.config.limb_width
        n_limbs = limbs_for(self.config.plan.max_bits(), w)
        expected = BigNat.alloc_from_nat(cs, certificate.number(), w, n_limbs, "expected")
        prime.equal(cs, expected, "output")

        unsatisfied = cs.which_is_unsatisfied()
        report = VerificationReport(
            satisfied=unsatisfied is None,
            unsatisfied=unsatisfied,
            prime=prime.value,
            num_constraints=cs.num_constraints,
            num_range_checks=cs.num_range_checks,
            num_variables=cs.num_variables,
        )
        logger.info(
            "circuit: %d constraints, %d range checks, %d variables, satisfied=%s",
            report.num_constraints, report.num_range_checks, report.num_variables, report.satisfied,
        )
        if unsatisfied is not None:
            logger.debug("first unsatisfied constraint: %s", unsatisfied)
        return report
