"""Native prime derivation: certificate building and the outer hash search.

Derivation is two nested searches:

    hash_to_pocklington_prime   counter c over 2^plan.nonce_bits values
      execute_plan              seed from H(inputs, c), then each extension
        attempt_extension       nonce over 2^planned.nonce_bits, base from 2

Every choice is deterministic (ascending counters, nonces and bases), so the
same inputs and entropy always give the same certificate.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from primitives.convert import FieldLike, f_to_nat
from primitives.entropy import SEED_TEMPLATE, EntropySource, extension_template
from primitives.field import FF
from primitives.miller_rabin import miller_rabin_32b
from constraints.base import NativeContext
from protocol.certificate import Certificate, CertificateExtension
from protocol.config import HashToPrimeConfig
from protocol.errors import ExtensionExhausted
from protocol.hasher import Hasher, PoseidonHasher
from protocol.plan import Plan, PlannedExtension
from protocol.relation import StepVerdict, check, extend, nonce_mask

logger = logging.getLogger(__name__)


@dataclass
class ExtensionResult:
    """Outcome of attempt_extension.

    On success `certificate` carries the new extension; on failure it is the
    certificate the attempt started from.
    """
    ok: bool
    certificate: Certificate

    def unwrap(self) -> Certificate:
        if not self.ok:
            raise ExtensionExhausted(self.certificate)
        return self.certificate


# --- Certificate building ---

def attempt_extension(certificate: Certificate, planned: PlannedExtension, random: int) -> ExtensionResult:
    """Extend the certified prime by one Pocklington step.

    Nonces are tried in ascending order; for each, bases ascend from 2 while
    below the candidate. A failed Fermat check means the candidate is
    composite and moves on to the next nonce.
    """
    ctx = NativeContext()
    prior = certificate.number()
    for nonce in range(1 << planned.nonce_bits):
        extension, candidate = extend(ctx, prior, random, nonce_mask(nonce, planned.nonce_bits))
        base = 2
        while base < candidate:
            verdict = check(ctx, prior, extension, candidate, base)
            if verdict == StepVerdict.VALID:
                logger.debug("extension to %d bits: nonce %d, base %d", candidate.bit_length(), nonce, base)
                step = CertificateExtension(
                    plan=planned,
                    random=random,
                    nonce=nonce,
                    checking_base=base,
                    result=candidate,
                )
                return ExtensionResult(
                    ok=True,
                    certificate=Certificate(
                        base_prime=certificate.base_prime,
                        base_nonce=certificate.base_nonce,
                        extensions=certificate.extensions + [step],
                    ),
                )
            if verdict == StepVerdict.FERMAT_FAILED:
                break
            base += 1
    logger.debug("no extension of %d with %d nonce bits", prior, planned.nonce_bits)
    return ExtensionResult(ok=False, certificate=certificate)


def execute_plan(
    digest: FieldLike,
    plan: Plan,
    nonce: int,
    hasher: Optional[Hasher] = None,
) -> Optional[Certificate]:
    """Run a plan from one hash output.

    Returns None if the seed is not prime or an extension exhausts its nonces.
    """
    source = EntropySource(digest, hasher or PoseidonHasher())
    base_prime = source.get_bits_as_nat(SEED_TEMPLATE)
    if not miller_rabin_32b(base_prime):
        return None

    certificate = Certificate(base_prime=base_prime, base_nonce=nonce)
    for planned in plan.extensions:
        random = source.get_bits_as_nat(extension_template(planned.random_bits))
        try:
            certificate = attempt_extension(certificate, planned, random).unwrap()
        except ExtensionExhausted:
            return None
    return certificate


# --- Hash to prime ---

def hash_to_pocklington_prime(
    inputs: Sequence[FieldLike],
    entropy: int,
    hasher: Optional[Hasher] = None,
    max_attempts: Optional[int] = None,
) -> Optional[Certificate]:
    """Derive a prime with `entropy` bits of entropy from field-element inputs.

    The inputs are hashed together with a counter; the counter runs over
    2^plan.nonce_bits values (or max_attempts, if smaller) until the hash
    output yields a certificate. Returns None if every counter fails.
    """
    plan = Plan.new(entropy)
    hasher = hasher or PoseidonHasher()
    values = [FF(f_to_nat(x)) for x in inputs] + [FF(0)]

    attempts = 1 << plan.nonce_bits
    if max_attempts is not None:
        attempts = min(attempts, max_attempts)

    for nonce in range(attempts):
        digest = hasher.hash(values)
        certificate = execute_plan(digest, plan, nonce, hasher)
        if certificate is not None:
            logger.info(
                "derived %d-bit prime (entropy %d) after %d attempt(s)",
                certificate.bit_length(), entropy, nonce + 1,
            )
            return certificate
        values[-1] += FF(1)

    logger.warning("no prime found for entropy %d in %d attempts", entropy, attempts)
    return None


class HashToPrime:
    """Prime derivation bound to a configuration.

    Example:
        h2p = HashToPrime(HashToPrimeConfig(entropy=128))
        cert = h2p.derive([1, 2, 3])
    """

    def __init__(self, config: HashToPrimeConfig):
        self.config = config

    @property
    def plan(self) -> Plan:
        return self.config.plan

    def derive(self, inputs: Sequence[FieldLike], max_attempts: Optional[int] = None) -> Optional[Certificate]:
        return hash_to_pocklington_prime(inputs, self.config.entropy, self.config.hasher, max_attempts)
