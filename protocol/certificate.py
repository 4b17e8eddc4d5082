"""Pocklington certificate data model and serialization.

A certificate records everything needed to re-check a derived prime without
searching: the 32-bit seed prime with the counter that produced it, and for
each extension the random draw, the nonce, the Pocklington base and the
resulting prime.
"""

import json
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from primitives.convert import FieldLike, usize_to_f
from primitives.entropy import SEED_TEMPLATE, EntropySource, extension_template
from primitives.miller_rabin import miller_rabin_32b
from constraints.base import NativeContext
from protocol.hasher import Hasher, PoseidonHasher
from protocol.plan import Plan, PlannedExtension
from protocol.relation import StepVerdict, check, extend, nonce_mask


@dataclass
class CertificateExtension:
    """One certified step N = prior * (random + mask(nonce)) + 1.

    Attributes:
        plan: Bit budget this step was drawn with
        random: Random part of the extension (top bit set)
        nonce: Counter whose MiMC image supplies the low bits
        checking_base: Pocklington base a
        result: The new prime N
    """
    plan: PlannedExtension
    random: int
    nonce: int
    checking_base: int
    result: int


@dataclass
class Certificate:
    """Seed prime plus the extensions applied to it, oldest first."""
    base_prime: int
    base_nonce: int
    extensions: List[CertificateExtension] = field(default_factory=list)

    def number(self) -> int:
        """The certified prime."""
        if self.extensions:
            return self.extensions[-1].result
        return self.base_prime

    def prior(self, i: int) -> int:
        """The prime extension i was built on."""
        if i < 0 or i >= len(self.extensions):
            raise IndexError(f"extension {i} out of range")
        if i == 0:
            return self.base_prime
        return self.extensions[i - 1].result

    def bit_length(self) -> int:
        return self.number().bit_length()


# --- Serialization ---

def certificate_to_json(cert: Certificate) -> dict[str, Any]:
    """Convert a certificate to a JSON-serializable dictionary."""
    return {
        "base_prime": str(cert.base_prime),
        "base_nonce": str(cert.base_nonce),
        "extensions": [
            {
                "plan": {"nonce_bits": ext.plan.nonce_bits, "random_bits": ext.plan.random_bits},
                "random": str(ext.random),
                "nonce": str(ext.nonce),
                "checking_base": str(ext.checking_base),
                "result": str(ext.result),
            }
            for ext in cert.extensions
        ],
    }


def certificate_from_json(data: dict[str, Any]) -> Certificate:
    """Inverse of certificate_to_json."""
    try:
        extensions = [
            CertificateExtension(
                plan=PlannedExtension(
                    nonce_bits=int(ext["plan"]["nonce_bits"]),
                    random_bits=int(ext["plan"]["random_bits"]),
                ),
                random=int(ext["random"]),
                nonce=int(ext["nonce"]),
                checking_base=int(ext["checking_base"]),
                result=int(ext["result"]),
            )
            for ext in data.get("extensions", [])
        ]
        return Certificate(
            base_prime=int(data["base_prime"]),
            base_nonce=int(data["base_nonce"]),
            extensions=extensions,
        )
    except KeyError as e:
        raise ValueError(f"certificate JSON is missing field {e}") from e


def save_certificate(cert: Certificate, path: str) -> None:
    with open(path, "w") as f:
        json.dump(certificate_to_json(cert), f, indent=2)


def load_certificate(path: str) -> Certificate:
    with open(path) as f:
        return certificate_from_json(json.load(f))


# --- Native verification ---

def verify_certificate(
    cert: Certificate,
    plan: Plan,
    inputs: Optional[Sequence[FieldLike]] = None,
    hasher: Optional[Hasher] = None,
) -> bool:
    """Re-check a certificate against a plan without any search.

    Checks the seed (shape and Miller-Rabin) and, for every extension, the
    planned bit budget, the shape of the random draw, the candidate formula and
    the Pocklington relation. With `inputs`, also re-derives the entropy stream
    and checks that the seed and random draws are the ones it produces.
    """
    if len(cert.extensions) != len(plan.extensions):
        return False
    if cert.base_prime.bit_length() != SEED_TEMPLATE.total_bits or cert.base_prime % 4 != 3:
        return False
    if not miller_rabin_32b(cert.base_prime):
        return False
    if cert.base_nonce >> plan.nonce_bits:
        return False

    source = None
    if inputs is not None:
        if hasher is None:
            hasher = PoseidonHasher()
        digest = hasher.hash(list(inputs) + [usize_to_f(cert.base_nonce)])
        source = EntropySource(digest, hasher)
        if source.get_bits_as_nat(SEED_TEMPLATE) != cert.base_prime:
            return False

    ctx = NativeContext()
    for i, (ext, planned) in enumerate(zip(cert.extensions, plan.extensions)):
        if ext.plan != planned:
            return False
        if ext.random.bit_length() != planned.random_bits + 1 or ext.nonce >> planned.nonce_bits:
            return False
        if source is not None and source.get_bits_as_nat(extension_template(planned.random_bits)) != ext.random:
            return False
        prior = cert.prior(i)
        extension, candidate = extend(ctx, prior, ext.random, nonce_mask(ext.nonce, planned.nonce_bits))
        if candidate != ext.result or extension >= prior:
            return False
        if not 2 <= ext.checking_base < candidate:
            return False
        if check(ctx, prior, extension, candidate, ext.checking_base) != StepVerdict.VALID:
            return False
    return True

