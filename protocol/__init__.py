"""Protocol - Planning, certificates, prime derivation and circuit verification."""

from protocol.plan import Plan, PlannedExtension, nonce_bits_needed

from protocol.certificate import (
    Certificate,
    CertificateExtension,
    certificate_from_json,
    certificate_to_json,
    load_certificate,
    save_certificate,
    verify_certificate,
)

from protocol.config import HashToPrimeConfig
from protocol.errors import ExtensionExhausted, PocklingtonError
from protocol.hasher import Hasher, PoseidonHasher

from protocol.prover import (
    ExtensionResult,
    HashToPrime,
    attempt_extension,
    execute_plan,
    hash_to_pocklington_prime,
)

from protocol.verifier import CircuitVerifier, VerificationReport, synthesize_hash_to_prime

__all__ = [
    # Planning
    "Plan",
    "PlannedExtension",
    "nonce_bits_needed",
    # Certificates
    "Certificate",
    "CertificateExtension",
    "certificate_to_json",
    "certificate_from_json",
    "save_certificate",
    "load_certificate",
    "verify_certificate",
    # Configuration and errors
    "HashToPrimeConfig",
    "PocklingtonError",
    "ExtensionExhausted",
    "Hasher",
    "PoseidonHasher",
    # Prover
    "ExtensionResult",
    "attempt_extension",
    "execute_plan",
    "hash_to_pocklington_prime",
    "HashToPrime",
    # Verifier
    "CircuitVerifier",
    "VerificationReport",
    "synthesize_hash_to_prime",
]
