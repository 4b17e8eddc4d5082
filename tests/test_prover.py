"""Tests for certificate building and hash-to-prime derivation."""

import math

import pytest

from primitives.field import FF
from primitives.miller_rabin import miller_rabin
from protocol.certificate import Certificate, certificate_to_json, verify_certificate
from protocol.config import HashToPrimeConfig
from protocol.errors import ExtensionExhausted, PocklingtonError
from protocol.plan import Plan, PlannedExtension
from protocol.prover import (
    HashToPrime,
    attempt_extension,
    execute_plan,
    hash_to_pocklington_prime,
)
from protocol.relation import nonce_mask
from tests.conftest import cached_certificate

SEED_PRIME = 4294967291


class TestAttemptExtension:
    """Tests for a single Pocklington step."""

    def test_extends(self) -> None:
        """A 32-bit prime extends by a 20-bit factor."""
        planned = PlannedExtension(nonce_bits=10, random_bits=20)
        random = 1 << 20
        result = attempt_extension(Certificate(SEED_PRIME, 0), planned, random)
        assert result.ok
        cert = result.unwrap()
        ext = cert.extensions[0]
        assert ext.result == SEED_PRIME * (random + nonce_mask(ext.nonce, 10)) + 1
        assert miller_rabin(ext.result, 20)
        assert ext.checking_base >= 2

    def test_does_not_mutate_input(self) -> None:
        """The starting certificate is left unchanged."""
        start = Certificate(SEED_PRIME, 0)
        attempt_extension(start, PlannedExtension(nonce_bits=10, random_bits=20), 1 << 20)
        assert start.extensions == []

    def test_exhausted(self) -> None:
        """With one nonce and an odd extension the candidate is even, so the step fails."""
        planned = PlannedExtension(nonce_bits=0, random_bits=20)
        start = Certificate(SEED_PRIME, 0)
        result = attempt_extension(start, planned, (1 << 20) + 1)
        assert not result.ok
        assert result.certificate is start
        with pytest.raises(ExtensionExhausted) as exc:
            result.unwrap()
        assert exc.value.certificate is start
        assert isinstance(exc.value, PocklingtonError)


class TestExecutePlan:
    """Tests for running a plan from one digest."""

    def test_matches_derivation(self) -> None:
        """execute_plan on the winning digest reproduces the derived certificate."""
        from protocol.hasher import PoseidonHasher
        cert = cached_certificate((1,), 128)
        hasher = PoseidonHasher()
        digest = hasher.hash([FF(1), FF(cert.base_nonce)])
        assert execute_plan(digest, Plan.new(128), cert.base_nonce, hasher) == cert


class TestHashToPrime:
    """Tests for hash_to_pocklington_prime."""

    @pytest.mark.parametrize("inputs", [(1,), (2,), (3,), (4,)])
    def test_prime(self, inputs) -> None:
        """Derived numbers are prime."""
        cert = cached_certificate(inputs, 128)
        assert cert is not None
        assert miller_rabin(cert.number(), 20)

    @pytest.mark.parametrize("entropy", [29, 30, 64, 128, 256])
    def test_size_bound(self, entropy: int) -> None:
        """Derived primes fit the plan's bit bound and carry every extension."""
        plan = Plan.new(entropy)
        cert = cached_certificate((1, 2), entropy)
        assert cert.bit_length() <= plan.max_bits()
        assert len(cert.extensions) == len(plan.extensions)
        assert cert.base_nonce < 1 << plan.nonce_bits

    @pytest.mark.parametrize("inputs", [(1,), (4,)])
    def test_extension_relation(self, inputs) -> None:
        """Every extension satisfies the Pocklington conditions."""
        cert = cached_certificate(inputs, 128)
        for i, ext in enumerate(cert.extensions):
            prior = cert.prior(i)
            extension = ext.random + nonce_mask(ext.nonce, ext.plan.nonce_bits)
            n = ext.result
            assert n == prior * extension + 1
            assert extension < prior
            assert pow(ext.checking_base, n - 1, n) == 1
            assert math.gcd(pow(ext.checking_base, extension, n) - 1, n) == 1

    def test_deterministic(self) -> None:
        """Two derivations from the same inputs agree."""
        a = hash_to_pocklington_prime([5, 6], 64)
        b = hash_to_pocklington_prime([5, 6], 64)
        assert certificate_to_json(a) == certificate_to_json(b)

    def test_inputs_matter(self) -> None:
        """Different inputs give different primes."""
        assert cached_certificate((1,), 128).number() != cached_certificate((2,), 128).number()

    def test_verifies(self) -> None:
        """Derived certificates pass native verification against their inputs."""
        cert = cached_certificate((3,), 128)
        assert verify_certificate(cert, Plan.new(128), inputs=[3])

    def test_no_attempts(self) -> None:
        """An empty search budget finds nothing."""
        assert hash_to_pocklington_prime([1], 64, max_attempts=0) is None

    def test_below_minimum_entropy(self) -> None:
        """Entropy below 29 is rejected."""
        with pytest.raises(ValueError):
            hash_to_pocklington_prime([1], 28)

    def test_object_wrapper(self) -> None:
        """HashToPrime.derive matches the function."""
        h2p = HashToPrime(HashToPrimeConfig(entropy=128))
        assert h2p.derive([2]) == cached_certificate((2,), 128)
        assert h2p.plan is Plan.new(128)
