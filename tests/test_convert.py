"""Tests for natural / bit / limb / field conversions."""

import pytest

from primitives.convert import (
    bits_le_to_nat,
    f_to_nat,
    limbs_to_nat,
    low_k_bits,
    nat_to_bits_le,
    nat_to_f,
    nat_to_limbs,
    usize_to_f,
)
from primitives.field import BN254_PRIME, FF, FIELD_BITS, inv


class TestField:
    """Tests for the BN254 scalar field."""

    def test_field_bits(self) -> None:
        """r is a 254-bit prime."""
        assert FIELD_BITS == 254

    def test_inverse(self) -> None:
        """inv(x) * x == 1."""
        for x in [1, 2, 12345, BN254_PRIME - 1]:
            assert x * inv(x) % BN254_PRIME == 1

    def test_inverse_of_zero(self) -> None:
        """Zero has no inverse."""
        with pytest.raises(ZeroDivisionError):
            inv(0)
        with pytest.raises(ZeroDivisionError):
            inv(BN254_PRIME)

    def test_galois_agrees(self) -> None:
        """FF arithmetic matches int arithmetic mod r."""
        a, b = 3 ** 100, 7 ** 90
        assert int(FF(a % BN254_PRIME) * FF(b % BN254_PRIME)) == a * b % BN254_PRIME


class TestConversions:
    """Tests for width-explicit conversions."""

    def test_f_to_nat(self) -> None:
        """Field elements map to their canonical representative."""
        assert f_to_nat(FF(5)) == 5
        assert f_to_nat(BN254_PRIME + 5) == 5

    def test_nat_to_f_reduces(self) -> None:
        """Naturals are reduced mod r."""
        assert nat_to_f(BN254_PRIME + 3) == FF(3)

    def test_nat_to_f_negative(self) -> None:
        """Negative numbers are rejected."""
        with pytest.raises(ValueError):
            nat_to_f(-1)

    def test_usize_to_f(self) -> None:
        """Counters embed unchanged; counters beyond r are rejected."""
        assert usize_to_f(1023) == FF(1023)
        with pytest.raises(ValueError):
            usize_to_f(BN254_PRIME)

    def test_low_k_bits(self) -> None:
        """low_k_bits masks off everything above bit k."""
        assert low_k_bits(0b110101, 3) == 0b101
        assert low_k_bits(0b110101, 0) == 0
        assert low_k_bits(5, 64) == 5

    def test_bits(self) -> None:
        """Bits are little-endian and padded to the requested width."""
        assert nat_to_bits_le(6, 4) == [0, 1, 1, 0]
        assert bits_le_to_nat([0, 1, 1, 0]) == 6

    def test_bits_too_narrow(self) -> None:
        """A value wider than the requested width is rejected."""
        with pytest.raises(ValueError):
            nat_to_bits_le(16, 4)

    def test_bits_not_boolean(self) -> None:
        """Non-boolean bits are rejected."""
        with pytest.raises(ValueError):
            bits_le_to_nat([0, 2])

    def test_limbs(self) -> None:
        """Limbs are little-endian limb_width-bit chunks."""
        n = (7 << 64) | (5 << 32) | 3
        assert nat_to_limbs(n, 32, 3) == [3, 5, 7]
        assert limbs_to_nat([3, 5, 7], 32) == n

    def test_limbs_unnormalized(self) -> None:
        """Oversized limbs carry into the next position."""
        assert limbs_to_nat([1 << 32, 0], 32) == 1 << 32
        assert limbs_to_nat([(1 << 32) + 1, 1], 32) == (2 << 32) + 1

    def test_limbs_too_few(self) -> None:
        """A value needing more limbs than requested is rejected."""
        with pytest.raises(ValueError):
            nat_to_limbs(1 << 64, 32, 2)
