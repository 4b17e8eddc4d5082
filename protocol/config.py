"""Configuration of a hash-to-prime instance."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict

from protocol.hasher import Hasher, PoseidonHasher
from protocol.plan import MIN_ENTROPY, Plan

# Hashers selectable from configuration files
HASHERS = {
    "poseidon2": PoseidonHasher,
}

# Limbs must hold a 32-bit seed in one limb on the narrow end and keep
# polynomial-product coefficients far from the field size on the wide end
MIN_LIMB_WIDTH = 8
MAX_LIMB_WIDTH = 64


@dataclass
class HashToPrimeConfig:
    """Parameters shared by the prover and the circuit verifier.

    Fields:
        entropy: Bits of entropy in the derived prime (at least 29)
        limb_width: Bits per BigNat limb in the circuit
        hasher: Hash keying the entropy stream
    """
    entropy: int
    limb_width: int = 32
    hasher: Hasher = field(default_factory=PoseidonHasher)

    def __post_init__(self) -> None:
        if self.entropy < MIN_ENTROPY:
            raise ValueError(f"entropy must be at least {MIN_ENTROPY}, got {self.entropy}")
        if not MIN_LIMB_WIDTH <= self.limb_width <= MAX_LIMB_WIDTH:
            raise ValueError(
                f"limb_width must be in [{MIN_LIMB_WIDTH}, {MAX_LIMB_WIDTH}], got {self.limb_width}"
            )

    @property
    def plan(self) -> Plan:
        return Plan.new(self.entropy)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HashToPrimeConfig":
        """Build from a parsed configuration.

        Example:
        {
          "entropy": 128,
          "limbWidth": 32,
          "hasher": "poseidon2"
        }
        """
        if "entropy" not in data:
            raise ValueError("configuration needs an 'entropy' field")
        hasher_name = data.get("hasher", "poseidon2")
        if hasher_name not in HASHERS:
            raise ValueError(f"unknown hasher {hasher_name!r}, expected one of {sorted(HASHERS)}")
        return cls(
            entropy=int(data["entropy"]),
            limb_width=int(data.get("limbWidth", 32)),
            hasher=HASHERS[hasher_name](),
        )

    @classmethod
    def from_json(cls, path: str) -> "HashToPrimeConfig":
        with open(path, 'r') as f:
            return cls.from_dict(json.load(f))
