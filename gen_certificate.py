"""Derive a Pocklington prime from field elements and write its certificate.

Usage:
    python gen_certificate.py 1 2 3 --entropy 128 --output cert.json
    python gen_certificate.py 7 --config h2p.json --check-circuit

Exit status is 0 on success, 1 if no prime was found (or the circuit check
failed), 2 on invalid arguments or configuration.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from protocol.certificate import certificate_to_json, save_certificate
from protocol.config import HashToPrimeConfig
from protocol.prover import HashToPrime
from protocol.verifier import CircuitVerifier

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Hash field elements to a prime with a Pocklington certificate"
    )
    parser.add_argument("inputs", nargs="+", type=int, help="Input field elements (decimal)")
    parser.add_argument(
        "--entropy", "-e",
        type=int,
        default=None,
        help="Bits of entropy in the derived prime (default: 128, or the config's)"
    )
    parser.add_argument(
        "--config", "-c",
        help="JSON configuration file (entropy, limbWidth, hasher)"
    )
    parser.add_argument(
        "--output", "-o",
        help="Output JSON file for the certificate"
    )
    parser.add_argument(
        "--check-circuit",
        action="store_true",
        help="Synthesize the verification circuit and check it is satisfied"
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Limit on outer hash attempts"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    return parser.parse_args(argv)


def _load_config(args: argparse.Namespace) -> HashToPrimeConfig:
    if args.config:
        config = HashToPrimeConfig.from_json(args.config)
        if args.entropy is not None:
            config = HashToPrimeConfig(args.entropy, config.limb_width, config.hasher)
        return config
    return HashToPrimeConfig(entropy=args.entropy if args.entropy is not None else 128)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    try:
        config = _load_config(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    logger.debug("plan: %s", json.dumps(config.plan.to_dict()))

    certificate = HashToPrime(config).derive(args.inputs, max_attempts=args.max_attempts)
    if certificate is None:
        print("No prime found within the nonce range", file=sys.stderr)
        return 1

    print(f"prime: {certificate.number()}")
    print(f"bits: {certificate.bit_length()} (entropy {config.entropy}, max {config.plan.max_bits()})")

    if args.output:
        save_certificate(certificate, args.output)
        print(f"Certificate written to: {args.output}")
    else:
        logger.debug("certificate: %s", json.dumps(certificate_to_json(certificate)))

    if args.check_circuit:
        report = CircuitVerifier(config).check(args.inputs, certificate)
        print(
            f"circuit: {report.num_constraints} constraints, "
            f"{report.num_range_checks} range checks, "
            f"{report.num_variables} variables"
        )
        if not report.satisfied:
            print(f"circuit NOT satisfied at {report.unsatisfied}", file=sys.stderr)
            return 1
        print("circuit satisfied")

    return 0


if __name__ == "__main__":
    sys.exit(main())
