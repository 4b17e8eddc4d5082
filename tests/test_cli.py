"""Tests for the gen_certificate command-line driver."""

import json

from gen_certificate import main
from protocol.certificate import load_certificate, verify_certificate
from protocol.plan import Plan


class TestGenCertificate:
    """Tests for gen_certificate.main."""

    def test_writes_certificate(self, tmp_path, capsys) -> None:
        """A derived certificate is written and verifies against its inputs."""
        out = tmp_path / "cert.json"
        assert main(["3", "4", "--entropy", "40", "--output", str(out)]) == 0
        cert = load_certificate(str(out))
        assert verify_certificate(cert, Plan.new(40), inputs=[3, 4])
        assert f"prime: {cert.number()}" in capsys.readouterr().out

    def test_check_circuit(self, capsys) -> None:
        """--check-circuit synthesizes and reports a satisfied circuit."""
        assert main(["9", "--entropy", "29", "--check-circuit"]) == 0
        assert "circuit satisfied" in capsys.readouterr().out

    def test_config_file(self, tmp_path, capsys) -> None:
        """Entropy is read from the configuration file."""
        config = tmp_path / "h2p.json"
        config.write_text(json.dumps({"entropy": 30, "limbWidth": 16}))
        assert main(["1", "--config", str(config)]) == 0
        assert "entropy 30" in capsys.readouterr().out

    def test_exhausted(self, capsys) -> None:
        """Exit status 1 when no prime is found."""
        assert main(["1", "--entropy", "29", "--max-attempts", "0"]) == 1
        assert "No prime found" in capsys.readouterr().err

    def test_bad_entropy(self) -> None:
        """Exit status 2 on invalid configuration."""
        assert main(["1", "--entropy", "10"]) == 2

    def test_missing_config(self, tmp_path) -> None:
        """Exit status 2 when the configuration file does not exist."""
        assert main(["1", "--config", str(tmp_path / "missing.json")]) == 2
