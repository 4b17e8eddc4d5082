"""Exceptions raised by prime derivation."""


class PocklingtonError(Exception):
    """Base class for derivation failures."""
    pass


class ExtensionExhausted(PocklingtonError):
    """No nonce in the planned range produced a certifiable extension.

    Attributes:
        certificate: The certificate the failed extension started from
    """

    def __init__(self, certificate, message: str = "nonce range exhausted"):
        super().__init__(message)
        self.certificate = certificate
