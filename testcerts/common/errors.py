"""Exceptions raised while issuing certificates and encoding keys."""


class CertGenError(Exception):
    """Base class for all testcerts errors."""
    pass


class GenerationError(CertGenError):
    """Certificate issuance failed."""
    pass


class RandomnessError(GenerationError):
    """The system random source could not produce a serial number."""
    pass


class SigningError(GenerationError):
    """The certificate builder rejected the template or key material."""
    pass


class KeyEncodingError(CertGenError):
    """A private key could not be serialized to PEM."""
    pass


class UnsupportedKeyTypeError(KeyEncodingError):
    """Private key type has no defined PEM encoding here."""
    pass
