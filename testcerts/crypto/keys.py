"""Private keys as an RSA/EC tagged variant, with PEM rendering."""
from dataclasses import dataclass
from enum import Enum
from typing import Union
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from testcerts.common.errors import (
    GenerationError,
    KeyEncodingError,
    UnsupportedKeyTypeError,
)


CURVES = {
    "secp256r1": ec.SECP256R1,
    "secp384r1": ec.SECP384R1,
    "secp521r1": ec.SECP521R1,
}


class KeyAlgorithm(str, Enum):
    RSA = "rsa"
    EC = "ec"


PEM_TYPES = {
    KeyAlgorithm.RSA: "RSA PRIVATE KEY",
    KeyAlgorithm.EC: "EC PRIVATE KEY",
}


@dataclass(frozen=True)
class PrivateKey:
    """
    A private key tagged with its algorithm.

    The tag decides the PEM block type: PKCS#1 "RSA PRIVATE KEY" for RSA,
    SEC1 "EC PRIVATE KEY" for elliptic-curve keys.
    """
    algorithm: KeyAlgorithm
    key: Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]

    @classmethod
    def generate(
        cls,
        algorithm: str = "rsa",
        key_size: int = 2048,
        curve: str = "secp256r1"
    ) -> "PrivateKey":
        """
        Generate a fresh key pair.

        Args:
            algorithm: "rsa" or "ec"
            key_size: RSA modulus size in bits (ignored for EC)
            curve: EC curve name (ignored for RSA)

        Raises:
            GenerationError if the parameters are rejected
        """
        algorithm = KeyAlgorithm(algorithm)
        try:
            if algorithm is KeyAlgorithm.RSA:
                key = rsa.generate_private_key(
                    public_exponent=65537,
                    key_size=key_size,
                    backend=default_backend()
                )
            else:
                if curve not in CURVES:
                    raise ValueError(f"unknown curve '{curve}'")
                key = ec.generate_private_key(CURVES[curve](), default_backend())
        except ValueError as e:
            raise GenerationError(f"failed to generate {algorithm.value} key: {e}") from e
        return cls(algorithm, key)

    @classmethod
    def from_key(cls, key) -> "PrivateKey":
        """Wrap a cryptography private key object; other key types are rejected."""
        if isinstance(key, rsa.RSAPrivateKey):
            return cls(KeyAlgorithm.RSA, key)
        if isinstance(key, ec.EllipticCurvePrivateKey):
            return cls(KeyAlgorithm.EC, key)
        raise UnsupportedKeyTypeError(f"unsupported private key type: {type(key).__name__}")

    @classmethod
    def from_pem(cls, data: bytes) -> "PrivateKey":
        """Load an unencrypted PEM private key."""
        key = serialization.load_pem_private_key(data, password=None, backend=default_backend())
        return cls.from_key(key)

    @property
    def pem_type(self) -> str:
        return PEM_TYPES[self.algorithm]

    def public_key(self):
        return self.key.public_key()

    def to_pem(self) -> bytes:
        """
        Render the key as a PEM block.

        Raises:
            KeyEncodingError if the key cannot be serialized
        """
        try:
            return self.key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.NoEncryption(),
            )
        except (ValueError, TypeError) as e:
            raise KeyEncodingError(f"unable to marshal {self.algorithm.value} private key: {e}") from e


def pem_block_for_key(key) -> bytes:
    """
    PEM-encode a raw private key object (RSA or EC).

    Raises:
        UnsupportedKeyTypeError for any other key type
        KeyEncodingError if serialization fails
    """
    if isinstance(key, PrivateKey):
        return key.to_pem()
    return PrivateKey.from_key(key).to_pem()
