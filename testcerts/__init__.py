"""Ephemeral X.509 root CAs and leaf certificates for testing TLS services."""
from testcerts.common.config import IssueOptions, load_options
from testcerts.common.errors import (
    CertGenError,
    GenerationError,
    KeyEncodingError,
    RandomnessError,
    SigningError,
    UnsupportedKeyTypeError,
)
from testcerts.crypto.keys import KeyAlgorithm, PrivateKey, pem_block_for_key
from testcerts.crypto.pki import Cert, CertTemplate, issue_leaf, issue_root

__all__ = [
    "Cert",
    "CertGenError",
    "CertTemplate",
    "GenerationError",
    "IssueOptions",
    "KeyAlgorithm",
    "KeyEncodingError",
    "PrivateKey",
    "RandomnessError",
    "SigningError",
    "UnsupportedKeyTypeError",
    "issue_leaf",
    "issue_root",
    "load_options",
    "pem_block_for_key",
]
