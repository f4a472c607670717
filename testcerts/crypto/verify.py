"""X.509 checks for issued certs: signed-by-CA, validity window, SAN host match."""
import ipaddress
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes


def subject_alt_names(cert: x509.Certificate) -> Tuple[List[str], list]:
    """Return (dns_names, ip_addresses) from the SAN extension; empty lists if absent."""
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return [], []
    return san.get_values_for_type(x509.DNSName), san.get_values_for_type(x509.IPAddress)


def _dns_name_matches(pattern: str, host: str) -> bool:
    pattern, host = pattern.lower().rstrip("."), host.lower().rstrip(".")
    if pattern.startswith("*."):
        # wildcard covers exactly one leftmost label
        label, _, rest = host.partition(".")
        return bool(label) and rest == pattern[2:]
    return pattern == host


def _host_matches(cert: x509.Certificate, host: str) -> bool:
    dns_names, ip_addresses = subject_alt_names(cert)
    try:
        return ipaddress.ip_address(host) in ip_addresses
    except ValueError:
        return any(_dns_name_matches(name, host) for name in dns_names)


def validate_cert(
    cert_pem: bytes,
    ca_cert_pem: bytes,
    expected_host: Optional[str] = None
) -> Tuple[bool, str]:
    """
    Validate a certificate against the CA that issued it.

    Checks:
    - Certificate issuer matches the CA subject and the signature verifies
    - Certificate is within its validity period
    - expected_host (if provided) matches a SAN DNS name (single-label
      wildcards included) or IP address

    Args:
        cert_pem: Certificate to validate (PEM format)
        ca_cert_pem: CA certificate (PEM format)
        expected_host: Host name or IP literal (optional)

    Returns:
        (is_valid, error_message) tuple
        If valid: (True, "")
        If invalid: (False, "error description")
    """
    try:
        cert = x509.load_pem_x509_certificate(cert_pem, default_backend())
        ca_cert = x509.load_pem_x509_certificate(ca_cert_pem, default_backend())
    except ValueError as e:
        return (False, f"BAD_CERT: could not parse certificate - {e}")

    # Check 1: issuer name + signature
    try:
        cert.verify_directly_issued_by(ca_cert)
    except (ValueError, TypeError) as e:
        return (False, f"BAD_CERT: issuer mismatch - {e}")
    except InvalidSignature:
        return (False, "BAD_CERT: signature verification failed")

    # Check 2: validity period
    now = datetime.now(timezone.utc)
    if now < cert.not_valid_before_utc:
        return (False, f"BAD_CERT: certificate not yet valid (starts {cert.not_valid_before_utc})")
    if now > cert.not_valid_after_utc:
        return (False, f"BAD_CERT: certificate expired (ended {cert.not_valid_after_utc})")

    # Check 3: SAN
    if expected_host and not _host_matches(cert, expected_host):
        return (False, f"BAD_CERT: SAN mismatch (expected '{expected_host}')")

    return (True, "")


def get_cert_fingerprint(cert_pem: bytes) -> str:
    """
    Get SHA-256 fingerprint of certificate.

    Args:
        cert_pem: Certificate in PEM format

    Returns:
        Hex fingerprint string
    """
    cert = x509.load_pem_x509_certificate(cert_pem, default_backend())
    return cert.fingerprint(hashes.SHA256()).hex()
