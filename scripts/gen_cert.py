"""Issue a server cert signed by the test Root CA (SAN = given hosts/IPs).

Needs the testcerts package importable: `pip install -e .` first.
"""
import argparse
import os
import sys

from testcerts.common.config import load_options
from testcerts.crypto.pki import Cert, issue_leaf
from testcerts.crypto.verify import get_cert_fingerprint


def load_ca(ca_cert_path: str, ca_key_path: str) -> Cert:
    """Load CA certificate and private key."""
    with open(ca_cert_path, "rb") as f:
        cert_pem = f.read()

    with open(ca_key_path, "rb") as f:
        key_pem = f.read()

    return Cert.from_pem(cert_pem, key_pem)


def generate_cert(
    hosts: list,
    output_prefix: str,
    ca_cert_path: str = "certs/ca-cert.pem",
    ca_key_path: str = "certs/ca-key.pem",
    key_type: str = None,
    key_size: int = None,
    validity_days: int = None
) -> Cert:
    """
    Generate a certificate signed by the Root CA.

    Args:
        hosts: Host names and/or IP literals (e.g., ["localhost", "127.0.0.1"])
        output_prefix: Output file prefix (e.g., "certs/server")
        ca_cert_path: Path to CA certificate
        ca_key_path: Path to CA private key
        key_type: "rsa" or "ec"
        key_size: RSA key size in bits
        validity_days: Certificate validity period in days
    """
    print(f"[*] Loading CA certificate and key...")
    ca = load_ca(ca_cert_path, ca_key_path)

    options = load_options(
        org_name=ca.template.org_name or None,
        key_algorithm=key_type,
        key_size=key_size,
        validity_days=validity_days,
    )

    print(f"[*] Issuing certificate for {', '.join(hosts) or '(no hosts)'} signed by CA...")
    cert = issue_leaf(ca, *hosts, options=options)

    os.makedirs(os.path.dirname(output_prefix) or ".", exist_ok=True)

    key_path = f"{output_prefix}-key.pem"
    cert_path = f"{output_prefix}-cert.pem"

    print(f"[*] Saving private key to {key_path}")
    with open(key_path, "wb") as f:
        f.write(cert.key_pem())
    os.chmod(key_path, 0o600)

    print(f"[*] Saving certificate to {cert_path}")
    with open(cert_path, "wb") as f:
        f.write(cert.to_pem())

    print(f"\n[+] Certificate generated successfully!")
    print(f"    DNS names: {', '.join(cert.template.dns_names) or '-'}")
    print(f"    IP addresses: {', '.join(str(ip) for ip in cert.template.ip_addresses) or '-'}")
    print(f"    Certificate: {cert_path}")
    print(f"    Private Key: {key_path}")
    print(f"    SHA-256: {get_cert_fingerprint(cert.to_pem())}")
    print(f"    Valid for: {options.validity_days} days")
    return cert


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate certificate signed by the test Root CA")
    parser.add_argument(
        "hosts",
        nargs="*",
        help="Host names and/or IP addresses (e.g., localhost 127.0.0.1 ::1)"
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Output file prefix (e.g., certs/server)"
    )
    parser.add_argument(
        "--ca-cert",
        default="certs/ca-cert.pem",
        help="Path to CA certificate (default: certs/ca-cert.pem)"
    )
    parser.add_argument(
        "--ca-key",
        default="certs/ca-key.pem",
        help="Path to CA private key (default: certs/ca-key.pem)"
    )
    parser.add_argument(
        "--key-type",
        choices=["rsa", "ec"],
        default=None,
        help="Key algorithm (default: $CERT_KEY_ALGORITHM or rsa)"
    )
    parser.add_argument(
        "--keysize",
        type=int,
        default=None,
        help="RSA key size in bits (default: $CERT_KEY_SIZE or 2048)"
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Validity period in days (default: $CERT_VALIDITY_DAYS or 10000)"
    )

    args = parser.parse_args(argv)

    if not os.path.exists(args.ca_cert) or not os.path.exists(args.ca_key):
        print("[!] CA not found. Run scripts/gen_ca.py first.")
        sys.exit(1)

    generate_cert(
        args.hosts,
        args.out,
        args.ca_cert,
        args.ca_key,
        args.key_type,
        args.keysize,
        args.days
    )


if __name__ == "__main__":
    main()
