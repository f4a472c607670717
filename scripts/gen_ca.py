"""Create a throwaway Root CA (self-signed X.509) and write it as PEM.

Needs the testcerts package importable: `pip install -e .` first.
"""
import argparse
import os

from testcerts.common.config import load_options
from testcerts.crypto.pki import Cert, issue_root


def generate_ca(
    org_name: str = None,
    output_dir: str = "certs",
    key_type: str = None,
    key_size: int = None,
    validity_days: int = None
) -> Cert:
    """
    Generate a self-signed Root CA certificate and private key.

    Unset arguments fall back to CERT_* environment variables, then defaults.

    Args:
        org_name: Organization name for the CA subject (e.g., "Acme Co")
        output_dir: Directory to save cert and key
        key_type: "rsa" or "ec"
        key_size: RSA key size in bits
        validity_days: Certificate validity period in days
    """
    options = load_options(
        org_name=org_name,
        key_algorithm=key_type,
        key_size=key_size,
        validity_days=validity_days,
    )
    os.makedirs(output_dir, exist_ok=True)

    print(f"[*] Issuing self-signed root for '{options.org_name}' ({options.key_algorithm} key)...")
    ca = issue_root(options)

    key_path = os.path.join(output_dir, "ca-key.pem")
    cert_path = os.path.join(output_dir, "ca-cert.pem")

    print(f"[*] Saving private key to {key_path}")
    with open(key_path, "wb") as f:
        f.write(ca.key_pem())
    os.chmod(key_path, 0o600)

    print(f"[*] Saving certificate to {cert_path}")
    with open(cert_path, "wb") as f:
        f.write(ca.to_pem())

    print(f"\n[+] Root CA generated successfully!")
    print(f"    Certificate: {cert_path}")
    print(f"    Private Key: {key_path}")
    print(f"    Serial: {ca.template.serial_number:x}")
    print(f"    Valid for: {options.validity_days} days")
    print(f"\n[!] Test credentials only; do NOT use this CA outside test environments!")
    return ca


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate a test Root CA certificate")
    parser.add_argument(
        "--org",
        default=None,
        help="Organization name for the CA (default: $CERT_ORG_NAME or 'Acme Co')"
    )
    parser.add_argument(
        "--out",
        default="certs",
        help="Output directory (default: certs)"
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
    generate_ca(args.org, args.out, args.key_type, args.keysize, args.days)


if __name__ == "__main__":
    main()
