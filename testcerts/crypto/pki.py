"""Root CA and leaf issuance: templates, serials, SAN classification, signing."""
import ipaddress
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import cached_property
from ipaddress import IPv4Address, IPv6Address
from typing import Iterable, Literal, Optional, Tuple, Union
from cryptography import x509
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID
from pydantic import BaseModel, ConfigDict

from testcerts.common.config import IssueOptions
from testcerts.common.errors import GenerationError, RandomnessError, SigningError
from testcerts.crypto.keys import PrivateKey


SERIAL_NUMBER_LIMIT = 1 << 128

EXT_KEY_USAGES = {
    "serverAuth": ExtendedKeyUsageOID.SERVER_AUTH,
    "clientAuth": ExtendedKeyUsageOID.CLIENT_AUTH,
}

IPAddress = Union[IPv4Address, IPv6Address]


class CertTemplate(BaseModel):
    """Everything that goes into the to-be-signed part of a certificate."""
    model_config = ConfigDict(frozen=True)

    org_name: str
    serial_number: int
    not_before: datetime
    not_after: datetime
    is_ca: bool = False
    digital_signature: bool = True
    key_encipherment: bool = True
    key_cert_sign: bool = False
    ext_key_usage: Tuple[Literal["serverAuth", "clientAuth"], ...] = ("serverAuth",)
    dns_names: Tuple[str, ...] = ()
    ip_addresses: Tuple[IPAddress, ...] = ()

    def subject_name(self) -> x509.Name:
        return x509.Name([
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, self.org_name),
        ])

    def to_builder(self, public_key, issuer_name: x509.Name) -> x509.CertificateBuilder:
        """Turn the template into a CertificateBuilder for `public_key`, issued by `issuer_name`."""
        builder = (
            x509.CertificateBuilder()
            .subject_name(self.subject_name())
            .issuer_name(issuer_name)
            .public_key(public_key)
            .serial_number(self.serial_number)
            .not_valid_before(self.not_before)
            .not_valid_after(self.not_after)
            .add_extension(
                x509.BasicConstraints(ca=self.is_ca, path_length=None),
                critical=True,
            )
            .add_extension(
                x509.KeyUsage(
                    digital_signature=self.digital_signature,
                    key_encipherment=self.key_encipherment,
                    key_cert_sign=self.key_cert_sign,
                    content_commitment=False,
                    data_encipherment=False,
                    key_agreement=False,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.ExtendedKeyUsage([EXT_KEY_USAGES[u] for u in self.ext_key_usage]),
                critical=False,
            )
        )

        # SAN must hold at least one name
        names = [x509.DNSName(n) for n in self.dns_names]
        names += [x509.IPAddress(ip) for ip in self.ip_addresses]
        if names:
            builder = builder.add_extension(x509.SubjectAlternativeName(names), critical=False)

        return builder

    @classmethod
    def from_certificate(cls, cert: x509.Certificate) -> "CertTemplate":
        """Rebuild a template from an already-issued certificate."""
        orgs = cert.subject.get_attributes_for_oid(NameOID.ORGANIZATION_NAME)

        def extension(ext_type):
            try:
                return cert.extensions.get_extension_for_class(ext_type).value
            except x509.ExtensionNotFound:
                return None

        constraints = extension(x509.BasicConstraints)
        key_usage = extension(x509.KeyUsage)
        ext_key_usage = extension(x509.ExtendedKeyUsage)
        san = extension(x509.SubjectAlternativeName)

        known_ekus = {oid: name for name, oid in EXT_KEY_USAGES.items()}

        return cls(
            org_name=orgs[0].value if orgs else "",
            serial_number=cert.serial_number,
            not_before=cert.not_valid_before_utc,
            not_after=cert.not_valid_after_utc,
            is_ca=constraints.ca if constraints is not None else False,
            digital_signature=key_usage.digital_signature if key_usage is not None else False,
            key_encipherment=key_usage.key_encipherment if key_usage is not None else False,
            key_cert_sign=key_usage.key_cert_sign if key_usage is not None else False,
            ext_key_usage=tuple(known_ekus[oid] for oid in ext_key_usage if oid in known_ekus)
            if ext_key_usage is not None else (),
            dns_names=tuple(san.get_values_for_type(x509.DNSName)) if san is not None else (),
            ip_addresses=tuple(san.get_values_for_type(x509.IPAddress)) if san is not None else (),
        )


@dataclass(frozen=True)
class Cert:
    """An issued certificate: its template, signed DER bytes and private key."""
    template: CertTemplate
    der: bytes
    private_key: PrivateKey

    @cached_property
    def certificate(self) -> x509.Certificate:
        return x509.load_der_x509_certificate(self.der, default_backend())

    def to_pem(self) -> bytes:
        """Wrap the DER bytes in a CERTIFICATE PEM block."""
        return self.certificate.public_bytes(serialization.Encoding.PEM)

    def key_pem(self) -> bytes:
        return self.private_key.to_pem()

    def __str__(self) -> str:
        return self.to_pem().decode("ascii")

    @classmethod
    def from_pem(cls, cert_pem: bytes, key_pem: bytes) -> "Cert":
        """
        Load a previously issued certificate and its private key.

        Raises:
            ValueError if either PEM block cannot be parsed
            UnsupportedKeyTypeError if the key is neither RSA nor EC
            SigningError if the key does not belong to the certificate
        """
        cert = x509.load_pem_x509_certificate(cert_pem, default_backend())
        private_key = PrivateKey.from_pem(key_pem)

        spki = serialization.PublicFormat.SubjectPublicKeyInfo
        der = serialization.Encoding.DER
        if cert.public_key().public_bytes(der, spki) != private_key.public_key().public_bytes(der, spki):
            raise SigningError("private key does not match certificate public key")

        return cls(
            CertTemplate.from_certificate(cert),
            cert.public_bytes(serialization.Encoding.DER),
            private_key,
        )


def random_serial() -> int:
    """
    Return a random serial number in [1, 2**128).

    Raises:
        RandomnessError if the system random source fails
    """
    try:
        return secrets.randbelow(SERIAL_NUMBER_LIMIT - 1) + 1
    except (OSError, NotImplementedError) as e:
        raise RandomnessError(f"failed to generate serial number: {e}") from e


def classify_hosts(hosts: Iterable[str]) -> Tuple[Tuple[str, ...], Tuple[IPAddress, ...]]:
    """
    Split host strings into (dns_names, ip_addresses).

    IPv4/IPv6 literals become IP addresses; everything else is a DNS name.
    Input order is kept within each list.
    """
    dns_names, ip_addresses = [], []
    for host in hosts:
        # zoned IPv6 literals (fe80::1%eth0) have no SAN encoding
        if "%" in host:
            dns_names.append(host)
            continue
        try:
            ip_addresses.append(ipaddress.ip_address(host))
        except ValueError:
            dns_names.append(host)
    return tuple(dns_names), tuple(ip_addresses)


def _new_template(options: IssueOptions, **fields) -> CertTemplate:
    serial_number = random_serial()
    not_before = datetime.now(timezone.utc).replace(microsecond=0)
    try:
        not_after = not_before + timedelta(days=options.validity_days)
    except OverflowError as e:
        raise GenerationError(f"validity of {options.validity_days} days runs past year 9999") from e
    return CertTemplate(
        org_name=options.org_name,
        serial_number=serial_number,
        not_before=not_before,
        not_after=not_after,
        **fields,
    )


def _generate_key(options: IssueOptions) -> PrivateKey:
    return PrivateKey.generate(options.key_algorithm, options.key_size, options.curve)


def _create_certificate(
    template: CertTemplate,
    public_key,
    issuer_name: x509.Name,
    signer: PrivateKey
) -> bytes:
    """Build and sign `template` with `signer`; return the DER bytes."""
    try:
        cert = template.to_builder(public_key, issuer_name).sign(
            signer.key, hashes.SHA256(), default_backend()
        )
    except (ValueError, TypeError) as e:
        raise SigningError(f"failed to create certificate: {e}") from e
    return cert.public_bytes(serialization.Encoding.DER)


def issue_root(options: Optional[IssueOptions] = None) -> Cert:
    """
    Issue a self-signed root CA certificate.

    The root has CA=true, key usage digital signature + key encipherment +
    certificate signing, and extended key usage server authentication.

    Args:
        options: Issuance options (defaults to IssueOptions())

    Returns:
        The root Cert

    Raises:
        RandomnessError if no serial number could be generated
        GenerationError if the validity window runs past year 9999
        SigningError if the certificate could not be created
    """
    options = options or IssueOptions()

    private_key = _generate_key(options)
    template = _new_template(options, is_ca=True, key_cert_sign=True)

    # self-signed: issuer == subject
    der = _create_certificate(
        template, private_key.public_key(), template.subject_name(), private_key
    )
    return Cert(template, der, private_key)


def issue_leaf(authority: Cert, *hosts: str, options: Optional[IssueOptions] = None) -> Cert:
    """
    Issue a server certificate for `hosts`, signed by `authority`.

    Each host that parses as an IP literal goes into the IP address SAN list,
    the rest into the DNS name list. The leaf has CA=false and does not carry
    the certificate signing key usage.

    Args:
        authority: Root Cert that signs the leaf
        *hosts: Host names and/or IP literals
        options: Issuance options (defaults to IssueOptions())

    Returns:
        The leaf Cert

    Raises:
        RandomnessError if no serial number could be generated
        GenerationError if the validity window runs past year 9999
        SigningError if the authority is not a CA or signing fails
    """
    options = options or IssueOptions()

    if authority.private_key is None or not authority.template.is_ca:
        raise SigningError("authority must be a CA certificate with a private key")

    private_key = _generate_key(options)
    dns_names, ip_addresses = classify_hosts(hosts)
    template = _new_template(options, dns_names=dns_names, ip_addresses=ip_addresses)

    der = _create_certificate(
        template,
        private_key.public_key(),
        authority.certificate.subject,
        authority.private_key,
    )
    return Cert(template, der, private_key)
