from datetime import datetime, timedelta, timezone

import pytest
from cryptography.hazmat.primitives import hashes, serialization

from testcerts.common.config import IssueOptions
from testcerts.crypto.pki import CertTemplate, issue_leaf, issue_root
from testcerts.crypto.verify import get_cert_fingerprint, validate_cert


def test_leaf_validates_against_root(root, leaf):
    assert validate_cert(leaf.to_pem(), root.to_pem()) == (True, "")


@pytest.mark.parametrize("host", ["example.com", "EXAMPLE.com", "127.0.0.1", "::1", "0:0::1"])
def test_expected_host_matches(root, leaf, host):
    ok, error = validate_cert(leaf.to_pem(), root.to_pem(), expected_host=host)
    assert ok, error


@pytest.mark.parametrize("host", ["other.example", "127.0.0.2"])
def test_expected_host_mismatch(root, leaf, host):
    ok, error = validate_cert(leaf.to_pem(), root.to_pem(), expected_host=host)
    assert not ok
    assert "SAN mismatch" in error


def test_rogue_root_is_rejected(leaf, ec_options):
    # same subject (O=Acme Co), different key
    rogue = issue_root(ec_options)
    ok, error = validate_cert(leaf.to_pem(), rogue.to_pem())
    assert not ok
    assert error.startswith("BAD_CERT")


def test_issuer_mismatch_is_rejected(leaf):
    other = issue_root(IssueOptions(key_algorithm="ec", org_name="Other Org"))
    ok, error = validate_cert(leaf.to_pem(), other.to_pem())
    assert not ok
    assert "issuer mismatch" in error


def test_expired_cert_is_rejected(root):
    now = datetime.now(timezone.utc).replace(microsecond=0)
    template = CertTemplate(
        org_name="Acme Co",
        serial_number=1,
        not_before=now - timedelta(days=60),
        not_after=now - timedelta(days=30),
        dns_names=["expired.example"],
    )
    expired = template.to_builder(
        root.private_key.public_key(), root.certificate.subject
    ).sign(root.private_key.key, hashes.SHA256())

    ok, error = validate_cert(expired.public_bytes(serialization.Encoding.PEM), root.to_pem())
    assert not ok
    assert "expired" in error


def test_garbage_pem(root):
    ok, error = validate_cert(b"not a certificate", root.to_pem())
    assert not ok
    assert "could not parse" in error


def test_fingerprint(leaf):
    fingerprint = get_cert_fingerprint(leaf.to_pem())
    assert len(fingerprint) == 64
    assert fingerprint == leaf.certificate.fingerprint(hashes.SHA256()).hex()


@pytest.fixture(scope="module")
def wildcard_leaf(root, ec_options):
    return issue_leaf(root, "*.example.org", options=ec_options)


@pytest.mark.parametrize("host, expected", [
    ("a.example.org", True),
    ("API.Example.org", True),
    ("example.org", False),
    ("a.b.example.org", False),
    ("a.example.com", False),
])
def test_wildcard_san(root, wildcard_leaf, host, expected):
    ok, _ = validate_cert(wildcard_leaf.to_pem(), root.to_pem(), expected_host=host)
    assert ok is expected
