"""Shared pytest fixtures."""
import pytest

from testcerts.common.config import IssueOptions
from testcerts.crypto.pki import issue_leaf, issue_root

ENV_VARS = (
    "CERT_ORG_NAME",
    "CERT_VALIDITY_DAYS",
    "CERT_KEY_ALGORITHM",
    "CERT_KEY_SIZE",
    "CERT_EC_CURVE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def ec_options() -> IssueOptions:
    # EC keys keep the suite fast; RSA is covered by rsa_root
    return IssueOptions(key_algorithm="ec")


@pytest.fixture(scope="session")
def root(ec_options):
    return issue_root(ec_options)


@pytest.fixture(scope="session")
def leaf(root, ec_options):
    return issue_leaf(root, "example.com", "127.0.0.1", "::1", options=ec_options)


@pytest.fixture(scope="session")
def rsa_root():
    return issue_root()
