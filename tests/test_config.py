import pytest
from pydantic import ValidationError

from testcerts.common.config import IssueOptions, load_options


def test_defaults():
    options = IssueOptions()
    assert options.org_name == "Acme Co"
    assert options.validity_days == 10000
    assert options.key_algorithm == "rsa"
    assert options.key_size == 2048
    assert options.curve == "secp256r1"


def test_options_are_frozen():
    options = IssueOptions()
    with pytest.raises(ValidationError):
        options.org_name = "Other"


@pytest.mark.parametrize("field, value", [
    ("org_name", ""),
    ("validity_days", 0),
    ("key_algorithm", "dsa"),
    ("key_size", 512),
    ("curve", "brainpoolP256r1"),
])
def test_invalid_options(field, value):
    with pytest.raises(ValidationError):
        IssueOptions(**{field: value})


def test_load_options_without_env():
    assert load_options() == IssueOptions()


def test_load_options_from_env(monkeypatch):
    monkeypatch.setenv("CERT_ORG_NAME", "Env Org")
    monkeypatch.setenv("CERT_VALIDITY_DAYS", "30")
    monkeypatch.setenv("CERT_KEY_ALGORITHM", "ec")
    monkeypatch.setenv("CERT_EC_CURVE", "secp384r1")

    options = load_options()
    assert options.org_name == "Env Org"
    assert options.validity_days == 30
    assert options.key_algorithm == "ec"
    assert options.curve == "secp384r1"


def test_overrides_win_over_env(monkeypatch):
    monkeypatch.setenv("CERT_ORG_NAME", "Env Org")
    monkeypatch.setenv("CERT_KEY_SIZE", "4096")

    options = load_options(org_name="Explicit Org", key_size=None)
    assert options.org_name == "Explicit Org"
    assert options.key_size == 4096


def test_bad_env_value(monkeypatch):
    monkeypatch.setenv("CERT_VALIDITY_DAYS", "-5")
    with pytest.raises(ValidationError):
        load_options()
