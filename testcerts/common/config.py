"""Issuance options (org name, validity, key type) + .env loading."""
import os
from typing import Literal
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_ORG_NAME = "Acme Co"
DEFAULT_VALIDITY_DAYS = 10000  # nearly 30 years
DEFAULT_KEY_SIZE = 2048
DEFAULT_CURVE = "secp256r1"


class IssueOptions(BaseModel):
    """Parameters shared by root and leaf issuance."""
    model_config = ConfigDict(frozen=True)

    org_name: str = Field(default=DEFAULT_ORG_NAME, min_length=1)
    validity_days: int = Field(default=DEFAULT_VALIDITY_DAYS, gt=0)
    key_algorithm: Literal["rsa", "ec"] = "rsa"
    key_size: int = Field(default=DEFAULT_KEY_SIZE, ge=1024)  # RSA only
    curve: Literal["secp256r1", "secp384r1", "secp521r1"] = DEFAULT_CURVE  # EC only


def load_options(**overrides) -> IssueOptions:
    """
    Build IssueOptions from the environment (and .env, if present).

    Reads CERT_ORG_NAME, CERT_VALIDITY_DAYS, CERT_KEY_ALGORITHM, CERT_KEY_SIZE
    and CERT_EC_CURVE. Keyword overrides with a non-None value win over the
    environment.

    Raises:
        pydantic.ValidationError if a value is out of range
    """
    load_dotenv()

    values = {
        "org_name": os.getenv("CERT_ORG_NAME", DEFAULT_ORG_NAME),
        "validity_days": os.getenv("CERT_VALIDITY_DAYS", DEFAULT_VALIDITY_DAYS),
        "key_algorithm": os.getenv("CERT_KEY_ALGORITHM", "rsa"),
        "key_size": os.getenv("CERT_KEY_SIZE", DEFAULT_KEY_SIZE),
        "curve": os.getenv("CERT_EC_CURVE", DEFAULT_CURVE),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return IssueOptions(**values)
