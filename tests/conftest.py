"""Shared fixtures for planhook tests."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import SecretStr

from planhook.config import AppConfig

from .helpers import WEBHOOK_SECRET


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)

@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key) -> str:
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()

@pytest.fixture
def app_config(private_key_pem) -> AppConfig:
    return AppConfig(
        webhook_secret=SecretStr(WEBHOOK_SECRET),
        app_id="1234",
        private_key=SecretStr(private_key_pem),
        gcp_project_id="infra-proj",
        tool_version="1.7.2",
    )
