"""Shared fixtures: throwaway RSA-2048 keys and a clean process-wide provider."""
import sys
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

ROOT = Path(__file__).resolve().parent.parent
for _path in (ROOT, ROOT / "WEB"):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

import licseal  # noqa: E402

_ENV_VARS = (
    licseal.ENV_PRIVATE_KEY,
    licseal.ENV_PUBLIC_KEY,
    licseal.ENV_PRIVATE_KEY_FILE,
    licseal.ENV_PUBLIC_KEY_FILE,
    licseal.ENV_KEY_PASSPHRASE,
    licseal.ENV_CONFIG_DIR,
)


@pytest.fixture(scope="session")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def public_key(private_key):
    return private_key.public_key()


@pytest.fixture(scope="session")
def other_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_pem(private_key) -> bytes:
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def public_pem(public_key) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@pytest.fixture
def provider(private_pem):
    return licseal.KeyProvider(private_pem)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Environment with no key variables and an empty config directory."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv(licseal.ENV_CONFIG_DIR, str(config_dir))
    return config_dir


@pytest.fixture(autouse=True)
def _fresh_default_provider():
    licseal.reset_default_provider()
    yield
    licseal.reset_default_provider()
