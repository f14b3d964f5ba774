"""
Test helper functions and factory methods for the Aplos token sidecar.
"""

import base64
from dataclasses import dataclass
from typing import Any, Dict

import httpx
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from shared.config import DEFAULT_ALLOWED_NETWORKS, SidecarConfig

TEST_CLIENT_ID = "test-client-id"
TEST_APLOS_BASE_URL = "https://aplos.test/hermes/api/v1"
LOCAL_CLIENT = ("127.0.0.1", 50123)


@dataclass
class KeyPair:
    """RSA key pair plus the env-style encodings of the private half."""
    private_key: rsa.RSAPrivateKey
    public_key: rsa.RSAPublicKey
    private_pem: str
    bare_base64: str

    @property
    def escaped_pem(self) -> str:
        """PEM with newlines escaped, as it often appears in .env files."""
        return self.private_pem.strip().replace("\n", "\\n")


def generate_key_pair(key_size: int = 2048) -> KeyPair:
    """Generate a fresh RSA key pair for tests."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
    der = private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return KeyPair(
        private_key=private_key,
        public_key=private_key.public_key(),
        private_pem=private_pem,
        bare_base64=base64.b64encode(der).decode("ascii"),
    )


def _padding_for(scheme: str) -> padding.AsymmetricPadding:
    if scheme == "oaep-sha256":
        return padding.OAEP(mgf=padding.MGF1(algorithm=hashes.SHA256()), algorithm=hashes.SHA256(), label=None)
    if scheme == "oaep-sha1":
        return padding.OAEP(mgf=padding.MGF1(algorithm=hashes.SHA1()), algorithm=hashes.SHA1(), label=None)
    if scheme == "pkcs1v15":
        return padding.PKCS1v15()
    raise ValueError(f"Unknown padding scheme: {scheme}")


def encrypt_token(public_key: rsa.RSAPublicKey, plaintext: str, scheme: str = "oaep-sha256") -> str:
    """Encrypt ``plaintext`` the way Aplos would and base64 it."""
    ciphertext = public_key.encrypt(plaintext.encode("utf-8"), _padding_for(scheme))
    return base64.b64encode(ciphertext).decode("ascii")


def nested_auth_payload(token: str) -> Dict[str, Any]:
    """Aplos auth response with the token under ``data``."""
    return {"status": "success", "data": {"token": token, "expires": "2026-10-18T13:00:00Z"}}


def flat_auth_payload(token: str) -> Dict[str, Any]:
    """Aplos auth response with a top-level token."""
    return {"token": token}


def make_config(**overrides) -> SidecarConfig:
    """Sidecar config for tests, independent of any local .env file."""
    values: Dict[str, Any] = {
        "env": "test",
        "log_level": "warning",
        "aplos_api_base_url": TEST_APLOS_BASE_URL,
        "aplos_client_id": TEST_CLIENT_ID,
        "aplos_private_key": "",
        "aplos_auth_timeout": 30.0,
        "max_body_bytes": 16384,
        "allowed_networks": DEFAULT_ALLOWED_NETWORKS,
        "auth_token": "",
        "rate_limit_max_requests": 60,
        "rate_limit_window_seconds": 60.0,
    }
    values.update(overrides)
    return SidecarConfig(_env_file=None, **values)


def make_sidecar_client(app, client_addr: str = LOCAL_CLIENT[0]) -> httpx.AsyncClient:
    """Async client that calls ``app`` in-process from ``client_addr``."""
    transport = httpx.ASGITransport(app=app, client=(client_addr, LOCAL_CLIENT[1]))
    return httpx.AsyncClient(transport=transport, base_url="http://sidecar")
