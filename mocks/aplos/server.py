"""
Mock Aplos server providing the encrypted-token auth endpoint.
"""

from typing import Any, Dict, Optional
from fastapi import FastAPI, HTTPException
from cryptography.hazmat.primitives.asymmetric import rsa

from shared.logging import get_logger
from shared.test_helpers import (
    encrypt_token,
    flat_auth_payload,
    generate_key_pair,
    nested_auth_payload,
)


class MockAplosServer:
    """Mock Aplos auth endpoint.

    Hands out ``plaintext_token`` encrypted to ``public_key`` under the
    chosen padding scheme, in either the nested or the flat response shape.
    """

    def __init__(
        self,
        public_key: rsa.RSAPublicKey,
        client_id: str = "mock-client",
        plaintext_token: str = "mock-aplos-access-token",
        scheme: str = "pkcs1v15",
        shape: str = "nested",
        api_prefix: str = "/hermes/api/v1",
        failure_status: Optional[int] = None,
    ):
        if shape not in ("nested", "flat"):
            raise ValueError(f"Unknown response shape: {shape}")
        self.logger = get_logger("mock.aplos")
        self.app = FastAPI(title="Mock Aplos", version="1.0.0")

        self.public_key = public_key
        self.client_id = client_id
        self.plaintext_token = plaintext_token
        self.scheme = scheme
        self.shape = shape
        self.api_prefix = api_prefix.rstrip("/")
        self.failure_status = failure_status
        self.request_count = 0

        self._setup_routes()

    def _auth_payload(self) -> Dict[str, Any]:
        token = encrypt_token(self.public_key, self.plaintext_token, self.scheme)
        if self.shape == "nested":
            return nested_auth_payload(token)
        return flat_auth_payload(token)

    def _setup_routes(self):
        """Set up mock Aplos routes."""

        @self.app.get(f"{self.api_prefix}/auth/{{client_id}}")
        async def auth(client_id: str):
            """Auth endpoint returning an encrypted access token."""
            self.request_count += 1

            if self.failure_status is not None:
                raise HTTPException(status_code=self.failure_status, detail="Mock failure")

            if client_id != self.client_id:
                raise HTTPException(status_code=404, detail="Unknown client")

            self.logger.info("Issued encrypted token", client_id=client_id, scheme=self.scheme)
            return self._auth_payload()


def create_app(private_key_path: str = "mock_aplos_private_key.pem"):
    """Create mock Aplos application with a fresh key pair.

    The private half is written to ``private_key_path`` so a locally
    running sidecar can be pointed at it through ``APLOS_PRIVATE_KEY``.
    """
    key_pair = generate_key_pair()
    with open(private_key_path, "w", encoding="ascii") as fh:
        fh.write(key_pair.private_pem)
    server = MockAplosServer(key_pair.public_key)
    server.logger.info("Wrote mock private key", path=private_key_path)
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8090)
