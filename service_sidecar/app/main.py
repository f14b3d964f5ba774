"""
Aplos token sidecar.

Exchanges Aplos's RSA-encrypted auth token for plaintext so the main
application never has to enable legacy PKCS#1 v1.5 decryption itself.

Endpoints:
    GET  /health      - health check
    POST /decrypt     - decrypt a caller-supplied encrypted token
    POST /auth-token  - fetch the encrypted token from Aplos, decrypt, return
"""

from typing import Optional

import httpx
from fastapi import Depends, Request
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import SidecarConfig, get_config
from shared.errors import (
    ConfigurationError,
    DecryptionError,
    ForbiddenError,
    RateLimitError,
    TokenDecodeError,
    UpstreamError,
    ValidationError,
)
from .adapters.aplos_client import AplosAuthClient
from .crypto import PrivateKeyHolder, TokenDecryptor, load_private_key
from .ratelimit import FixedWindowRateLimiter
from .request_body import read_json_body
from .security import NetworkPerimeter, PerimeterDecision, SharedSecretAuth


class SidecarService(BaseService):
    """Token sidecar service implementation."""

    def __init__(
        self,
        config: SidecarConfig,
        key_holder: Optional[PrivateKeyHolder] = None,
        aplos_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # Request guards must exist before the base class wires middleware.
        self.perimeter = NetworkPerimeter(config.allowed_network_list)
        self.rate_limiter = FixedWindowRateLimiter(
            max_requests=config.rate_limit_max_requests,
            window_seconds=config.rate_limit_window_seconds,
        )
        self.request_auth = SharedSecretAuth(config.auth_token.get_secret_value())

        super().__init__(config)

        if key_holder is None:
            key_holder = load_private_key(config.aplos_private_key.get_secret_value())
        self.key_holder = key_holder
        self.decryptor = TokenDecryptor(key_holder)
        self.aplos_client = AplosAuthClient(
            config.aplos_api_base_url,
            config.aplos_client_id,
            timeout=config.aplos_auth_timeout,
            transport=aplos_transport,
        )

        self._setup_sidecar_routes()

        self.logger.info(
            "Sidecar configured",
            key_configured=self.key_holder.configured,
            client_id_configured=bool(config.aplos_client_id),
            shared_secret=self.request_auth.enabled,
            rate_limit=config.rate_limit_max_requests,
        )

    def _setup_middleware(self):
        """Perimeter check runs inside the timing middleware so rejections are logged."""

        @self.app.middleware("http")
        async def enforce_perimeter(request: Request, call_next):
            client_host = request.client.host if request.client else None
            if self.perimeter.classify(client_host) is PerimeterDecision.REJECTED:
                self.metrics.record_perimeter_rejection()
                self.logger.warning("Connection rejected by perimeter", path=request.url.path)
                return JSONResponse(
                    status_code=ForbiddenError.status_code,
                    content=ForbiddenError().to_response().model_dump()
                )
            return await call_next(request)

        super()._setup_middleware()

    async def guard_request(self, request: Request) -> None:
        """Rate limit and shared-secret checks for token endpoints."""
        client_key = request.client.host if request.client else "unknown"
        decision = self.rate_limiter.check(client_key)
        if not decision.allowed:
            self.metrics.record_rate_limit_hit(request.url.path)
            raise RateLimitError(retry_after=decision.retry_after(self.rate_limiter.clock()))

        self.request_auth.verify(request.headers.get("Authorization"))

    def decrypt_token(self, encrypted_token: str) -> str:
        """Decrypt a token and record which padding scheme worked."""
        try:
            result = self.decryptor.decrypt_with_scheme(encrypted_token)
        except DecryptionError:
            self.metrics.record_decrypt_failure()
            raise
        self.metrics.record_decryption(result.scheme)
        return result.plaintext

    async def auth_token_flow(self) -> str:
        """Fetch the encrypted token from Aplos and decrypt it."""
        if not self.config.aplos_client_id or not self.key_holder.configured:
            raise ConfigurationError("Aplos credentials not configured")

        try:
            encrypted_token = await self.aplos_client.fetch_encrypted_token()
        except UpstreamError:
            self.metrics.record_upstream("error")
            raise
        self.metrics.record_upstream("success")

        try:
            return self.decrypt_token(encrypted_token)
        except TokenDecodeError:
            # Garbage from upstream is a decryption failure, not a caller error.
            self.metrics.record_decrypt_failure()
            raise DecryptionError()

    def _setup_sidecar_routes(self):
        """Set up token routes."""

        @self.app.post("/decrypt", dependencies=[Depends(self.guard_request)])
        async def decrypt(request: Request):
            """Decrypt a caller-supplied encrypted token."""
            body = await read_json_body(request, self.config.max_body_bytes)
            encrypted_token = body.get("encrypted_token")
            if not encrypted_token:
                raise ValidationError("encrypted_token required")
            if not isinstance(encrypted_token, str):
                raise ValidationError("encrypted_token must be a string")

            return {"token": self.decrypt_token(encrypted_token)}

        @self.app.post("/auth-token", dependencies=[Depends(self.guard_request)])
        async def auth_token():
            """Full auth flow: call Aplos, decrypt, return the token."""
            return {"token": await self.auth_token_flow()}


def create_app(
    config: Optional[SidecarConfig] = None,
    key_holder: Optional[PrivateKeyHolder] = None,
    aplos_transport: Optional[httpx.AsyncBaseTransport] = None,
):
    """Create FastAPI application."""
    service = SidecarService(config or get_config(), key_holder=key_holder, aplos_transport=aplos_transport)
    return service.app


def main():
    """Console entry point."""
    service = SidecarService(get_config())
    service.run()


if __name__ == "__main__":
    main()
