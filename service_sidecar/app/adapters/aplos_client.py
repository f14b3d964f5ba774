"""
Aplos auth client for the token sidecar.
"""

import httpx
from typing import Any, Dict, Optional, Union
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from shared.logging import get_logger
from shared.errors import UpstreamError


class TokenPayload(BaseModel):
    """Inner ``data`` object of the nested response shape."""
    token: str = Field(min_length=1)


class NestedAuthResponse(BaseModel):
    """``{"data": {"token": "..."}}``"""
    data: TokenPayload


class FlatAuthResponse(BaseModel):
    """``{"token": "..."}``"""
    token: str = Field(min_length=1)


AplosAuthResponse = Union[NestedAuthResponse, FlatAuthResponse]


def parse_auth_response(payload: Any) -> Optional[AplosAuthResponse]:
    """Match an auth payload against the known shapes, nested first."""
    for model in (NestedAuthResponse, FlatAuthResponse):
        try:
            return model.model_validate(payload)
        except PydanticValidationError:
            continue
    return None


def resolve_token(response: AplosAuthResponse) -> str:
    """Pull the encrypted token out of either response shape."""
    if isinstance(response, NestedAuthResponse):
        return response.data.token
    return response.token


class AplosAuthClient:
    """Fetches the encrypted auth token from Aplos.

    One GET per call with a hard timeout; retrying is left to the caller.
    """

    def __init__(
        self,
        base_url: str,
        client_id: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client_id = client_id
        self.timeout = timeout
        self.transport = transport
        self.logger = get_logger("sidecar.aplos_client")

    @property
    def auth_url(self) -> str:
        return f"{self.base_url}/auth/{self.client_id}"

    async def fetch_auth_response(self) -> Dict[str, Any]:
        """GET the auth endpoint and return the decoded JSON body."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    self.auth_url,
                    headers={"Accept": "application/json"},
                )
        except httpx.TimeoutException as e:
            self.logger.error("Aplos auth timeout", timeout=self.timeout, error_type=type(e).__name__)
            raise UpstreamError("Aplos auth timeout", details={"timeout": self.timeout})
        except httpx.HTTPError as e:
            self.logger.error("Aplos auth request failed", error_type=type(e).__name__)
            raise UpstreamError("Aplos auth request failed", details={"http_error": type(e).__name__})

        if response.status_code != 200:
            self.logger.warning("Aplos auth failed", status_code=response.status_code)
            raise UpstreamError(
                f"Aplos auth failed: {response.status_code}",
                details={"status_code": response.status_code}
            )

        try:
            return response.json()
        except ValueError:
            self.logger.error("Failed to parse Aplos auth response")
            raise UpstreamError("Failed to parse Aplos auth response")

    async def fetch_encrypted_token(self) -> str:
        """Fetch the auth response and extract the encrypted token."""
        payload = await self.fetch_auth_response()
        parsed = parse_auth_response(payload)
        if parsed is None:
            self.logger.warning("No token in Aplos auth response")
            raise UpstreamError("No token in Aplos auth response")
        return resolve_token(parsed)
