"""Clients for services the sidecar calls out to."""

from .aplos_client import (
    AplosAuthClient,
    AplosAuthResponse,
    FlatAuthResponse,
    NestedAuthResponse,
    parse_auth_response,
    resolve_token,
)

__all__ = [
    "AplosAuthClient",
    "AplosAuthResponse",
    "FlatAuthResponse",
    "NestedAuthResponse",
    "parse_auth_response",
    "resolve_token",
]
