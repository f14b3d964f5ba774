"""Perimeter and caller checks applied before any endpoint logic."""

from .perimeter import NetworkPerimeter, PerimeterDecision, parse_address
from .request_auth import SharedSecretAuth, extract_bearer_token, secure_compare

__all__ = [
    "NetworkPerimeter",
    "PerimeterDecision",
    "parse_address",
    "SharedSecretAuth",
    "extract_bearer_token",
    "secure_compare",
]
