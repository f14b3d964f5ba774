"""
Optional shared-secret check layered on top of the network perimeter.
"""

import hmac
from typing import Optional

from shared.errors import AuthenticationError

BEARER_PREFIX = "bearer "


def secure_compare(a: Optional[str], b: Optional[str]) -> bool:
    """Constant-time string comparison; empty values never match."""
    if not a or not b:
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the credential from an ``Authorization: Bearer`` header."""
    if not authorization:
        return None
    if authorization[:len(BEARER_PREFIX)].lower() != BEARER_PREFIX:
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class SharedSecretAuth:
    """Requires callers to present the configured shared secret.

    With no secret configured the check is disabled and every caller
    that passed the perimeter is accepted.
    """

    def __init__(self, secret: Optional[str] = None):
        self._secret = secret or None

    @property
    def enabled(self) -> bool:
        return self._secret is not None

    def verify(self, authorization: Optional[str]) -> None:
        if not self.enabled:
            return
        presented = extract_bearer_token(authorization)
        if not secure_compare(presented, self._secret):
            raise AuthenticationError("Unauthorized")
