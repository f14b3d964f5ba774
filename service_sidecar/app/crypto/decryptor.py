"""
RSA token decryption with legacy padding fallback.

Aplos hands out tokens encrypted to our public key, and there is no tag in
the ciphertext saying which padding was used. Schemes are tried from most to
least modern. A ciphertext made under one padding will not unpad cleanly
under another, so the first scheme that succeeds is the right one.

Security Note:
    Callers only ever see a generic failure. Per-scheme errors go to the
    debug log and never to the response, to avoid a padding oracle.

Implicit-rejection guard:
    OpenSSL builds with implicit rejection never raise on bad PKCS#1 v1.5
    padding. They return a synthetic plaintext derived from the key and the
    ciphertext. So a PKCS#1 v1.5 result is only accepted when it looks like a
    token: printable ASCII, no whitespace, at least MIN_LEGACY_TOKEN_LENGTH
    characters. Anything else counts as a failed attempt.
"""

import base64
import binascii
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple, Type

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from shared.errors import DecryptionError, TokenDecodeError
from shared.logging import get_logger
from .keys import PrivateKeyHolder


class PaddingMode(str, Enum):
    """RSA encryption padding modes."""
    OAEP = "oaep"
    PKCS1V15 = "pkcs1v15"


@dataclass(frozen=True)
class PaddingScheme:
    """One padding configuration to try."""

    name: str
    mode: PaddingMode
    hash_algorithm: Optional[Type[hashes.HashAlgorithm]] = None

    def build(self) -> padding.AsymmetricPadding:
        """Build the ``cryptography`` padding object for this scheme."""
        if self.mode is PaddingMode.OAEP:
            # MGF1 uses the same digest as OAEP itself.
            algorithm = self.hash_algorithm()
            return padding.OAEP(
                mgf=padding.MGF1(algorithm=algorithm),
                algorithm=algorithm,
                label=None,
            )
        return padding.PKCS1v15()


# Order matters: modern first, legacy last.
PADDING_SCHEMES: Tuple[PaddingScheme, ...] = (
    PaddingScheme("oaep-sha256", PaddingMode.OAEP, hashes.SHA256),
    PaddingScheme("oaep-sha1", PaddingMode.OAEP, hashes.SHA1),
    PaddingScheme("pkcs1v15", PaddingMode.PKCS1V15),
)

# Shortest plaintext accepted from PKCS#1 v1.5 decryption.
MIN_LEGACY_TOKEN_LENGTH = 12


@dataclass(frozen=True)
class DecryptionResult:
    """Plaintext plus the scheme that produced it."""
    plaintext: str
    scheme: str


def is_plausible_token(plaintext: bytes) -> bool:
    """Whether legacy-padding output looks like a real token."""
    if len(plaintext) < MIN_LEGACY_TOKEN_LENGTH:
        return False
    return all(0x21 <= byte <= 0x7e for byte in plaintext)


def decode_ciphertext(ciphertext_b64: str) -> bytes:
    """Strictly decode base64 ciphertext, ignoring embedded whitespace."""
    if not isinstance(ciphertext_b64, str):
        raise TokenDecodeError()

    compact = "".join(ciphertext_b64.split())
    try:
        data = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise TokenDecodeError() from e

    if not data:
        raise TokenDecodeError()
    return data


class TokenDecryptor:
    """Decrypts Aplos tokens with the configured private key."""

    def __init__(self, key_holder: PrivateKeyHolder, schemes: Sequence[PaddingScheme] = PADDING_SCHEMES):
        self.key_holder = key_holder
        self.schemes = tuple(schemes)
        self.logger = get_logger("sidecar.decryptor")

    def decrypt_with_scheme(self, ciphertext_b64: str) -> DecryptionResult:
        """Decrypt and report which padding scheme succeeded."""
        key = self.key_holder.require()
        ciphertext = decode_ciphertext(ciphertext_b64)

        failures = []
        for scheme in self.schemes:
            try:
                plaintext = key.decrypt(ciphertext, scheme.build())
                if scheme.mode is PaddingMode.PKCS1V15 and not is_plausible_token(plaintext):
                    failures.append((scheme.name, "ImplicitRejection"))
                    continue
                return DecryptionResult(plaintext=plaintext.decode("utf-8"), scheme=scheme.name)
            except ValueError as e:
                # UnicodeDecodeError is a ValueError too; wrong-scheme output is rarely UTF-8.
                failures.append((scheme.name, type(e).__name__))

        self.logger.debug("Padding schemes exhausted", attempts=failures)
        raise DecryptionError()

    def decrypt(self, ciphertext_b64: str) -> str:
        """Decrypt base64 ciphertext to a UTF-8 string."""
        return self.decrypt_with_scheme(ciphertext_b64).plaintext
