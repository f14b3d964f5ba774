"""RSA key loading and token decryption."""

from .keys import PrivateKeyHolder, load_private_key, normalize_key_material
from .decryptor import (
    MIN_LEGACY_TOKEN_LENGTH,
    PADDING_SCHEMES,
    DecryptionResult,
    PaddingMode,
    PaddingScheme,
    TokenDecryptor,
    decode_ciphertext,
    is_plausible_token,
)

__all__ = [
    "PrivateKeyHolder",
    "load_private_key",
    "normalize_key_material",
    "MIN_LEGACY_TOKEN_LENGTH",
    "PADDING_SCHEMES",
    "DecryptionResult",
    "PaddingMode",
    "PaddingScheme",
    "TokenDecryptor",
    "decode_ciphertext",
    "is_plausible_token",
]
