"""
Aplos token sidecar package.

This package exposes the FastAPI application that exchanges Aplos's
RSA-encrypted auth token for plaintext. It is intentionally small:

- app.main: Application entrypoint that wires routes and guards.
- app.crypto: Private key loading and padding-fallback decryption.
- app.adapters: The Aplos auth client and its response shapes.
- app.security: Network perimeter and optional shared-secret checks.
- app.ratelimit: In-process fixed-window rate limiting.

Design notes:
- Module import must not read keys or make network calls. The key is
  loaded when the service is constructed and injected from there.
- Use the shared/ utilities for config, logging, metrics and errors.
- Never log key material, ciphertext or plaintext tokens.
"""
