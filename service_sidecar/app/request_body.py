"""
Bounded JSON body reading.
"""

import json
from typing import Any, Dict

from fastapi import Request

from shared.errors import PayloadTooLargeError, ValidationError

DEFAULT_MAX_BODY_BYTES = 16384


async def read_json_body(request: Request, max_bytes: int = DEFAULT_MAX_BODY_BYTES) -> Dict[str, Any]:
    """Read a JSON object body, giving up as soon as it passes ``max_bytes``.

    Oversized bodies are never buffered in full and never parsed.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise PayloadTooLargeError(details={"content_length": int(declared), "limit": max_bytes})

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_bytes:
            raise PayloadTooLargeError(details={"received": received, "limit": max_bytes})
        chunks.append(chunk)

    try:
        data = json.loads(b"".join(chunks))
    except ValueError:
        raise ValidationError("Invalid JSON")

    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
