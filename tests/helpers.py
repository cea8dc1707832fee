from __future__ import annotations

import io
import json
import zipfile


def make_zip(
    document,
    entry: str = "temperature_data.json",
    compression: int = zipfile.ZIP_DEFLATED,
) -> bytes:
    """Zip a JSON document (dict or raw text) under a single entry."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression) as zf:
        text = document if isinstance(document, str) else json.dumps(document)
        zf.writestr(entry, text)
    return buf.getvalue()


def flip_byte(payload: bytes, offset: int) -> bytes:
    damaged = bytearray(payload)
    damaged[offset] ^= 0xFF
    return bytes(damaged)
