from __future__ import annotations

import json
from typing import Any, Mapping

from nodepatch.core.errors import PayloadError
from nodepatch.utils.hashing import stable_json


def decode_patch(raw: Any, path: str = "patch") -> Mapping[str, Any]:
    """
    Turns a rule payload into a JSON object. Payloads arrive either already
    decoded (a mapping) or as raw JSON text/bytes.
    """
    if raw is None:
        raise PayloadError(path, "patch is required")

    doc = raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise PayloadError(path, f"patch is not valid UTF-8: {e.reason}") from e
    if isinstance(raw, str):
        if not raw.strip():
            raise PayloadError(path, "patch is required")
        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PayloadError(path, f"invalid JSON: {e.msg} (line {e.lineno} column {e.colno})") from e

    if not isinstance(doc, Mapping):
        raise PayloadError(path, "patch must be a JSON object")
    return doc


def encoded_size(raw: Any) -> int:
    if raw is None:
        return 0
    if isinstance(raw, (bytes, bytearray)):
        return len(raw)
    if isinstance(raw, str):
        return len(raw.encode("utf-8"))
    return len(stable_json(raw).encode("utf-8"))
