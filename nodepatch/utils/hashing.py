from __future__ import annotations

import hashlib
import json
from typing import Any, Iterable


def stable_json(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def sha256_hex(value: str) -> str:
    return hashlib.sha256((value or "").encode("utf-8")).hexdigest()


def sha256_chain_hex(parts: Iterable[tuple[str, str]]) -> str:
    """
    Digest of an ordered sequence of (tag, hex digest) parts. Each part is
    length-delimited so that different sequences never share an encoding.
    """
    h = hashlib.sha256()
    for tag, digest in parts:
        h.update(f"{len(tag)}:{tag}:{digest};".encode("utf-8"))
    return h.hexdigest()
