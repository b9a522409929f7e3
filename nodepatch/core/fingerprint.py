from __future__ import annotations

from typing import Any, Mapping, Sequence

from nodepatch.core.patches import MatchedPatch
from nodepatch.utils.hashing import sha256_chain_hex, sha256_hex, stable_json
from nodepatch.utils.payload import decode_patch


def template_digest(template: Mapping[str, Any]) -> str:
    return sha256_hex(stable_json(template or {}))


def payload_digest(raw: Any) -> str:
    # Canonical JSON, so formatting and key order of raw payloads don't matter.
    return sha256_hex(stable_json(decode_patch(raw)))


def patch_fingerprint(base_template: Mapping[str, Any], matched: Sequence[MatchedPatch]) -> str:
    """
    Digest of the base template followed, in applied order, by each matched
    patch payload. Node labels are not part of it: two nodes matching the same
    ordered patches share a fingerprint.
    """
    parts = [("template", template_digest(base_template))]
    parts.extend(("patch", payload_digest(m.rule.patch)) for m in matched)
    return sha256_chain_hex(parts)
