from __future__ import annotations

import logging
from typing import Optional, Sequence

from nodepatch.config import PatchLimits, get_patch_limits
from nodepatch.core.errors import FieldViolation, LimitExceeded, PayloadError
from nodepatch.core.patches import PatchRule
from nodepatch.core.selector import selector_violations
from nodepatch.utils.payload import decode_patch, encoded_size
from nodepatch.utils.template_schema import POD_TEMPLATE_SCHEMA, SchemaNode, schema_errors

logger = logging.getLogger(__name__)

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def _priority_violations(priority: object, path: str) -> list[FieldViolation]:
    if isinstance(priority, bool) or not isinstance(priority, int):
        return [LimitExceeded(path, f"must be a 32-bit integer, got {priority!r}").to_violation()]
    if not INT32_MIN <= priority <= INT32_MAX:
        return [
            LimitExceeded(path, f"must be between {INT32_MIN} and {INT32_MAX}, got {priority}").to_violation()
        ]
    return []


def _payload_violations(raw: object, path: str, limits: PatchLimits, schema: SchemaNode) -> list[FieldViolation]:
    out: list[FieldViolation] = []

    try:
        size = encoded_size(raw)
    except (TypeError, ValueError) as e:
        return [PayloadError(path, f"patch is not JSON serializable: {e}").to_violation()]
    if size > limits.max_patch_bytes:
        out.append(
            LimitExceeded(path, f"must be no more than {limits.max_patch_bytes} bytes, got {size}").to_violation()
        )

    try:
        doc = decode_patch(raw, path)
    except PayloadError as e:
        out.append(e.to_violation())
        return out
    if not doc:
        out.append(PayloadError(path, "patch must not be empty").to_violation())
        return out

    for field_path, message in schema_errors(doc, schema, path, patch=True):
        out.append(PayloadError(field_path, message).to_violation())
    return out


def validate_patches(
    patches: Sequence[PatchRule],
    limits: Optional[PatchLimits] = None,
    path: str = "spec.patches",
    schema: SchemaNode = POD_TEMPLATE_SCHEMA,
) -> list[FieldViolation]:
    """
    Admission-time checks for a patch rule list. Every problem is reported;
    nothing is raised. An empty result means the rules are acceptable.
    """
    limits = limits or get_patch_limits()
    violations: list[FieldViolation] = []

    if len(patches) > limits.max_patches:
        violations.append(
            LimitExceeded(path, f"must have at most {limits.max_patches} items, got {len(patches)}").to_violation()
        )

    for i, p in enumerate(patches):
        p_path = f"{path}[{i}]"
        violations.extend(selector_violations(p.selector, f"{p_path}.selector"))
        violations.extend(_priority_violations(p.priority, f"{p_path}.priority"))
        violations.extend(_payload_violations(p.patch, f"{p_path}.patch", limits, schema))

    if violations:
        logger.debug("patch validation found %d violation(s)", len(violations))
    return violations
