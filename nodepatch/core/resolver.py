from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from nodepatch.core.errors import MergeError, PayloadError
from nodepatch.core.fingerprint import patch_fingerprint
from nodepatch.core.patches import PatchRule, select_patches_for_node
from nodepatch.utils.merge_patch import apply_overlay_patch
from nodepatch.utils.payload import decode_patch
from nodepatch.utils.template_schema import POD_TEMPLATE_SCHEMA, SchemaNode, join_path, schema_errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionResult:
    template: dict[str, Any]
    applied_patches: list[str]
    fingerprint: str


def resolve_template(
    base_template: Mapping[str, Any],
    node_labels: Mapping[str, str],
    patches: Sequence[PatchRule],
    schema: SchemaNode = POD_TEMPLATE_SCHEMA,
) -> ResolutionResult:
    """
    Effective template for one node: matching patches are applied in
    (priority, declaration) order on a copy of the base template.

    All or nothing: the first patch that fails raises MergeError and no
    partially patched template is returned.
    """
    matching = select_patches_for_node(patches, node_labels or {})

    # Also guarantees the base is plain JSON, which the fingerprint needs.
    errs = schema_errors(base_template or {}, schema)
    if errs:
        field_path, message = errs[0]
        raise MergeError(field_path, f"base template is invalid: {message}")

    resolved: dict[str, Any] = copy.deepcopy(dict(base_template or {}))
    applied: list[str] = []
    for m in matching:
        path = f"patches[{m.index}].patch"
        try:
            overlay_patch = decode_patch(m.rule.patch, path)
        except PayloadError as e:
            logger.warning("patch %s has an invalid payload: %s", m.patch_id, e)
            raise MergeError(e.field_path, e.message, patch_id=m.patch_id) from e
        try:
            resolved = apply_overlay_patch(resolved, overlay_patch, schema)
        except MergeError as e:
            logger.warning("patch %s failed to apply: %s", m.patch_id, e)
            field_path = join_path(path, e.field_path) if e.field_path else path
            raise MergeError(field_path, e.message, patch_id=m.patch_id) from e
        applied.append(m.patch_id)

    errs = schema_errors(resolved, schema)
    if errs:
        field_path, message = errs[0]
        raise MergeError(field_path, f"resolved template is invalid: {message}")

    logger.debug("resolved template for labels=%s applied=%s", dict(node_labels or {}), applied)
    return ResolutionResult(
        template=resolved,
        applied_patches=applied,
        fingerprint=patch_fingerprint(base_template, matching),
    )


def resolve_for_nodes(
    base_template: Mapping[str, Any],
    nodes: Mapping[str, Mapping[str, str]],
    patches: Sequence[PatchRule],
    schema: SchemaNode = POD_TEMPLATE_SCHEMA,
) -> tuple[dict[str, ResolutionResult], dict[str, MergeError]]:
    # Each node is resolved on its own; a failure for one node never affects another.
    results: dict[str, ResolutionResult] = {}
    errors: dict[str, MergeError] = {}
    for node_name, labels in nodes.items():
        try:
            results[node_name] = resolve_template(base_template, labels, patches, schema)
        except MergeError as e:
            errors[node_name] = e
    return results, errors
