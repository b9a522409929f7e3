from __future__ import annotations

import copy
from typing import Any, Mapping, Optional

from nodepatch.core.errors import MergeError
from nodepatch.utils.template_schema import (
    DIRECTIVE,
    POD_TEMPLATE_SCHEMA,
    AtomicList,
    KeyedList,
    Scalar,
    SchemaNode,
    child_schema,
    is_replace_marker,
    schema_errors,
)


def _find(items: list, key: str, value: Any) -> Optional[int]:
    for i, item in enumerate(items):
        if isinstance(item, Mapping) and item.get(key) == value:
            return i
    return None


def _merge_map(base: Any, patch: Mapping[str, Any], node: SchemaNode) -> dict:
    result = base if isinstance(base, dict) else {}
    if patch.get(DIRECTIVE) == "replace":
        result = {}
    for k, v in patch.items():
        if k == DIRECTIVE:
            continue
        if v is None:
            result.pop(k, None)
            continue
        result[k] = _merge(result.get(k), v, child_schema(node, k))
    return result


def _merge_keyed_list(base: Any, patch: list, node: KeyedList) -> list:
    """
    Elements are matched on `node.key`: matches are deep-merged in place, new
    elements are appended in patch order, existing order is kept.
    """
    items = list(base) if isinstance(base, list) else []
    if any(is_replace_marker(e) for e in patch):
        items = []
    for elem in patch:
        if is_replace_marker(elem):
            continue
        key = elem[node.key]
        pos = _find(items, node.key, key)
        if elem.get(DIRECTIVE) == "delete":
            while pos is not None:
                del items[pos]
                pos = _find(items, node.key, key)
            continue
        if pos is None:
            items.append(_merge(None, elem, node.item))
        else:
            items[pos] = _merge(items[pos], elem, node.item)
    return items


def _merge(base: Any, patch: Any, node: SchemaNode) -> Any:
    if isinstance(node, KeyedList):
        return _merge_keyed_list(base, patch, node)
    if isinstance(patch, Mapping) and not isinstance(node, (Scalar, AtomicList)):
        return _merge_map(base, patch, node)
    # Scalars and anonymous lists are replaced.
    return copy.deepcopy(patch)


def apply_overlay_patch(
    template: Mapping[str, Any],
    overlay_patch: Mapping[str, Any],
    schema: SchemaNode = POD_TEMPLATE_SCHEMA,
) -> dict[str, Any]:
    """
    Strategic merge of `overlay_patch` into a copy of `template`:
    - scalars are replaced
    - objects are merged key by key, a null value deletes the key
    - keyed lists (containers/env by name, ports by containerPort, ...) are
      merged element-wise by key, new elements appended
    - other lists are replaced fully
    - "$patch": "replace" replaces an object or keyed list, "$patch": "delete"
      removes a keyed list element

    Raises MergeError with the path of the first incompatible field. The
    input template is never modified.
    """
    errs = schema_errors(overlay_patch, schema, patch=True)
    if errs:
        path, message = errs[0]
        raise MergeError(path, message)

    base = copy.deepcopy(dict(template or {}))
    return _merge(base, overlay_patch, schema)
