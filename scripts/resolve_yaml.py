from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Optional

import yaml

from nodepatch.core.errors import PatchError
from nodepatch.core.patches import PatchRule
from nodepatch.core.resolver import resolve_for_nodes
from nodepatch.core.validation import validate_patches


def _pretty(obj: Any) -> str:
    return json.dumps(obj, indent=2, sort_keys=True, ensure_ascii=False)


def load_inputs(path: str) -> tuple[dict, list[PatchRule], dict[str, dict[str, str]]]:
    """
    YAML layout:

        template: {metadata: ..., spec: ...}
        patches:
          - selector: {matchLabels: {...}}
            priority: 10
            patch: {spec: ...}
        nodes:
          node-a: {disk: ssd}
    """
    with open(path, "r", encoding="utf-8") as f:
        doc = yaml.safe_load(f) or {}
    template = doc.get("template") or {}
    patches = [PatchRule.from_dict(p) for p in (doc.get("patches") or [])]
    nodes = {str(k): dict(v or {}) for k, v in (doc.get("nodes") or {}).items()}
    return template, patches, nodes


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Resolve per-node pod templates from a YAML file.")
    ap.add_argument("--yaml", required=True, help="Path to yaml file with template, patches and nodes")
    ap.add_argument("--node", default=None, help="Only resolve this node")
    args = ap.parse_args(argv)

    try:
        template, patches, nodes = load_inputs(args.yaml)
    except PatchError as e:
        print(f"Invalid patch rule: {e}", file=sys.stderr)
        return 2

    violations = validate_patches(patches)
    if violations:
        for v in violations:
            print(f"- {v.kind} {v.field_path}: {v.message}", file=sys.stderr)
        return 2

    if args.node is not None:
        if args.node not in nodes:
            print(f"Unknown node: {args.node}", file=sys.stderr)
            return 2
        nodes = {args.node: nodes[args.node]}

    results, errors = resolve_for_nodes(template, nodes, patches)
    for name in nodes:
        print("\n" + "=" * 72)
        print(f"Node: {name} labels={nodes[name]}")
        if name in errors:
            print(f"- failed: {errors[name]}")
            continue
        r = results[name]
        print("applied_patches:", r.applied_patches)
        print("fingerprint:", r.fingerprint)
        print("template:")
        print(_pretty(r.template))

    return 1 if errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
