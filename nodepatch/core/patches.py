from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, NamedTuple, Optional, Sequence

from nodepatch.core.errors import PayloadError
from nodepatch.core.selector import LabelSelector, selector_matches


@dataclass(frozen=True)
class PatchRule:
    selector: Optional[LabelSelector]
    patch: Any  # JSON object, or raw JSON str/bytes
    priority: int = 0
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PatchRule":
        if not isinstance(data, Mapping):
            raise PayloadError("", "patch rule must be an object")
        priority = data.get("priority")
        return cls(
            selector=LabelSelector.from_dict(data.get("selector")),
            patch=data.get("patch"),
            priority=0 if priority is None else priority,
            name=data.get("name"),
        )


class MatchedPatch(NamedTuple):
    index: int
    rule: PatchRule

    @property
    def patch_id(self) -> str:
        return self.rule.name or f"patches[{self.index}]"


def order_patches(matched: Sequence[MatchedPatch]) -> list[MatchedPatch]:
    # Lowest priority is applied first so the highest priority wins conflicts.
    # Equal priorities keep declaration order.
    return sorted(matched, key=lambda m: (m.rule.priority, m.index))


def select_patches_for_node(
    patches: Sequence[PatchRule],
    node_labels: Mapping[str, str],
) -> list[MatchedPatch]:
    matching: list[MatchedPatch] = []
    for i, p in enumerate(patches):
        if selector_matches(node_labels or {}, p.selector):
            matching.append(MatchedPatch(i, p))
    return order_patches(matching)
