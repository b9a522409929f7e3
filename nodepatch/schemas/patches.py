from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from nodepatch.core.patches import PatchRule
from nodepatch.core.selector import LabelSelector, Requirement


class RequirementIn(BaseModel):
    key: str
    operator: str
    values: list[str] = Field(default_factory=list)


class LabelSelectorIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    match_labels: dict[str, str] = Field(default_factory=dict, alias="matchLabels")
    match_expressions: list[RequirementIn] = Field(default_factory=list, alias="matchExpressions")

    def to_selector(self) -> LabelSelector:
        return LabelSelector(
            match_labels=dict(self.match_labels),
            match_expressions=tuple(
                Requirement(key=r.key, operator=r.operator, values=tuple(r.values))
                for r in self.match_expressions
            ),
        )


class PatchIn(BaseModel):
    name: Optional[str] = None
    selector: Optional[LabelSelectorIn] = None
    # No coercion: "10" or 1.5 must not silently become a valid priority.
    priority: StrictInt = 0
    # JSON object, or raw JSON text
    patch: Any = None

    def to_rule(self) -> PatchRule:
        return PatchRule(
            selector=self.selector.to_selector() if self.selector is not None else None,
            patch=self.patch,
            priority=self.priority,
            name=self.name,
        )


class ValidateRequest(BaseModel):
    patches: list[PatchIn]


class ViolationOut(BaseModel):
    field: str
    message: str
    kind: str


class ValidateResponse(BaseModel):
    allowed: bool
    violations: list[ViolationOut]
