from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from nodepatch.schemas.patches import PatchIn


class ResolveRequest(BaseModel):
    template: dict
    node_labels: dict[str, str] = Field(default_factory=dict)
    patches: list[PatchIn] = Field(default_factory=list)


class ResolveResponse(BaseModel):
    template: dict
    applied_patches: list[str]
    fingerprint: str


class BatchResolveRequest(BaseModel):
    template: dict
    nodes: dict[str, dict[str, str]]
    patches: list[PatchIn] = Field(default_factory=list)


class ResolveErrorOut(BaseModel):
    field: str
    message: str
    patch_id: Optional[str] = None


class BatchResolveResponse(BaseModel):
    results: dict[str, ResolveResponse]
    errors: dict[str, ResolveErrorOut]
