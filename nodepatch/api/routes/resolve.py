from __future__ import annotations

from fastapi import APIRouter, HTTPException

from nodepatch.core.errors import MergeError
from nodepatch.core.resolver import ResolutionResult, resolve_for_nodes, resolve_template
from nodepatch.schemas.resolve import (
    BatchResolveRequest,
    BatchResolveResponse,
    ResolveErrorOut,
    ResolveRequest,
    ResolveResponse,
)


router = APIRouter(prefix="/resolve", tags=["resolve"])


def _result_out(result: ResolutionResult) -> ResolveResponse:
    return ResolveResponse(
        template=result.template,
        applied_patches=result.applied_patches,
        fingerprint=result.fingerprint,
    )


def _error_out(e: MergeError) -> ResolveErrorOut:
    return ResolveErrorOut(field=e.field_path, message=e.message, patch_id=e.patch_id)


@router.post("", response_model=ResolveResponse)
def resolve(body: ResolveRequest):
    rules = [p.to_rule() for p in body.patches]
    try:
        result = resolve_template(body.template, body.node_labels, rules)
    except MergeError as e:
        raise HTTPException(status_code=422, detail=_error_out(e).model_dump())
    return _result_out(result)


@router.post("/batch", response_model=BatchResolveResponse)
def resolve_batch(body: BatchResolveRequest):
    rules = [p.to_rule() for p in body.patches]
    results, errors = resolve_for_nodes(body.template, body.nodes, rules)
    return BatchResolveResponse(
        results={name: _result_out(r) for name, r in results.items()},
        errors={name: _error_out(e) for name, e in errors.items()},
    )
