from __future__ import annotations

from fastapi import APIRouter

from nodepatch.core.validation import validate_patches
from nodepatch.schemas.patches import ValidateRequest, ValidateResponse, ViolationOut


router = APIRouter(prefix="/patches", tags=["patches"])


@router.post("/validate", response_model=ValidateResponse)
def post_validate(body: ValidateRequest):
    violations = validate_patches([p.to_rule() for p in body.patches])
    return ValidateResponse(
        allowed=not violations,
        violations=[ViolationOut(**v.as_dict()) for v in violations],
    )
