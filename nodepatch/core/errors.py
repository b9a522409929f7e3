from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class PatchError(Exception):
    """
    Base error for patch rules. Carries the offending field path so callers can
    point the user at the exact place in the rule or template.
    """

    kind = "PatchError"

    def __init__(self, field_path: str, message: str, patch_id: Optional[str] = None):
        super().__init__(f"{field_path}: {message}" if field_path else message)
        self.field_path = field_path
        self.message = message
        self.patch_id = patch_id

    def to_violation(self) -> "FieldViolation":
        return FieldViolation(field_path=self.field_path, message=self.message, kind=self.kind)


class SelectorError(PatchError):
    kind = "SelectorError"


class PayloadError(PatchError):
    kind = "PayloadError"


class MergeError(PatchError):
    kind = "MergeError"


class LimitExceeded(PatchError):
    kind = "LimitExceeded"


@dataclass(frozen=True)
class FieldViolation:
    field_path: str
    message: str
    kind: str  # SelectorError|PayloadError|LimitExceeded

    def as_dict(self) -> dict:
        return {"field": self.field_path, "message": self.message, "kind": self.kind}
