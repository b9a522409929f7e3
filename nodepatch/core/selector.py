from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from nodepatch.core.errors import FieldViolation, SelectorError


class Operator(str, Enum):
    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"


_OPERATORS = {op.value for op in Operator}
_SET_OPERATORS = {Operator.IN.value, Operator.NOT_IN.value}

_NAME_MAX_LEN = 63
_PREFIX_MAX_LEN = 253
_NAME_RE = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_DNS1123_SUBDOMAIN_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")


@dataclass(frozen=True)
class Requirement:
    key: str
    operator: str
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class LabelSelector:
    match_labels: Mapping[str, str] = field(default_factory=dict)
    match_expressions: tuple[Requirement, ...] = ()

    def is_empty(self) -> bool:
        return not self.match_labels and not self.match_expressions

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["LabelSelector"]:
        """
        Reads the Kubernetes shape: {"matchLabels": {...}, "matchExpressions": [{key, operator, values}]}.
        Returns None for a missing selector. Only the shape is checked here; keys,
        values and operators are checked by `selector_violations`.
        """
        if data is None:
            return None
        if not isinstance(data, Mapping):
            raise SelectorError("selector", "must be an object")

        match_labels = data.get("matchLabels") or {}
        if not isinstance(match_labels, Mapping):
            raise SelectorError("selector.matchLabels", "must be an object")

        raw_exprs = data.get("matchExpressions") or []
        if not isinstance(raw_exprs, list):
            raise SelectorError("selector.matchExpressions", "must be a list")

        exprs: list[Requirement] = []
        for i, e in enumerate(raw_exprs):
            if not isinstance(e, Mapping):
                raise SelectorError(f"selector.matchExpressions[{i}]", "must be an object")
            values = e.get("values") or []
            if not isinstance(values, list):
                raise SelectorError(f"selector.matchExpressions[{i}].values", "must be a list")
            exprs.append(Requirement(key=e.get("key"), operator=e.get("operator"), values=tuple(values)))

        return cls(match_labels=dict(match_labels), match_expressions=tuple(exprs))

    def to_dict(self) -> dict:
        out: dict[str, Any] = {}
        if self.match_labels:
            out["matchLabels"] = dict(self.match_labels)
        if self.match_expressions:
            out["matchExpressions"] = [
                {"key": r.key, "operator": r.operator, "values": list(r.values)}
                for r in self.match_expressions
            ]
        return out


def _requirement_matches(labels: Mapping[str, str], req: Requirement) -> bool:
    present = req.key in labels
    if req.operator == Operator.IN.value:
        return present and labels[req.key] in req.values
    if req.operator == Operator.NOT_IN.value:
        return not present or labels[req.key] not in req.values
    if req.operator == Operator.EXISTS.value:
        return present
    if req.operator == Operator.DOES_NOT_EXIST.value:
        return not present
    # Unknown operators are rejected at admission; never match here.
    return False


def selector_matches(node_labels: Mapping[str, str], selector: Optional[LabelSelector]) -> bool:
    # A missing selector never matches. An empty one matches everything.
    if selector is None:
        return False
    labels = node_labels or {}
    for k, v in selector.match_labels.items():
        if k not in labels:
            return False
        if labels[k] != v:
            return False
    return all(_requirement_matches(labels, r) for r in selector.match_expressions)


def label_key_errors(key: Any) -> list[str]:
    if not isinstance(key, str) or not key:
        return ["label key must be a non-empty string"]
    errs: list[str] = []
    prefix, sep, name = key.rpartition("/")
    if sep:
        if not prefix:
            errs.append("prefix part must be non-empty")
        elif len(prefix) > _PREFIX_MAX_LEN:
            errs.append(f"prefix part must be no more than {_PREFIX_MAX_LEN} characters")
        elif not _DNS1123_SUBDOMAIN_RE.match(prefix):
            errs.append("prefix part must be a lowercase RFC 1123 subdomain")
    if not name:
        errs.append("name part must be non-empty")
    elif len(name) > _NAME_MAX_LEN:
        errs.append(f"name part must be no more than {_NAME_MAX_LEN} characters")
    elif not _NAME_RE.match(name):
        errs.append(
            "name part must consist of alphanumeric characters, '-', '_' or '.', "
            "and must start and end with an alphanumeric character"
        )
    return errs


def label_value_errors(value: Any) -> list[str]:
    if not isinstance(value, str):
        return ["label value must be a string"]
    if value == "":
        return []
    if len(value) > _NAME_MAX_LEN:
        return [f"must be no more than {_NAME_MAX_LEN} characters"]
    if not _NAME_RE.match(value):
        return [
            "a valid label value must be empty or consist of alphanumeric characters, "
            "'-', '_' or '.', and must start and end with an alphanumeric character"
        ]
    return []


def selector_violations(selector: Optional[LabelSelector], path: str) -> list[FieldViolation]:
    if selector is None:
        return [SelectorError(path, "selector is required").to_violation()]

    out: list[FieldViolation] = []

    def _add(p: str, msg: str) -> None:
        out.append(SelectorError(p, msg).to_violation())

    for k, v in selector.match_labels.items():
        p = f"{path}.matchLabels[{k}]"
        for msg in label_key_errors(k):
            _add(p, f"invalid label key {k!r}: {msg}")
        for msg in label_value_errors(v):
            _add(p, f"invalid label value {v!r}: {msg}")

    for i, req in enumerate(selector.match_expressions):
        p = f"{path}.matchExpressions[{i}]"
        for msg in label_key_errors(req.key):
            _add(f"{p}.key", f"invalid label key {req.key!r}: {msg}")
        if req.operator not in _OPERATORS:
            _add(f"{p}.operator", f"unsupported operator {req.operator!r}, expected one of {sorted(_OPERATORS)}")
            continue
        if req.operator in _SET_OPERATORS:
            if not req.values:
                _add(f"{p}.values", f"must be specified when operator is {req.operator}")
            for j, v in enumerate(req.values):
                for msg in label_value_errors(v):
                    _add(f"{p}.values[{j}]", f"invalid label value {v!r}: {msg}")
        elif req.values:
            _add(f"{p}.values", f"may not be specified when operator is {req.operator}")

    return out
