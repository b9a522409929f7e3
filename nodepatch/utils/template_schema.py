from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

# Strategic-merge directive key. Only "replace" (maps, keyed lists) and
# "delete" (keyed list elements) are understood.
DIRECTIVE = "$patch"
MAP_DIRECTIVES = {"replace", "merge"}


@dataclass(frozen=True)
class Scalar:
    types: tuple = (str, int, float, bool)
    label: str = "a scalar"


@dataclass(frozen=True)
class AnyValue:
    pass


@dataclass(frozen=True)
class MapOf:
    """Homogeneous map, e.g. labels/annotations."""

    value: "SchemaNode"


@dataclass(frozen=True)
class Struct:
    """
    Object with typed known fields. Unknown fields are accepted and merged
    generically (maps recursively, everything else replaced).
    """

    fields: Mapping[str, "SchemaNode"] = field(default_factory=dict)


@dataclass(frozen=True)
class KeyedList:
    """List whose elements are identified by `key` and merged element-wise."""

    key: str
    item: "SchemaNode"


@dataclass(frozen=True)
class AtomicList:
    """List replaced wholesale whenever a patch sets it."""

    item: "SchemaNode" = AnyValue()


SchemaNode = Union[Scalar, AnyValue, MapOf, Struct, KeyedList, AtomicList]

ANY = AnyValue()
SCALAR = Scalar()
STRING = Scalar((str,), "a string")
INT = Scalar((int,), "an integer")
BOOL = Scalar((bool,), "a boolean")
QUANTITY = Scalar((str, int, float), "a quantity")
OBJECT = Struct()


def child_schema(node: SchemaNode, key: str) -> SchemaNode:
    if isinstance(node, Struct):
        return node.fields.get(key, ANY)
    if isinstance(node, MapOf):
        return node.value
    return ANY


def join_path(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def kind_of(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list):
        return "list"
    return type(value).__name__


def is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool))


def is_replace_marker(value: Any) -> bool:
    return isinstance(value, Mapping) and len(value) == 1 and value.get(DIRECTIVE) == "replace"


def schema_errors(value: Any, node: SchemaNode, path: str = "", *, patch: bool = False) -> list[tuple[str, str]]:
    """
    Deep structural check of a template (patch=False) or a patch fragment
    (patch=True) against `node`. Returns every (field_path, message) found.

    Patch mode additionally allows null values (key deletion) and `$patch`
    directives, and requires the merge key on every keyed-list element.
    """
    errs: list[tuple[str, str]] = []
    _check(value, node, path, patch, errs)
    return errs


def _check_object(value: Mapping, node: SchemaNode, path: str, patch: bool, errs: list[tuple[str, str]]) -> None:
    for k, v in value.items():
        p = join_path(path, str(k))
        if not isinstance(k, str):
            errs.append((p, f"object keys must be strings, got {kind_of(k)}"))
            continue
        if k == DIRECTIVE:
            if not patch:
                errs.append((p, "patch directives are not allowed in a template"))
            elif v not in MAP_DIRECTIVES:
                errs.append((p, f"unsupported directive {v!r} for an object"))
            continue
        _check(v, child_schema(node, k), p, patch, errs)


def _check(value: Any, node: SchemaNode, path: str, patch: bool, errs: list[tuple[str, str]]) -> None:
    if value is None:
        return

    if isinstance(node, AnyValue):
        if isinstance(value, Mapping):
            _check_object(value, node, path, patch, errs)
        elif isinstance(value, list):
            # Replaced wholesale, so items are plain template values.
            for i, elem in enumerate(value):
                _check(elem, ANY, f"{path}[{i}]", False, errs)
        elif not is_scalar(value):
            errs.append((path, f"expected a JSON value, got {kind_of(value)}"))
        return

    if isinstance(node, Scalar):
        if (
            not isinstance(value, node.types)
            or isinstance(value, (Mapping, list))
            or (isinstance(value, bool) and bool not in node.types)
        ):
            errs.append((path, f"expected {node.label}, got {kind_of(value)}"))
        return

    if isinstance(node, (Struct, MapOf)):
        if not isinstance(value, Mapping):
            errs.append((path, f"expected an object, got {kind_of(value)}"))
            return
        _check_object(value, node, path, patch, errs)
        return

    if isinstance(node, KeyedList):
        if not isinstance(value, list):
            errs.append((path, f"expected a list, got {kind_of(value)}"))
            return
        for i, elem in enumerate(value):
            p = f"{path}[{i}]"
            if patch and is_replace_marker(elem):
                continue
            if not isinstance(elem, Mapping):
                errs.append((p, f"expected an object, got {kind_of(elem)}"))
                continue
            key = elem.get(node.key)
            if key is None:
                if patch:
                    errs.append((p, f"missing merge key {node.key!r}"))
            elif not is_scalar(key):
                errs.append((join_path(p, node.key), f"merge key must be a scalar, got {kind_of(key)}"))
            directive = elem.get(DIRECTIVE)
            if patch and directive == "delete":
                continue
            _check(elem, node.item, p, patch, errs)
        return

    if isinstance(node, AtomicList):
        if not isinstance(value, list):
            errs.append((path, f"expected a list, got {kind_of(value)}"))
            return
        # Replaced wholesale, so items are plain template values.
        for i, elem in enumerate(value):
            _check(elem, node.item, f"{path}[{i}]", False, errs)
        return


# -- Pod template ----------------------------------------------------------

ENV_VAR = Struct({"name": STRING, "value": STRING, "valueFrom": OBJECT})

CONTAINER_PORT = Struct(
    {
        "containerPort": INT,
        "name": STRING,
        "protocol": STRING,
        "hostPort": INT,
        "hostIP": STRING,
    }
)

VOLUME_MOUNT = Struct(
    {
        "name": STRING,
        "mountPath": STRING,
        "subPath": STRING,
        "readOnly": BOOL,
        "mountPropagation": STRING,
    }
)

RESOURCES = Struct(
    {
        "limits": MapOf(QUANTITY),
        "requests": MapOf(QUANTITY),
        "claims": KeyedList("name", Struct({"name": STRING})),
    }
)

CONTAINER = Struct(
    {
        "name": STRING,
        "image": STRING,
        "imagePullPolicy": STRING,
        "command": AtomicList(STRING),
        "args": AtomicList(STRING),
        "workingDir": STRING,
        "env": KeyedList("name", ENV_VAR),
        "envFrom": AtomicList(OBJECT),
        "ports": KeyedList("containerPort", CONTAINER_PORT),
        "volumeMounts": KeyedList("mountPath", VOLUME_MOUNT),
        "volumeDevices": KeyedList("devicePath", Struct({"name": STRING, "devicePath": STRING})),
        "resources": RESOURCES,
        "securityContext": OBJECT,
        "livenessProbe": OBJECT,
        "readinessProbe": OBJECT,
        "startupProbe": OBJECT,
        "lifecycle": OBJECT,
        "terminationMessagePath": STRING,
        "terminationMessagePolicy": STRING,
        "stdin": BOOL,
        "tty": BOOL,
    }
)

POD_SPEC = Struct(
    {
        "containers": KeyedList("name", CONTAINER),
        "initContainers": KeyedList("name", CONTAINER),
        "ephemeralContainers": KeyedList("name", CONTAINER),
        "volumes": KeyedList("name", Struct({"name": STRING})),
        "imagePullSecrets": KeyedList("name", Struct({"name": STRING})),
        "hostAliases": KeyedList("ip", Struct({"ip": STRING, "hostnames": AtomicList(STRING)})),
        "topologySpreadConstraints": KeyedList("topologyKey", OBJECT),
        "tolerations": AtomicList(OBJECT),
        "readinessGates": AtomicList(OBJECT),
        "nodeSelector": MapOf(STRING),
        "affinity": OBJECT,
        "securityContext": OBJECT,
        "dnsConfig": OBJECT,
        "dnsPolicy": STRING,
        "restartPolicy": STRING,
        "serviceAccountName": STRING,
        "priorityClassName": STRING,
        "priority": INT,
        "schedulerName": STRING,
        "runtimeClassName": STRING,
        "hostNetwork": BOOL,
        "hostPID": BOOL,
        "hostIPC": BOOL,
        "terminationGracePeriodSeconds": INT,
    }
)

OBJECT_META = Struct(
    {
        "name": STRING,
        "namespace": STRING,
        "labels": MapOf(STRING),
        "annotations": MapOf(STRING),
        "finalizers": AtomicList(STRING),
    }
)

POD_TEMPLATE_SCHEMA = Struct({"metadata": OBJECT_META, "spec": POD_SPEC})
