"""
Helpers for unstructured resource documents.

Resources travel through runstamp as plain JSON-compatible dicts, the same
shape a Kubernetes dynamic client hands back. These helpers read and write
the handful of metadata fields the realizer cares about.
"""

from __future__ import annotations

import copy
import json
from typing import Any

ObjectIdentity = tuple[str, str, str, str]


def _meta_view(obj: dict[str, Any]) -> dict[str, Any]:
    meta = obj.get("metadata")
    return meta if isinstance(meta, dict) else {}


def metadata(obj: dict[str, Any]) -> dict[str, Any]:
    """Return the object's metadata mapping, creating it if missing."""
    meta = obj.get("metadata")
    if not isinstance(meta, dict):
        meta = {}
        obj["metadata"] = meta
    return meta


def get_name(obj: dict[str, Any]) -> str:
    return str(_meta_view(obj).get("name") or "")


def get_generate_name(obj: dict[str, Any]) -> str:
    return str(_meta_view(obj).get("generateName") or "")


def get_namespace(obj: dict[str, Any]) -> str:
    return str(_meta_view(obj).get("namespace") or "")


def get_labels(obj: dict[str, Any]) -> dict[str, str]:
    labels = _meta_view(obj).get("labels")
    return dict(labels) if isinstance(labels, dict) else {}


def set_labels(obj: dict[str, Any], labels: dict[str, str]) -> None:
    """Merge labels into the object's existing labels."""
    meta = metadata(obj)
    merged = dict(meta.get("labels") or {})
    merged.update(labels)
    meta["labels"] = merged


def identity(obj: dict[str, Any]) -> ObjectIdentity:
    """(apiVersion, kind, namespace, name) of an object."""
    return (
        str(obj.get("apiVersion") or ""),
        str(obj.get("kind") or ""),
        get_namespace(obj),
        get_name(obj),
    )


def describe(obj: dict[str, Any]) -> str:
    """Short human-readable reference, e.g. ``ConfigMap some-ns/my-cm``."""
    _, kind, namespace, name = identity(obj)
    name = name or f"{get_generate_name(obj)}*"
    return f"{kind} {namespace}/{name}" if namespace else f"{kind} {name}"


def deep_copy(obj: dict[str, Any]) -> dict[str, Any]:
    return copy.deepcopy(obj)


def canonical_json(value: Any) -> str:
    """Stable JSON encoding used to compare documents."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"))
