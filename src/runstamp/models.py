"""
Data models for pipelines, run templates and their conditions.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

API_VERSION = "runstamp.io/v1alpha1"
RUN_TEMPLATE_KIND = "RunTemplate"
PIPELINE_KIND = "Pipeline"

RUN_TEMPLATE_READY = "RunTemplateReady"


class ConditionStatus(StrEnum):
    """Status values for a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class Reason(StrEnum):
    """Reasons reported on the RunTemplateReady condition."""

    READY = "Ready"
    RUN_TEMPLATE_NOT_FOUND = "RunTemplateNotFound"
    TEMPLATE_STAMP_FAILURE = "TemplateStampFailure"
    STAMPED_OBJECT_REJECTED = "StampedObjectRejectedByAPIServer"
    FAILED_TO_LIST_CREATED_OBJECTS = "FailedToListCreatedObjects"
    OUTPUT_PATH_NOT_SATISFIED = "OutputPathNotSatisfied"


@dataclass(frozen=True)
class Condition:
    """Outcome of a single realization."""

    type: str
    status: ConditionStatus
    reason: str
    message: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "type": self.type,
            "status": str(self.status),
            "reason": str(self.reason),
            "message": self.message,
        }


@dataclass(frozen=True)
class TemplateReference:
    """Reference from a pipeline to the RunTemplate it uses."""

    name: str
    kind: str = RUN_TEMPLATE_KIND
    namespace: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"kind": self.kind, "name": self.name}
        if self.namespace:
            result["namespace"] = self.namespace
        return result


@dataclass
class ObjectMeta:
    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ObjectMeta:
        data = data or {}
        return cls(
            name=str(data.get("name") or ""),
            namespace=str(data.get("namespace") or ""),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.namespace:
            result["namespace"] = self.namespace
        if self.labels:
            result["labels"] = dict(self.labels)
        if self.annotations:
            result["annotations"] = dict(self.annotations)
        return result


@dataclass(frozen=True)
class RunTemplate:
    """
    A parameterised resource document plus named output paths.

    ``template`` holds the raw JSON bytes of the document. It is decoded
    lazily by the stamper, so a malformed document is only reported when a
    pipeline tries to use it.
    """

    metadata: ObjectMeta
    template: bytes = b""
    outputs: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.metadata.name

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunTemplate:
        """Build a RunTemplate from a manifest mapping.

        Raises:
            ValueError: If required fields are missing or malformed
        """
        meta = ObjectMeta.from_dict(data.get("metadata"))
        if not meta.name:
            raise ValueError("RunTemplate metadata.name is required")

        spec = data.get("spec") or {}
        if not isinstance(spec, dict):
            raise ValueError(f"RunTemplate '{meta.name}' spec must be a mapping")

        raw = spec.get("template")
        if raw is None:
            template = b""
        elif isinstance(raw, bytes):
            template = raw
        elif isinstance(raw, str):
            template = raw.encode("utf-8")
        elif isinstance(raw, dict):
            template = json.dumps(raw).encode("utf-8")
        else:
            raise ValueError(f"RunTemplate '{meta.name}' spec.template must be a mapping")

        outputs = spec.get("outputs") or {}
        if not isinstance(outputs, dict):
            raise ValueError(f"RunTemplate '{meta.name}' spec.outputs must be a mapping")

        return cls(
            metadata=meta,
            template=template,
            outputs={str(k): str(v) for k, v in outputs.items()},
        )


@dataclass
class PipelineSpec:
    run_template_ref: TemplateReference
    inputs: dict[str, Any] = field(default_factory=dict)


@dataclass
class Pipeline:
    """
    The object driving realization.

    Templates reference its fields through ``$(pipeline.<path>)$``, which
    resolves against the mapping returned by ``to_dict()``.
    """

    metadata: ObjectMeta
    spec: PipelineSpec

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Pipeline:
        """Build a Pipeline from a manifest mapping.

        The run template reference inherits the pipeline's namespace when it
        does not name one.

        Raises:
            ValueError: If required fields are missing or malformed
        """
        meta = ObjectMeta.from_dict(data.get("metadata"))
        if not meta.name:
            raise ValueError("Pipeline metadata.name is required")

        spec = data.get("spec") or {}
        ref = spec.get("runTemplateRef") if isinstance(spec, dict) else None
        if not isinstance(ref, dict) or not ref.get("name"):
            raise ValueError(f"Pipeline '{meta.name}' spec.runTemplateRef.name is required")

        inputs = spec.get("inputs") or {}
        if not isinstance(inputs, dict):
            raise ValueError(f"Pipeline '{meta.name}' spec.inputs must be a mapping")

        return cls(
            metadata=meta,
            spec=PipelineSpec(
                run_template_ref=TemplateReference(
                    name=str(ref["name"]),
                    kind=str(ref.get("kind") or RUN_TEMPLATE_KIND),
                    namespace=str(ref.get("namespace") or meta.namespace) or None,
                ),
                inputs=dict(inputs),
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": API_VERSION,
            "kind": PIPELINE_KIND,
            "metadata": self.metadata.to_dict(),
            "spec": {
                "runTemplateRef": self.spec.run_template_ref.to_dict(),
                "inputs": self.spec.inputs,
            },
        }
