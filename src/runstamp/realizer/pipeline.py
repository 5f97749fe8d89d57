"""
Pipeline realization.

Sequences RunTemplate lookup, stamping, idempotent creation, re-listing and
output extraction, and reports the outcome as a RunTemplateReady condition.
Collaborator failures never escape: each one maps to a condition reason and
a single log entry. Log messages are stable and scraped downstream.
"""

from __future__ import annotations

from typing import Any

from runstamp import objects
from runstamp.core.errors import OutputPathNotSatisfiedError
from runstamp.models import Condition, Pipeline
from runstamp.realizer import conditions
from runstamp.repository.base import Repository
from runstamp.templates.outputs import Outputs, extract_outputs
from runstamp.templates.stamper import Stamper

DEFAULT_LABEL_PREFIX = "runstamp.io"

RealizeResult = tuple[Condition, Outputs | None, dict[str, Any] | None]


class PipelineRealizer:
    """Stateless realizer; one instance may serve any number of pipelines."""

    def __init__(self, label_prefix: str = DEFAULT_LABEL_PREFIX) -> None:
        self.label_prefix = label_prefix

    def labels_for(self, pipeline: Pipeline, template_name: str) -> dict[str, str]:
        """Labels stamped onto every object created for a pipeline."""
        return {
            f"{self.label_prefix}/pipeline-name": pipeline.name,
            f"{self.label_prefix}/pipeline-namespace": pipeline.namespace,
            f"{self.label_prefix}/run-template-name": template_name,
        }

    async def realize(
        self,
        pipeline: Pipeline,
        logger: Any,
        repository: Repository,
    ) -> RealizeResult:
        """
        Realize a pipeline's RunTemplate.

        Args:
            pipeline: Input object naming the RunTemplate and carrying inputs
            logger: Structured logger (structlog-style ``info``/``error``)
            repository: Resource store

        Returns:
            Tuple of (condition, outputs, materialized object). Outputs are
            only set on a Ready condition. The object is set whenever
            creation succeeded; if the store could not be listed it is the
            persisted copy.
        """
        ref = pipeline.spec.run_template_ref
        try:
            template = await repository.get_run_template(ref)
        except Exception as e:
            message = f"could not get RunTemplate '{ref.name}'"
            logger.error(message, error=str(e))
            return conditions.run_template_missing_condition(f"{message}: {e}"), None, None

        raw_template, output_paths = template.resolve()
        stamper = Stamper.for_pipeline(pipeline, labels=self.labels_for(pipeline, template.name))
        try:
            stamped = stamper.stamp(raw_template)
        except Exception as e:
            message = "could not stamp template"
            logger.error(message, error=str(e))
            return conditions.template_stamp_failure_condition(f"{message}: {e}"), None, None

        persisted = objects.deep_copy(stamped)
        try:
            await repository.ensure_object_exists_on_cluster(persisted, False)
        except Exception as e:
            message = "could not create object"
            logger.error(message, error=str(e))
            return conditions.stamped_object_rejected_condition(f"{message}: {e}"), None, None

        query = objects.deep_copy(stamped)
        objects.metadata(query).pop("name", None)
        objects.metadata(query).pop("generateName", None)
        try:
            listed = await repository.list_unstructured(query)
        except Exception as e:
            message = f"could not list pipeline objects: {e}"
            logger.error(message, error=str(e))
            return conditions.failed_to_list_created_objects_condition(message), None, persisted

        materialized = select_materialized(persisted, listed)
        try:
            outputs = extract_outputs(materialized, output_paths)
        except OutputPathNotSatisfiedError as e:
            logger.info(f"could not get output: {e}")
            return conditions.output_path_not_satisfied_condition(e), None, materialized

        return conditions.run_template_ready_condition(), outputs, materialized


def select_materialized(
    persisted: dict[str, Any],
    listed: list[dict[str, Any]],
) -> dict[str, Any]:
    """
    Pick the authoritative instance of the object just persisted.

    Preference order: the listed object that is (or has the identity of) the
    persisted one; the newest listed object; the persisted copy itself.
    """
    for candidate in listed:
        if candidate is persisted:
            return candidate

    if objects.get_name(persisted):
        key = objects.identity(persisted)
        for candidate in listed:
            if objects.identity(candidate) == key:
                return candidate

    if listed:
        return max(listed, key=_creation_timestamp)
    return persisted


def _creation_timestamp(obj: dict[str, Any]) -> str:
    return str((obj.get("metadata") or {}).get("creationTimestamp") or "")
