"""
In-memory resource store.

Reference implementation of the ``Repository`` contract for local runs and
tests. It mimics the parts of an API server the realizer relies on:
generateName suffixes, server-assigned metadata, label-selected listing and
a submission cache that makes repeated creation of the same stamped
document a no-op.
"""

from __future__ import annotations

import asyncio
import secrets
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from runstamp import objects
from runstamp.core.errors import RepositoryError
from runstamp.models import RUN_TEMPLATE_KIND, RunTemplate, TemplateReference
from runstamp.templates.run_template import RunTemplateModel

logger = structlog.get_logger()

# Same alphabet the Kubernetes API server uses for generateName suffixes
_SUFFIX_ALPHABET = "bcdfghjklmnpqrstvwxz2456789"
_SUFFIX_LENGTH = 5

_SERVER_FIELDS = ("uid", "creationTimestamp", "resourceVersion", "generation", "name")


class InMemoryRepository:
    """Asyncio-safe in-memory store for RunTemplates and stamped objects."""

    def __init__(self, templates: list[RunTemplate] | None = None) -> None:
        self._templates: dict[tuple[str, str], RunTemplate] = {}
        self._objects: dict[objects.ObjectIdentity, dict[str, Any]] = {}
        self._submissions: dict[str, objects.ObjectIdentity] = {}
        self._lock = asyncio.Lock()
        self._resource_version = 0
        self._last_created: datetime | None = None
        for template in templates or []:
            self.add_run_template(template)

    # === RunTemplates ===

    def add_run_template(self, template: RunTemplate) -> None:
        key = (template.metadata.namespace, template.name)
        self._templates[key] = template

    async def get_run_template(self, reference: TemplateReference) -> RunTemplateModel:
        if reference.kind and reference.kind != RUN_TEMPLATE_KIND:
            raise RepositoryError(f'unsupported template kind "{reference.kind}"')

        template = self._templates.get((reference.namespace or "", reference.name))
        if template is None:
            raise RepositoryError(
                f'runtemplates "{reference.name}" not found',
                details={"namespace": reference.namespace or ""},
            )
        return RunTemplateModel(template)

    # === Objects ===

    async def ensure_object_exists_on_cluster(
        self,
        obj: dict[str, Any],
        allow_update: bool,
    ) -> None:
        submission = objects.canonical_json(obj)

        async with self._lock:
            known = self._submissions.get(submission)
            if known is not None and known in self._objects:
                logger.debug("object_unchanged", object=objects.describe(obj))
                self._write_back(obj, self._objects[known])
                return

            if objects.get_name(obj):
                existing = self._objects.get(objects.identity(obj))
                if existing is not None:
                    if allow_update:
                        self._update(existing, obj)
                    self._submissions[submission] = objects.identity(existing)
                    self._write_back(obj, existing)
                    return
            elif not objects.get_generate_name(obj):
                raise RepositoryError("resource name may not be empty")

            stored = self._create(obj)
            self._submissions[submission] = objects.identity(stored)
            self._write_back(obj, stored)

    async def list_unstructured(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        api_version, kind, namespace, _ = objects.identity(query)
        selector = objects.get_labels(query)

        async with self._lock:
            matches = [
                objects.deep_copy(stored)
                for (s_api, s_kind, s_ns, _), stored in self._objects.items()
                if s_api == api_version
                and s_kind == kind
                and s_ns == namespace
                and selector.items() <= objects.get_labels(stored).items()
            ]

        matches.sort(key=_created_order, reverse=True)
        return matches

    async def update_status(self, obj: dict[str, Any], status: dict[str, Any]) -> dict[str, Any]:
        """Replace the stored object's status, as a controller would."""
        async with self._lock:
            stored = self._objects.get(objects.identity(obj))
            if stored is None:
                raise RepositoryError(f"{objects.describe(obj)} not found")
            stored["status"] = objects.deep_copy(status)
            objects.metadata(stored)["resourceVersion"] = self._next_resource_version()
            return objects.deep_copy(stored)

    def stored_objects(self) -> list[dict[str, Any]]:
        """Snapshot of every stored object, oldest first."""
        return sorted(
            (objects.deep_copy(stored) for stored in self._objects.values()),
            key=_created_order,
        )

    # === Internals ===

    def _create(self, obj: dict[str, Any]) -> dict[str, Any]:
        stored = objects.deep_copy(obj)
        meta = objects.metadata(stored)
        if not meta.get("name"):
            meta["name"] = self._generated_name(stored)
        meta["uid"] = str(uuid.uuid4())
        meta["creationTimestamp"] = self._next_creation_timestamp()
        meta["resourceVersion"] = self._next_resource_version()
        meta["generation"] = 1

        self._objects[objects.identity(stored)] = stored
        logger.debug("object_created", object=objects.describe(stored))
        return stored

    def _update(self, existing: dict[str, Any], obj: dict[str, Any]) -> None:
        meta = objects.metadata(existing)
        server_fields = {k: meta[k] for k in _SERVER_FIELDS if k in meta}
        status = existing.get("status")

        existing.clear()
        existing.update(objects.deep_copy(obj))
        existing.pop("status", None)
        if status is not None:
            existing["status"] = status

        meta = objects.metadata(existing)
        meta.update(server_fields)
        meta["generation"] = int(server_fields.get("generation", 0)) + 1
        meta["resourceVersion"] = self._next_resource_version()
        logger.debug("object_updated", object=objects.describe(existing))

    def _generated_name(self, obj: dict[str, Any]) -> str:
        prefix = objects.get_generate_name(obj)
        while True:
            suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
            candidate = {**obj, "metadata": {**objects.metadata(obj), "name": prefix + suffix}}
            if objects.identity(candidate) not in self._objects:
                return prefix + suffix

    def _next_resource_version(self) -> str:
        self._resource_version += 1
        return str(self._resource_version)

    def _next_creation_timestamp(self) -> str:
        now = datetime.now(UTC)
        if self._last_created is not None and now <= self._last_created:
            now = self._last_created + timedelta(microseconds=1)
        self._last_created = now
        return now.isoformat(timespec="microseconds").replace("+00:00", "Z")

    @staticmethod
    def _write_back(obj: dict[str, Any], stored: dict[str, Any]) -> None:
        stored_meta = objects.metadata(stored)
        meta = objects.metadata(obj)
        for key in _SERVER_FIELDS:
            if key in stored_meta:
                meta[key] = stored_meta[key]


def _created_order(obj: dict[str, Any]) -> tuple[str, int]:
    meta = obj.get("metadata") or {}
    return (str(meta.get("creationTimestamp") or ""), int(meta.get("resourceVersion") or 0))
