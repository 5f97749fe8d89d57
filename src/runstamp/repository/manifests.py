"""Manifest loader for RunTemplate and Pipeline YAML files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from runstamp.core.errors import ManifestError
from runstamp.models import PIPELINE_KIND, RUN_TEMPLATE_KIND, Pipeline, RunTemplate
from runstamp.repository.memory import InMemoryRepository

logger = structlog.get_logger()

MANIFEST_SUFFIXES = (".yaml", ".yml", ".json")


@dataclass
class ManifestSet:
    """RunTemplates and Pipelines read from one or more manifest files."""

    run_templates: list[RunTemplate] = field(default_factory=list)
    pipelines: list[Pipeline] = field(default_factory=list)

    def repository(self) -> InMemoryRepository:
        """In-memory repository seeded with the loaded RunTemplates."""
        return InMemoryRepository(templates=self.run_templates)

    def select_pipelines(
        self,
        name: str | None = None,
        namespace: str | None = None,
    ) -> list[Pipeline]:
        return [
            p
            for p in self.pipelines
            if (name is None or p.name == name) and (namespace is None or p.namespace == namespace)
        ]


def load_manifests(*paths: str | Path, default_namespace: str = "") -> ManifestSet:
    """Load every manifest found in the given files and directories.

    Directories are searched (non-recursively) for YAML and JSON files in
    sorted order. Files may hold several YAML documents.

    Raises:
        ManifestError: If a path is missing, a file is not valid YAML, or a
            document is not a supported RunTemplate or Pipeline
    """
    result = ManifestSet()
    for file_path in _expand(paths):
        for document in _read_documents(file_path):
            _add_document(result, document, file_path, default_namespace)
    return result


def _expand(paths: tuple[str | Path, ...]) -> list[Path]:
    files: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            files.extend(
                sorted(p for p in path.iterdir() if p.is_file() and p.suffix in MANIFEST_SUFFIXES)
            )
        elif path.is_file():
            files.append(path)
        else:
            raise ManifestError(f"Manifest path not found: {path}")
    return files


def _read_documents(path: Path) -> list[Any]:
    try:
        with open(path) as f:
            documents = [doc for doc in yaml.safe_load_all(f) if doc is not None]
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in {path}: {e}") from e

    logger.debug("loaded_manifest_file", path=str(path), documents=len(documents))
    return documents


def _add_document(
    result: ManifestSet,
    document: Any,
    path: Path,
    default_namespace: str,
) -> None:
    if not isinstance(document, dict):
        raise ManifestError(f"Manifest documents must be mappings: {path}")

    if default_namespace:
        metadata = document.get("metadata") or {}
        if not metadata.get("namespace"):
            metadata["namespace"] = default_namespace
        document["metadata"] = metadata

    kind = document.get("kind")
    try:
        if kind == RUN_TEMPLATE_KIND:
            result.run_templates.append(RunTemplate.from_dict(document))
        elif kind == PIPELINE_KIND:
            result.pipelines.append(Pipeline.from_dict(document))
        else:
            raise ManifestError(
                f"unsupported manifest kind {kind!r} in {path}",
                details={"supported": f"{RUN_TEMPLATE_KIND}, {PIPELINE_KIND}"},
            )
    except ValueError as e:
        raise ManifestError(f"{e} ({path})") from e
