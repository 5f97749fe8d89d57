"""RunTemplate model handed out by repositories."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from runstamp.models import RunTemplate


class RunTemplateModel:
    """Read-only view of a RunTemplate for stamping and output extraction."""

    def __init__(self, template: RunTemplate) -> None:
        self._template = template

    @property
    def name(self) -> str:
        return self._template.name

    @property
    def namespace(self) -> str:
        return self._template.metadata.namespace

    @property
    def resource_template(self) -> bytes:
        """Raw, undecoded template document."""
        return self._template.template

    @property
    def output_paths(self) -> Mapping[str, str]:
        return MappingProxyType(self._template.outputs)

    def resolve(self) -> tuple[bytes, Mapping[str, str]]:
        """Return the raw template document and its output paths."""
        return self.resource_template, self.output_paths

    def __repr__(self) -> str:
        return f"RunTemplateModel(name={self.name!r}, outputs={sorted(self.output_paths)})"
