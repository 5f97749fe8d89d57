from __future__ import annotations

from typing import Any, Protocol

from runstamp.models import TemplateReference
from runstamp.templates.run_template import RunTemplateModel


class Repository(Protocol):
    """Resource store contract consumed by the realizer.

    Every method may block on I/O and may raise. Cancellation of the calling
    task must be allowed to propagate.
    """

    async def get_run_template(self, reference: TemplateReference) -> RunTemplateModel:
        ...

    async def ensure_object_exists_on_cluster(
        self,
        obj: dict[str, Any],
        allow_update: bool,
    ) -> None:
        """Idempotently persist ``obj``.

        Server-assigned metadata (name, uid, creationTimestamp, ...) may be
        written back into ``obj``.
        """
        ...

    async def list_unstructured(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        """List objects with the query's apiVersion, kind, namespace and labels."""
        ...
