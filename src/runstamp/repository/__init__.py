"""Resource store contract plus the in-memory store and manifest loading."""

from runstamp.repository.base import Repository
from runstamp.repository.manifests import ManifestSet, load_manifests
from runstamp.repository.memory import InMemoryRepository

__all__ = [
    "InMemoryRepository",
    "ManifestSet",
    "Repository",
    "load_manifests",
]
