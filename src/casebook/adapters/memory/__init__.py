"""In-memory adapters: non-durable store, repositories and unit of work."""

from .repositories import (
    InMemoryArtifactRepository,
    InMemoryFolderRepository,
    InMemoryProjectRepository,
    InMemorySharedStepGroupRepository,
    InMemoryTagRepository,
)
from .store import InMemoryStoreData
from .unit_of_work import InMemoryUnitOfWork

__all__ = [
    "InMemoryArtifactRepository",
    "InMemoryFolderRepository",
    "InMemoryProjectRepository",
    "InMemorySharedStepGroupRepository",
    "InMemoryStoreData",
    "InMemoryTagRepository",
    "InMemoryUnitOfWork",
]
