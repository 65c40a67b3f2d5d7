"""
CareCore Storage

Repository ports and in-memory adapters.
"""

from carecore.storage.base import (
    AuthorizationRepository,
    BaseRepository,
    CarePlanFilters,
    CarePlanRepository,
    ProgressNoteRepository,
    TaskFilters,
    TaskInstanceRepository,
)
from carecore.storage.memory import (
    InMemoryAuthorizationRepository,
    InMemoryCarePlanRepository,
    InMemoryProgressNoteRepository,
    InMemoryTaskInstanceRepository,
)

__all__ = [
    "AuthorizationRepository",
    "BaseRepository",
    "CarePlanFilters",
    "CarePlanRepository",
    "ProgressNoteRepository",
    "TaskFilters",
    "TaskInstanceRepository",
    "InMemoryAuthorizationRepository",
    "InMemoryCarePlanRepository",
    "InMemoryProgressNoteRepository",
    "InMemoryTaskInstanceRepository",
]
