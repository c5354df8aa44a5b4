"""Entity services over the record store, one per collection."""

from .allocations import AllocationOutcome, AllocationService
from .areas import AreaService
from .base import EntityService
from .clients import ClientService
from .projects import PROJECT_STATUSES, ProjectService
from .talents import TalentService

__all__ = [
    "PROJECT_STATUSES",
    "AllocationOutcome",
    "AllocationService",
    "AreaService",
    "ClientService",
    "EntityService",
    "ProjectService",
    "TalentService",
]
