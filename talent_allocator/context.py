"""Wiring of store, state and services into one injectable object."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

import httpx

from allocation_engine.availability import partition_by_availability
from allocation_engine.colors import ColorAllocator
from allocation_engine.metrics import dashboard_overview

from .activity import ActivityLog
from .backends import ALLOCATIONS, AREAS, CLIENTS, PROJECTS, TALENTS, Backend, MemoryBackend, create_backend
from .cascade import CascadeManager
from .config import Settings, local_settings
from .loader import DataLoader
from .services import (
    AllocationService,
    AreaService,
    ClientService,
    EntityService,
    ProjectService,
    TalentService,
)
from .state import StateStore


@dataclass
class EngineContext:
    settings: Settings
    backend: Backend
    state: StateStore
    colors: ColorAllocator
    activity: ActivityLog
    allocations: AllocationService
    projects: ProjectService
    talents: TalentService
    areas: AreaService
    clients: ClientService
    cascade: CascadeManager
    loader: DataLoader

    @classmethod
    def build(
        cls,
        settings: Settings,
        backend: Backend,
        *,
        state: StateStore | None = None,
        colors: ColorAllocator | None = None,
    ) -> EngineContext:
        state = state or StateStore()
        colors = colors or ColorAllocator()
        activity = ActivityLog(backend)

        allocations = AllocationService(backend, state, activity, conflict_policy=settings.conflict_policy)
        projects = ProjectService(backend, state, activity, colors=colors)
        talents = TalentService(backend, state, activity)
        areas = AreaService(backend, state, activity)
        clients = ClientService(backend, state, activity)

        services: dict[str, EntityService] = {
            ALLOCATIONS: allocations,
            PROJECTS: projects,
            TALENTS: talents,
            AREAS: areas,
            CLIENTS: clients,
        }
        cascade = CascadeManager(
            backend,
            projects=projects,
            allocations=allocations,
            talents=talents,
            areas=areas,
            activity=activity,
        )
        return cls(
            settings=settings,
            backend=backend,
            state=state,
            colors=colors,
            activity=activity,
            allocations=allocations,
            projects=projects,
            talents=talents,
            areas=areas,
            clients=clients,
            cascade=cascade,
            loader=DataLoader(state, services),
        )

    @classmethod
    def from_settings(cls, settings: Settings, *, transport: httpx.BaseTransport | None = None) -> EngineContext:
        return cls.build(settings, create_backend(settings, transport=transport))

    @classmethod
    def in_memory(cls, conflict_policy: str = "warn") -> EngineContext:
        return cls.build(local_settings(conflict_policy), MemoryBackend())

    # -- read-side conveniences over the cached state --

    def availability(self, day: str) -> dict[str, Any]:
        available, unavailable = partition_by_availability(
            self.state.get(TALENTS) or [],
            self.state.get(ALLOCATIONS) or [],
            self.state.get(PROJECTS) or [],
            day,
        )
        return {"date": day, "available": available, "unavailable": unavailable}

    def dashboard(self, today: date | None = None) -> dict[str, Any]:
        return dashboard_overview(
            self.state.get(TALENTS) or [],
            self.state.get(PROJECTS) or [],
            self.state.get(ALLOCATIONS) or [],
            today or date.today(),
        )

    def close(self) -> None:
        self.backend.close()
