"""
Deployment Module

Architectural Intent:
- Deployment aggregate is the consistency boundary for all project state
- Projects are discovered lazily from the first event naming them and are
  never removed; display order is the order they were first seen
- A single lock guards every read and mutation, including render, so a
  rendered report is never a torn view of concurrent updates
- The Slack message handle lives here so publish happens exactly once

Design Decisions:
- Transitions never fail: an unknown or empty name simply becomes a project
- Clock and IdAllocator are injected for deterministic tests
- Readers get copies of project records, never the live ones
"""

from __future__ import annotations
from dataclasses import replace
from datetime import datetime, UTC
from typing import Callable, Optional
import logging
import threading

from deploy_notifier.domain.entities.project import Project, Stage
from deploy_notifier.domain.services.id_allocator import IdAllocator
from deploy_notifier.domain.services.status_renderer import render_status
from deploy_notifier.domain.value_objects.stage_event import StageEvent
from deploy_notifier.domain.value_objects.status_report import StatusReport

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Deployment:
    def __init__(
        self,
        id_allocator: Optional[IdAllocator] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._ids = id_allocator or IdAllocator()
        self._clock = clock
        self._lock = threading.Lock()
        self._projects: dict[str, Project] = {}
        self._start_time = clock()
        self._done = False
        self._message_handle: Optional[str] = None

    @property
    def start_time(self) -> datetime:
        return self._start_time

    @property
    def done(self) -> bool:
        with self._lock:
            return self._done

    @property
    def message_handle(self) -> Optional[str]:
        with self._lock:
            return self._message_handle

    @property
    def projects(self) -> list[Project]:
        """Copies of the projects in display order."""
        with self._lock:
            return [
                replace(p) for p in sorted(self._projects.values(), key=lambda p: p.id)
            ]

    def get(self, name: str) -> Optional[Project]:
        """Copy of the named project, or None if it has not reported yet."""
        with self._lock:
            project = self._projects.get(name)
            return replace(project) if project is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._projects)

    # Caller must hold self._lock
    def _project(self, name: str) -> Project:
        project = self._projects.get(name)
        if project is None:
            project = Project(name=name, id=self._ids.next(), start_time=self._clock())
            self._projects[name] = project
            logger.info(
                "Tracking project %r (id=%d)", name, project.id, extra={"project": name}
            )
        return project

    def _set_stage(self, name: str, stage: Stage) -> None:
        with self._lock:
            self._project(name).stage = stage

    def not_deploying(self, name: str) -> None:
        self._set_stage(name, Stage.NOT_DEPLOYING)

    def start_building(self, name: str) -> None:
        self._set_stage(name, Stage.BUILDING)

    def start_deploying(self, name: str) -> None:
        self._set_stage(name, Stage.DEPLOYING)

    def failed(self, name: str) -> None:
        with self._lock:
            project = self._project(name)
            project.failed = True
            project.end_time = self._clock()

    def succeeded(self, name: str) -> None:
        with self._lock:
            project = self._project(name)
            project.stage = Stage.SUCCEEDED
            project.end_time = self._clock()

    def mark_done(self) -> None:
        with self._lock:
            if not self._done:
                self._done = True
                logger.info("Deployment marked done (%d projects)", len(self._projects))

    def apply(self, event: StageEvent, name: str = "") -> None:
        """Dispatch an inbound event to its transition."""
        if event is StageEvent.DONE:
            self.mark_done()
            return
        transitions = {
            StageEvent.BUILDING: self.start_building,
            StageEvent.DEPLOYING: self.start_deploying,
            StageEvent.FAILED: self.failed,
            StageEvent.SUCCEEDED: self.succeeded,
            StageEvent.NOOP: self.not_deploying,
        }
        transitions[event](name)

    def attach_message(self, handle: str) -> bool:
        """Store the channel message handle. Only the first handle is kept."""
        with self._lock:
            if self._message_handle is not None:
                return False
            self._message_handle = handle
            return True

    def render(self, header: str = "") -> StatusReport:
        with self._lock:
            return render_status(
                self._projects.values(),
                done=self._done,
                started_at=self._start_time,
                now=self._clock(),
                header=header,
            )

    def __repr__(self) -> str:
        return (
            f"Deployment(projects={len(self._projects)}, done={self._done}, "
            f"message_handle={self._message_handle})"
        )
