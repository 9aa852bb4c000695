"""
Report Stage Event Use Case

Architectural Intent:
- Entry point for inbound pipeline events
- Applies the transition to the Deployment, then broadcasts immediately
- A "done" event also stops the periodic broadcaster
"""

import logging
from typing import Optional

from deploy_notifier.domain.entities.deployment import Deployment
from deploy_notifier.domain.value_objects.stage_event import StageEvent
from deploy_notifier.application.use_cases.broadcast_status import BroadcastStatus
from deploy_notifier.application.use_cases.periodic_broadcast import PeriodicBroadcast

logger = logging.getLogger(__name__)


class ReportStageEvent:
    def __init__(
        self,
        deployment: Deployment,
        broadcast: BroadcastStatus,
        periodic: Optional[PeriodicBroadcast] = None,
    ):
        self.deployment = deployment
        self.broadcast = broadcast
        self.periodic = periodic

    def apply(self, event: StageEvent, project: str = "") -> None:
        logger.debug(
            "Event %s for %r", event.value, project,
            extra={"event": event.value, "project": project},
        )
        self.deployment.apply(event, project)
        if event is StageEvent.DONE and self.periodic is not None:
            self.periodic.stop()

    async def execute(self, event: StageEvent, project: str = "") -> bool:
        self.apply(event, project)
        return await self.broadcast.execute()
