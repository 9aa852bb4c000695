"""
Broadcast Status Use Case

Architectural Intent:
- Renders the Deployment and publishes it, or edits the published message
- Rendering happens under the Deployment lock; the channel call does not,
  so event ingestion is never blocked on network latency
- Broadcasts are serialized on the event loop so the first publish happens
  exactly once even when event and timer broadcasts race

Design Decisions:
- Channel failures are logged and swallowed: in-memory state stays the
  source of truth and the next broadcast retries from it
- Telemetry failures are logged and never stop a broadcast
"""

import asyncio
import logging
from typing import Optional

from deploy_notifier.domain.entities.deployment import Deployment
from deploy_notifier.domain.ports.notification_port import NotificationPort
from deploy_notifier.domain.ports.broadcast_recorder_port import BroadcastRecorderPort
from deploy_notifier.domain.value_objects.status_report import StatusReport

logger = logging.getLogger(__name__)


class BroadcastStatus:
    def __init__(
        self,
        deployment: Deployment,
        notifier: NotificationPort,
        header: str = "",
        recorder: Optional[BroadcastRecorderPort] = None,
    ):
        self.deployment = deployment
        self.notifier = notifier
        self.header = header
        self.recorder = recorder
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        # Created lazily so it binds to the loop that runs the broadcasts
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def execute(self) -> bool:
        """Broadcast the current state. Returns True if the channel accepted it."""
        async with self._get_lock():
            report = self.deployment.render(self.header)
            if report.is_empty:
                logger.debug("No projects yet, skipping broadcast")
                return False

            handle = self.deployment.message_handle
            action = "publish" if handle is None else "update"
            try:
                if handle is None:
                    handle = await self.notifier.publish(report.text, report.lines)
                    self.deployment.attach_message(handle)
                    logger.info(
                        "Published status message %s", handle,
                        extra={"action": action, "handle": handle},
                    )
                else:
                    await self.notifier.update(handle, report.text, report.lines)
                    logger.debug(
                        "Updated status message %s", handle,
                        extra={"action": action, "handle": handle},
                    )
            except Exception as e:
                logger.error(
                    "Status %s failed: %s", action, e,
                    exc_info=True, extra={"action": action, "handle": handle},
                )
                self._record(action, False, report)
                return False

            self._record(action, True, report)
            return True

    def _record(self, action: str, success: bool, report: StatusReport) -> None:
        # Counts come from the snapshot that was just sent
        if self.recorder is None:
            return
        try:
            self.recorder.record_broadcast(action, success)
            self.recorder.record_projects(
                total=report.project_count, failed=report.failed_count
            )
        except Exception as e:
            logger.warning(
                "Recording %s metrics failed: %s", action, e, extra={"action": action}
            )
