"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the deploy notifier
- Single place where the Deployment aggregate, its IdAllocator, adapters
  and use cases are created and wired together
- No adapter instantiation should occur outside this module

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- One Deployment per container, created at startup and never reset
"""

from dataclasses import dataclass
from typing import Optional

from deploy_notifier.domain.entities.deployment import Deployment
from deploy_notifier.domain.services.id_allocator import IdAllocator
from deploy_notifier.domain.services.status_renderer import build_header
from deploy_notifier.infrastructure.adapters.slack_adapter import SlackAdapter
from deploy_notifier.infrastructure.config import NotifierConfig
from deploy_notifier.infrastructure.telemetry.otel_exporter import (
    OTELExporter,
    create_exporter,
)
from deploy_notifier.application.use_cases.broadcast_status import BroadcastStatus
from deploy_notifier.application.use_cases.periodic_broadcast import PeriodicBroadcast
from deploy_notifier.application.use_cases.report_stage_event import ReportStageEvent
from deploy_notifier.presentation.web.app import NotifierWebApp


@dataclass
class NotifierContainer:
    """DI container holding all wired dependencies."""

    config: NotifierConfig
    id_allocator: IdAllocator
    deployment: Deployment
    slack_adapter: SlackAdapter
    telemetry: OTELExporter
    broadcast: BroadcastStatus
    periodic_broadcast: PeriodicBroadcast
    report_stage_event: ReportStageEvent
    web_app: NotifierWebApp


def create_container(config: Optional[NotifierConfig] = None) -> NotifierContainer:
    """Create and wire all dependencies."""
    config = config or NotifierConfig()

    id_allocator = IdAllocator()
    deployment = Deployment(id_allocator=id_allocator)

    slack_adapter = SlackAdapter(
        token=config.slack.token,
        channel_id=config.slack.channel_id,
        api_url=config.slack.api_url,
        timeout_seconds=config.slack.timeout_seconds,
    )
    telemetry = create_exporter(
        endpoint=config.telemetry.endpoint,
        insecure=config.telemetry.insecure,
        environment=config.run.tenant or "development",
    )

    header = build_header(
        header=config.slack.header,
        tenant=config.run.tenant,
        run_id=config.run.run_id,
        repo_url=config.run.repo_url,
    )
    broadcast = BroadcastStatus(deployment, slack_adapter, header, telemetry)
    periodic_broadcast = PeriodicBroadcast(
        broadcast, interval_seconds=config.broadcast.interval_seconds
    )
    report_stage_event = ReportStageEvent(deployment, broadcast, periodic_broadcast)
    web_app = NotifierWebApp(
        report_stage_event, request_timeout=config.web.request_timeout_seconds
    )

    return NotifierContainer(
        config=config,
        id_allocator=id_allocator,
        deployment=deployment,
        slack_adapter=slack_adapter,
        telemetry=telemetry,
        broadcast=broadcast,
        periodic_broadcast=periodic_broadcast,
        report_stage_event=report_stage_event,
        web_app=web_app,
    )
