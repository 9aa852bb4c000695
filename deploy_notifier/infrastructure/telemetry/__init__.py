"""
Deploy Notifier Telemetry Infrastructure

Architectural Intent:
- OpenTelemetry integration for observability
- Broadcast and project metrics export
"""

from deploy_notifier.infrastructure.telemetry.otel_exporter import (
    OTELExporter,
    OTELConfig,
    create_exporter,
)

__all__ = [
    "OTELExporter",
    "OTELConfig",
    "create_exporter",
]
