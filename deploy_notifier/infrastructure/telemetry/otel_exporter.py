"""
OpenTelemetry Exporter for the Deploy Notifier

Architectural Intent:
- Exports broadcast outcomes and project counts to OTLP-compatible backends
- Implements BroadcastRecorderPort so the broadcaster stays SDK-agnostic
- Metrics are always buffered locally; they are exported only when an
  endpoint is configured

Security:
- Endpoint defaults to empty string (must be explicitly configured)
- Non-localhost http:// endpoints rejected unless insecure=True
- Validation in __post_init__ prevents accidental plaintext export
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Optional, Any
from urllib.parse import urlparse
import logging
from datetime import datetime, UTC

logger = logging.getLogger(__name__)

# Local buffer keeps only the most recent records
MAX_BUFFERED_METRICS = 1000


@dataclass
class OTELConfig:
    endpoint: str = ""
    service_name: str = "deploy-notifier"
    environment: str = "development"
    insecure: bool = False

    def __post_init__(self) -> None:
        if self.endpoint:
            parsed = urlparse(self.endpoint)
            is_localhost = parsed.hostname in ("localhost", "127.0.0.1", "::1")
            if parsed.scheme == "http" and not is_localhost and not self.insecure:
                raise ValueError(
                    f"Non-localhost HTTP endpoint '{self.endpoint}' requires "
                    "insecure=True or use https://. "
                    "Set insecure=True to explicitly allow plaintext export."
                )


class OTELExporter:
    """
    OpenTelemetry metrics exporter for the notifier.

    Metrics:
    - deploy_notifier.broadcasts (counter, by action and success)
    - deploy_notifier.projects (gauge, total and failed)
    """

    def __init__(self, config: OTELConfig):
        self.config = config
        self._initialized = False
        self._metrics_buffer: deque[dict[str, Any]] = deque(
            maxlen=MAX_BUFFERED_METRICS
        )
        self._meter: Any = None
        self._provider: Any = None
        self._instruments: dict[str, Any] = {}

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Initialize the OpenTelemetry SDK and OTLP metric exporter."""
        if not self.config.endpoint:
            logger.info("OTEL endpoint not configured, telemetry disabled")
            return

        try:
            from opentelemetry import metrics
            from opentelemetry.sdk.metrics import MeterProvider
            from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
            from opentelemetry.sdk.resources import Resource, SERVICE_NAME
            from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
                OTLPMetricExporter,
            )

            resource = Resource(
                attributes={
                    SERVICE_NAME: self.config.service_name,
                    "environment": self.config.environment,
                }
            )
            metric_reader = PeriodicExportingMetricReader(
                OTLPMetricExporter(
                    endpoint=self.config.endpoint, insecure=self.config.insecure
                )
            )
            self._provider = MeterProvider(
                resource=resource, metric_readers=[metric_reader]
            )
            metrics.set_meter_provider(self._provider)
            self._meter = metrics.get_meter(__name__)
            self._initialized = True

        except Exception as e:
            logger.error("Failed to initialize OTEL: %s", e)
            self._initialized = False

    def _instrument(self, kind: str, name: str, unit: str = "") -> Any:
        """Get or create a counter or gauge for a metric name."""
        if name not in self._instruments and self._meter:
            if kind == "counter":
                self._instruments[name] = self._meter.create_counter(name, unit=unit)
            else:
                self._instruments[name] = self._meter.create_gauge(name, unit=unit)
        return self._instruments.get(name)

    def record_metric(
        self,
        name: str,
        value: float,
        kind: str = "gauge",
        unit: str = "",
        attributes: Optional[dict[str, str]] = None,
    ) -> None:
        """Record a metric value."""
        self._metrics_buffer.append(
            {
                "name": name,
                "value": value,
                "kind": kind,
                "unit": unit,
                "attributes": attributes or {},
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )

        if self._initialized:
            instrument = self._instrument(kind, name, unit)
            if instrument is None:
                return
            if kind == "counter":
                instrument.add(value, attributes=attributes or {})
            else:
                instrument.set(value, attributes=attributes or {})

    def record_broadcast(self, action: str, success: bool) -> None:
        """Record a publish or update attempt."""
        self.record_metric(
            "deploy_notifier.broadcasts",
            1,
            kind="counter",
            attributes={"action": action, "success": str(success).lower()},
        )

    def record_projects(self, total: int, failed: int) -> None:
        """Record how many projects are tracked and how many failed."""
        self.record_metric(
            "deploy_notifier.projects", total, attributes={"state": "total"}
        )
        self.record_metric(
            "deploy_notifier.projects", failed, attributes={"state": "failed"}
        )

    def shutdown(self) -> None:
        """Flush pending metrics and release the SDK provider."""
        self._metrics_buffer.clear()
        if not self._initialized:
            return
        try:
            self._provider.shutdown()
        except Exception as e:
            logger.warning("OTEL shutdown failed: %s", e)
        self._initialized = False


def create_exporter(
    endpoint: Optional[str] = None,
    insecure: bool = False,
    service_name: str = "deploy-notifier",
    environment: str = "development",
) -> OTELExporter:
    """Factory function to create and initialize an OTEL exporter."""
    config = OTELConfig(
        endpoint=endpoint or "",
        service_name=service_name,
        environment=environment,
        insecure=insecure,
    )
    exporter = OTELExporter(config)
    exporter.initialize()
    return exporter
