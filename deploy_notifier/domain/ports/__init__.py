"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from deploy_notifier.domain.ports.notification_port import (
    NotificationPort,
    NotificationError,
)
from deploy_notifier.domain.ports.broadcast_recorder_port import BroadcastRecorderPort

__all__ = [
    "NotificationPort",
    "NotificationError",
    "BroadcastRecorderPort",
]
