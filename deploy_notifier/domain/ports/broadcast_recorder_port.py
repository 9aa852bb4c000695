"""
Broadcast Recorder Port

Architectural Intent:
- Lets the broadcaster report outcomes without depending on a telemetry SDK
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class BroadcastRecorderPort(Protocol):
    def record_broadcast(self, action: str, success: bool) -> None: ...

    def record_projects(self, total: int, failed: int) -> None: ...
