"""
Domain Services Package

Architectural Intent:
- Contains domain services implementing business logic
- Id allocation and status rendering are shared by the Deployment aggregate
"""

from deploy_notifier.domain.services.id_allocator import IdAllocator
from deploy_notifier.domain.services.status_renderer import (
    format_duration,
    render_status,
    build_header,
)

__all__ = [
    "IdAllocator",
    "format_duration",
    "render_status",
    "build_header",
]
