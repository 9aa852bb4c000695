"""
Notification Port

Architectural Intent:
- Abstract interface for the channel the status message is published to
- The domain only knows about a single editable message identified by an
  opaque handle (a Slack message timestamp for the Slack adapter)

Design Decisions:
- Uses Protocol for structural typing (no inheritance needed)
- publish: posts a new message and returns its handle
- update: replaces the content of a previously published message
- Failures raise NotificationError; callers decide whether they are fatal
"""

from typing import Protocol, Sequence, runtime_checkable

from deploy_notifier.domain.value_objects.status_report import StatusLine


class NotificationError(Exception):
    """Raised when the notification channel rejects or fails a call."""


@runtime_checkable
class NotificationPort(Protocol):
    """Port for publishing and editing the deployment status message."""

    async def publish(self, text: str, lines: Sequence[StatusLine]) -> str:
        """Post a new message.

        Args:
            text: Message header text
            lines: One line per project, sent as attachments

        Returns:
            Handle identifying the message for later updates
        """
        ...

    async def update(
        self, handle: str, text: str, lines: Sequence[StatusLine]
    ) -> None:
        """Replace the content of a published message.

        Args:
            handle: Handle returned by publish
            text: Message header text
            lines: One line per project, sent as attachments
        """
        ...
