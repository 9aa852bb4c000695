"""
Slack Notification Adapter

Architectural Intent:
- Implements NotificationPort on top of the Slack Web API
  (chat.postMessage / chat.update)
- Uses stdlib urllib for the HTTP layer (no external dependencies)
- Falls back to a stub that logs calls when no token is configured, for
  development and testing

Design Decisions:
- Blocking HTTP calls run in the default executor so the event loop stays free
- The handle returned by publish is the Slack message timestamp ("ts")
- Each status line becomes one attachment carrying its color and stable id
- Transport errors, HTTP errors and "ok": false all raise NotificationError
"""

import asyncio
import json
import logging
import urllib.error
import urllib.request
import uuid
from typing import Optional, Sequence

from deploy_notifier.domain.ports.notification_port import NotificationError
from deploy_notifier.domain.value_objects.status_report import StatusLine

logger = logging.getLogger(__name__)


class SlackAdapter:
    """Slack notification adapter."""

    def __init__(
        self,
        token: str = "",
        channel_id: str = "",
        api_url: str = "https://slack.com/api",
        timeout_seconds: float = 10,
    ) -> None:
        """Initialize Slack adapter.

        Args:
            token: Slack bot token (xoxb-...). Empty enables stub mode.
            channel_id: Channel to post the status message to
            api_url: Base URL of the Slack Web API
            timeout_seconds: Per-request timeout
        """
        self._token = token
        self._channel_id = channel_id
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout_seconds
        self._channels: dict[str, str] = {}
        self._messages: dict[str, dict] = {}

    @property
    def stub(self) -> bool:
        return not self._token

    async def publish(self, text: str, lines: Sequence[StatusLine]) -> str:
        """Post the status message to the channel.

        Returns:
            Slack message timestamp used as the handle for updates
        """
        payload = {
            "channel": self._channel_id,
            "text": text,
            "attachments": [line.to_attachment() for line in lines],
        }

        if self.stub:
            handle = f"STUB-{uuid.uuid4().hex[:8].upper()}"
            self._messages[handle] = payload
            logger.info(
                "Slack publish (stub): %s [channel=%s, lines=%d]",
                handle,
                self._channel_id,
                len(lines),
            )
            return handle

        body = await self._call("chat.postMessage", payload)
        handle = body.get("ts")
        if not handle:
            raise NotificationError("chat.postMessage returned no message timestamp")
        self._channels[handle] = body.get("channel") or self._channel_id
        return handle

    async def update(
        self, handle: str, text: str, lines: Sequence[StatusLine]
    ) -> None:
        """Replace the content of a previously published message."""
        payload = {
            "channel": self._channels.get(handle, self._channel_id),
            "ts": handle,
            "text": text,
            "attachments": [line.to_attachment() for line in lines],
        }

        if self.stub:
            self._messages[handle] = payload
            logger.info(
                "Slack update (stub): %s [channel=%s, lines=%d]",
                handle,
                payload["channel"],
                len(lines),
            )
            return

        await self._call("chat.update", payload)

    def get_message(self, handle: str) -> Optional[dict]:
        """Retrieve a stub message by handle (for testing).

        Args:
            handle: Handle returned by publish

        Returns:
            Last payload sent for the message if found, None otherwise
        """
        return self._messages.get(handle)

    async def _call(self, method: str, payload: dict) -> dict:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._post, method, payload)

    def _post(self, method: str, payload: dict) -> dict:
        request = urllib.request.Request(
            f"{self._api_url}/{method}",
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {self._token}",
                "Content-Type": "application/json; charset=utf-8",
            },
            method="POST",
        )
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            raise NotificationError(f"Slack {method} returned HTTP {e.code}") from e
        except (urllib.error.URLError, OSError) as e:
            raise NotificationError(f"Slack {method} request failed: {e}") from e

        try:
            body = json.loads(raw)
        except json.JSONDecodeError as e:
            raise NotificationError(f"Slack {method} returned invalid JSON") from e

        if not body.get("ok"):
            raise NotificationError(
                f"Slack {method} failed: {body.get('error', 'unknown_error')}"
            )
        logger.debug("Slack %s ok", method)
        return body
