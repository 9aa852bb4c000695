"""Tests for the Slack notification adapter."""

import io
import json
import urllib.error

import pytest
from unittest.mock import MagicMock, patch

from deploy_notifier.domain.ports.notification_port import (
    NotificationError,
    NotificationPort,
)
from deploy_notifier.domain.value_objects.status_report import StatusLine
from deploy_notifier.infrastructure.adapters.slack_adapter import SlackAdapter

LINES = (
    StatusLine(color="#0b0", text="Api succeeded (took 00:42)", id=0),
    StatusLine(color="#ff4500", text="Web FAILED", id=1),
)


def _response(body: dict) -> MagicMock:
    resp = MagicMock()
    resp.read.return_value = json.dumps(body).encode()
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp


def _sent(mock_urlopen: MagicMock) -> tuple[str, dict, dict]:
    request = mock_urlopen.call_args.args[0]
    return request.full_url, json.loads(request.data), dict(request.header_items())


class TestSlackAdapterProtocol:
    def test_implements_notification_port(self):
        assert isinstance(SlackAdapter(), NotificationPort)


class TestSlackAdapterStub:
    @pytest.mark.asyncio
    async def test_stub_publish_returns_handle(self):
        adapter = SlackAdapter(channel_id="C123")
        assert adapter.stub is True

        handle = await adapter.publish("Deploying", LINES)

        assert handle.startswith("STUB-")
        message = adapter.get_message(handle)
        assert message["channel"] == "C123"
        assert message["attachments"][1] == {
            "color": "#ff4500",
            "text": "Web FAILED",
            "id": 1,
        }

    @pytest.mark.asyncio
    async def test_stub_update_replaces_payload(self):
        adapter = SlackAdapter(channel_id="C123")
        handle = await adapter.publish("Deploying", LINES[:1])

        await adapter.update(handle, "Deploying", LINES)

        message = adapter.get_message(handle)
        assert message["ts"] == handle
        assert len(message["attachments"]) == 2

    def test_get_unknown_message(self):
        assert SlackAdapter().get_message("nope") is None


class TestSlackAdapterWebApi:
    @pytest.mark.asyncio
    async def test_publish_posts_message(self):
        adapter = SlackAdapter(token="xoxb-test", channel_id="C123")
        with patch(
            "urllib.request.urlopen",
            return_value=_response({"ok": True, "ts": "111.222", "channel": "C123"}),
        ) as mock_urlopen:
            handle = await adapter.publish("Deploying prod", LINES)

        assert handle == "111.222"
        url, body, headers = _sent(mock_urlopen)
        assert url == "https://slack.com/api/chat.postMessage"
        assert body["channel"] == "C123"
        assert body["text"] == "Deploying prod"
        assert [a["id"] for a in body["attachments"]] == [0, 1]
        assert headers["Authorization"] == "Bearer xoxb-test"

    @pytest.mark.asyncio
    async def test_update_uses_handle_and_returned_channel(self):
        adapter = SlackAdapter(token="xoxb-test", channel_id="#deploys")
        with patch(
            "urllib.request.urlopen",
            return_value=_response({"ok": True, "ts": "111.222", "channel": "C999"}),
        ):
            handle = await adapter.publish("Deploying", LINES)

        with patch(
            "urllib.request.urlopen", return_value=_response({"ok": True})
        ) as mock_urlopen:
            await adapter.update(handle, "Deploying", LINES)

        url, body, _ = _sent(mock_urlopen)
        assert url == "https://slack.com/api/chat.update"
        assert body["ts"] == "111.222"
        assert body["channel"] == "C999"

    @pytest.mark.asyncio
    async def test_custom_api_url(self):
        adapter = SlackAdapter(
            token="xoxb-test", channel_id="C1", api_url="http://localhost:9999/api/"
        )
        with patch(
            "urllib.request.urlopen", return_value=_response({"ok": True, "ts": "1.2"})
        ) as mock_urlopen:
            await adapter.publish("x", LINES)

        url, _, _ = _sent(mock_urlopen)
        assert url == "http://localhost:9999/api/chat.postMessage"

    @pytest.mark.asyncio
    async def test_api_error_raises(self):
        adapter = SlackAdapter(token="xoxb-bad", channel_id="C123")
        with patch(
            "urllib.request.urlopen",
            return_value=_response({"ok": False, "error": "invalid_auth"}),
        ):
            with pytest.raises(NotificationError, match="invalid_auth"):
                await adapter.publish("Deploying", LINES)

    @pytest.mark.asyncio
    async def test_missing_ts_raises(self):
        adapter = SlackAdapter(token="xoxb-test", channel_id="C123")
        with patch("urllib.request.urlopen", return_value=_response({"ok": True})):
            with pytest.raises(NotificationError, match="no message timestamp"):
                await adapter.publish("Deploying", LINES)

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        adapter = SlackAdapter(token="xoxb-test", channel_id="C123")
        error = urllib.error.HTTPError(
            "https://slack.com/api/chat.update", 429, "Too Many Requests", {}, io.BytesIO()
        )
        with patch("urllib.request.urlopen", side_effect=error):
            with pytest.raises(NotificationError, match="HTTP 429"):
                await adapter.update("111.222", "Deploying", LINES)

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        adapter = SlackAdapter(token="xoxb-test", channel_id="C123")
        with patch(
            "urllib.request.urlopen",
            side_effect=urllib.error.URLError("connection refused"),
        ):
            with pytest.raises(NotificationError, match="request failed"):
                await adapter.publish("Deploying", LINES)

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        adapter = SlackAdapter(token="xoxb-test", channel_id="C123")
        resp = _response({})
        resp.read.return_value = b"<html>"
        with patch("urllib.request.urlopen", return_value=resp):
            with pytest.raises(NotificationError, match="invalid JSON"):
                await adapter.publish("Deploying", LINES)
