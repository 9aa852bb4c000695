"""Integration test: HTTP events through the wired container to the Slack stub."""

import asyncio
import urllib.request

import pytest
import pytest_asyncio

from deploy_notifier.composition_root import create_container
from deploy_notifier.infrastructure.config import (
    BroadcastConfig,
    NotifierConfig,
    SlackConfig,
    WebConfig,
)


def _get_sync(url: str) -> str:
    with urllib.request.urlopen(url, timeout=10) as resp:
        return resp.read().decode()


@pytest_asyncio.fixture()
async def running():
    config = NotifierConfig(
        slack=SlackConfig(channel_id="C123", header="Deploying prod"),
        web=WebConfig(host="127.0.0.1", port=0),
        broadcast=BroadcastConfig(interval_seconds=60),
    )
    container = create_container(config)
    await container.web_app.start(config.web.host, config.web.port)
    container.periodic_broadcast.start()
    base = f"http://127.0.0.1:{container.web_app.port}"
    yield container, base
    container.periodic_broadcast.stop()
    container.web_app.stop()


class TestNotifyFlow:
    @pytest.mark.asyncio
    async def test_full_deployment(self, running):
        container, base = running
        for path in (
            "/building/api",
            "/building/web",
            "/succeeded/api",
            "/failed/web",
            "/done",
        ):
            assert await asyncio.to_thread(_get_sync, base + path) == "ok"

        handle = container.deployment.message_handle
        assert handle is not None
        message = container.slack_adapter.get_message(handle)
        assert message["text"] == "Deploying prod"
        assert message["ts"] == handle

        attachments = message["attachments"]
        assert [a["id"] for a in attachments] == [0, 1, 2]
        assert attachments[0]["text"].startswith("Api succeeded (took ")
        assert attachments[1]["text"].startswith("Web FAILED building")
        assert attachments[2]["text"].startswith("Failed (took ")
        assert attachments[2]["color"] == "#ff4500"

        await asyncio.wait_for(container.periodic_broadcast.wait(), timeout=1)
        assert container.periodic_broadcast.running is False

    @pytest.mark.asyncio
    async def test_noop_only_deployment_succeeds(self, running):
        container, base = running
        await asyncio.to_thread(_get_sync, base + "/noop/docs")
        await asyncio.to_thread(_get_sync, base + "/done")

        message = container.slack_adapter.get_message(container.deployment.message_handle)
        assert message["attachments"][0]["text"] == "Docs is not deploying (no changes)"
        assert message["attachments"][-1]["text"].startswith("Succeeded")
        assert message["attachments"][-1]["color"] == "#0b0"

    @pytest.mark.asyncio
    async def test_done_before_any_project_publishes_nothing(self, running):
        container, base = running
        await asyncio.to_thread(_get_sync, base + "/done")

        assert container.deployment.done is True
        assert container.deployment.message_handle is None
