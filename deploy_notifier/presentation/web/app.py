"""
Deploy Notifier HTTP Listener

Architectural Intent:
- Lightweight web server built entirely on Python stdlib (http.server + asyncio).
- Thin transport adapter: each route maps to one stage event on the
  ReportStageEvent use case and always answers "ok".
- No domain logic of its own.

API Surface:
    GET /building/{project}   -> project started building
    GET /deploying/{project}  -> project started deploying
    GET /failed/{project}     -> project failed
    GET /succeeded/{project}  -> project succeeded
    GET /noop/{project}       -> project has nothing to deploy
    GET /done                 -> whole deployment finished
    GET /healthz              -> liveness probe, touches no state

Threading Model:
    ThreadingHTTPServer handles each request on its own thread and runs in a
    background daemon thread. Handlers submit the use case coroutine to the
    main asyncio event loop, which owns all broadcasts, and wait for it with
    a timeout. The acknowledgement never depends on the broadcast outcome.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import re
import threading
from http import HTTPStatus
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler
from typing import Any, Optional
from urllib.parse import unquote, urlsplit

from deploy_notifier.application.use_cases.report_stage_event import ReportStageEvent
from deploy_notifier.domain.value_objects.stage_event import StageEvent

logger = logging.getLogger(__name__)

_PROJECT_PATH_RE = re.compile(r"^/(building|deploying|failed|succeeded|noop)/([^/]*)$")


# ---------------------------------------------------------------------------
# Request handler
# ---------------------------------------------------------------------------

class NotifierRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler for pipeline stage events.

    Attributes on the *server* instance (set by NotifierWebApp):
        report:           ReportStageEvent -- event use case
        loop:             asyncio event loop running the broadcasts
        request_timeout:  seconds to wait for the broadcast before answering
    """

    # Silence per-request log lines from BaseHTTPRequestHandler
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.debug("web: %s", format % args)

    # ---- routing -----------------------------------------------------------

    def do_GET(self) -> None:  # noqa: N802
        """Route GET requests."""
        # Routes match the decoded path, so an encoded "/" splits segments
        path = unquote(urlsplit(self.path).path)
        if path == "/done":
            self._handle_event(StageEvent.DONE)
        elif path == "/healthz":
            self._send_text("ok")
        else:
            match = _PROJECT_PATH_RE.match(path)
            if match:
                event = StageEvent.parse(match.group(1))
                self._handle_event(event, match.group(2))
            else:
                self._send_text("not found", HTTPStatus.NOT_FOUND)

    # ---- endpoint implementations ------------------------------------------

    def _handle_event(self, event: StageEvent, project: str = "") -> None:
        report: ReportStageEvent = self.server.report  # type: ignore[attr-defined]
        loop: asyncio.AbstractEventLoop = self.server.loop  # type: ignore[attr-defined]
        timeout: float = self.server.request_timeout  # type: ignore[attr-defined]

        future = asyncio.run_coroutine_threadsafe(
            report.execute(event, project), loop
        )
        context = {"event": event.value, "project": project}
        try:
            future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            logger.warning(
                "Broadcast for %s %r still running after %ss",
                event.value, project, timeout, extra=context,
            )
        except Exception as exc:
            logger.error(
                "Handling %s %r failed: %s", event.value, project, exc, extra=context
            )

        self._send_text("ok")

    # ---- helpers -----------------------------------------------------------

    def _send_text(self, text: str, status: HTTPStatus = HTTPStatus.OK) -> None:
        body = text.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


# ---------------------------------------------------------------------------
# Web application wrapper
# ---------------------------------------------------------------------------

class NotifierWebApp:
    """Async-friendly HTTP listener for pipeline stage events.

    Usage::

        app = NotifierWebApp(report=report_stage_event)
        await app.start("0.0.0.0", 8085)
        # ... later ...
        app.stop()
    """

    def __init__(self, report: ReportStageEvent, request_timeout: float = 10) -> None:
        self.report = report
        self.request_timeout = request_timeout
        self._server: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> Optional[int]:
        if self._server is None:
            return None
        return self._server.server_address[1]

    async def start(self, host: str = "0.0.0.0", port: int = 8085) -> None:
        """Start the listener in a background thread.

        The current asyncio event loop is captured so handlers can schedule
        the event use case back onto it.
        """
        self._server = ThreadingHTTPServer((host, port), NotifierRequestHandler)
        self._server.daemon_threads = True
        # Attach application state to the server so handlers can access it.
        self._server.report = self.report  # type: ignore[attr-defined]
        self._server.loop = asyncio.get_running_loop()  # type: ignore[attr-defined]
        self._server.request_timeout = self.request_timeout  # type: ignore[attr-defined]

        self._thread = threading.Thread(
            target=self._server.serve_forever,
            daemon=True,
            name="deploy-notifier-web",
        )
        self._thread.start()
        logger.info("Deploy notifier listening on http://%s:%d", host, self.port)

    def stop(self) -> None:
        """Shut down the listener gracefully."""
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            logger.info("Deploy notifier listener stopped")
        if self._thread is not None:
            self._thread.join(timeout=5)
