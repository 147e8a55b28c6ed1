"""Dashboard web server: the index page and a server-sent event stream of patches."""

from __future__ import annotations

import logging
import mimetypes
import threading
from dataclasses import dataclass
from html import escape
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Callable
from urllib.parse import unquote, urlsplit

from .hub import EventHub

log = logging.getLogger(__name__)

DISABLE_CHARTS = False
PATCH_ELEMENTS = "datastar-patch-elements"
STATIC_DIR = Path("static")


@dataclass(frozen=True)
class Card:
    """A value tile on the dashboard."""

    name: str
    value: Any = 0
    unit: str = ""


@dataclass(frozen=True)
class Chart:
    """A time-series chart on the dashboard."""

    name: str
    description: str


CARDS = (
    Card("Throttle", 0, "%"),
    Card("Grip", 0, "%"),
    Card("TPS", 0, "%"),
    Card("RPM", 0, "RPM"),
    Card("Coolant", 0, "°C"),
)
CHARTS = (Chart("TPS", "Throttle"), Chart("RPM", "Revolutions Per Minute"))
_INDEX_CHARTS = (
    Chart("TPS", "Throttle Position Sensor"),
    Chart("RPM", "Revolutions Per Minute"),
)


def build_update_chart_script(name: str, x: int, y: int) -> str:
    """Client-side call that appends the point (x, y) to the named chart."""
    return f'pushData("{name.lower()}", {x}, {y});'


def _sse(lines: list[str]) -> str:
    return f"event: {PATCH_ELEMENTS}\n" + "".join(f"data: {line}\n" for line in lines) + "\n"


def patch_elements_event(elements: str) -> str:
    """A server-sent event that morphs ``elements`` into the page by id."""
    return _sse([f"elements {line}" for line in elements.splitlines()])


def execute_script_event(script: str) -> str:
    """A server-sent event that runs ``script`` once in the browser."""
    element = f'<script data-effect="el.remove()">{script}</script>'
    return _sse(["selector body", "mode append"] + [f"elements {line}" for line in element.splitlines()])


def render_card_value(card: Card) -> str:
    """The element that shows a card's current value."""
    return (
        f'<span id="{escape(card.name.lower())}-value" class="card-value">'
        f"{escape(str(card.value))}</span>"
    )


def render_index() -> str:
    """The dashboard page."""
    cards = "\n".join(
        f'<div class="card" id="{escape(c.name.lower())}-card">'
        f'<h2 class="card-name">{escape(c.name)}</h2>{render_card_value(c)}'
        f'<span class="card-unit">{escape(c.unit)}</span></div>'
        for c in CARDS
    )
    charts = ""
    if not DISABLE_CHARTS:
        figures = "\n".join(
            f'<figure class="chart" id="{escape(c.name.lower())}-chart-figure">'
            f'<canvas id="{escape(c.name.lower())}-chart"></canvas>'
            f"<figcaption>{escape(c.description)}</figcaption></figure>"
            for c in _INDEX_CHARTS
        )
        charts = f'<section class="charts">\n{figures}\n</section>'
    return (
        '<!DOCTYPE html>\n<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        "<title>Huskki</title>\n"
        '<script type="module" src="/static/datastar.js"></script>\n</head>\n'
        "<body data-init=\"@get('/events')\">\n"
        f'<section class="cards">\n{cards}\n</section>\n{charts}\n</body>\n</html>\n'
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def generate_patch(
    event: dict[str, Any], render_card: Callable[[Card], str] = render_card_value
) -> list[str]:
    """Server-sent events that bring the page up to date with ``event``."""
    elements = "".join(
        render_card(Card(card.name, str(event[card.name.lower()])))
        for card in CARDS
        if card.name.lower() in event
    )
    patches = [patch_elements_event(elements)] if elements else []
    if not DISABLE_CHARTS:
        timestamp = event.get("timestamp")
        for chart in CHARTS:
            value = event.get(chart.name.lower())
            if _is_int(value) and _is_int(timestamp):
                patches.append(
                    execute_script_event(build_update_chart_script(chart.name, timestamp, value))
                )
    return patches


class _DashboardServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], hub: EventHub, static_dir: Path) -> None:
        self.hub = hub
        self.static_dir = static_dir
        self.stopped = threading.Event()
        super().__init__(address, DashboardHandler)

    def server_close(self) -> None:
        self.stopped.set()
        super().server_close()


class DashboardHandler(BaseHTTPRequestHandler):
    """Serves the page, its static files and the live event stream."""

    server: _DashboardServer

    def do_GET(self) -> None:
        path = unquote(urlsplit(self.path).path)
        if path == "/events":
            self._serve_events()
        elif path.startswith("/static/"):
            self._serve_static(path[len("/static/"):])
        else:
            self._send_body(render_index().encode("utf-8"), "text/html; charset=utf-8")

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        log.debug("%s - %s", self.address_string(), format % args)

    def _send_body(self, body: bytes, content_type: str) -> None:
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _serve_static(self, relative: str) -> None:
        root = Path(self.server.static_dir).resolve()
        target = (root / relative).resolve()
        if not target.is_relative_to(root) or not target.is_file():
            self.send_error(HTTPStatus.NOT_FOUND)
            return
        content_type = mimetypes.guess_type(target.name)[0] or "application/octet-stream"
        self._send_body(target.read_bytes(), content_type)

    def _serve_events(self) -> None:
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", "text/event-stream")
        self.send_header("Cache-Control", "no-cache")
        self.end_headers()
        self.wfile.flush()
        with self.server.hub.subscribe() as subscription:
            while not self.server.stopped.is_set():
                try:
                    event = subscription.get(timeout=0.5)
                except TimeoutError:
                    continue
                if event is None:
                    return
                try:
                    self.wfile.write("".join(generate_patch(event)).encode("utf-8"))
                    self.wfile.flush()
                except OSError:
                    return


def create_server(address: str, hub: EventHub) -> _DashboardServer:
    """Bind the dashboard to ``address`` (``host:port``, host may be empty)."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address {address!r}")
    return _DashboardServer((host.strip("[]"), int(port)), hub, STATIC_DIR)