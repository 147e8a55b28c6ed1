"""Command line entry point: read live or replayed frames and serve the dashboard."""

from __future__ import annotations

import argparse
import contextlib
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import serial

from .arduino import DEFAULT_BAUD_RATE, open_port, read_binary
from .frames import FrameError
from .hub import EventHub
from .replay import ReplayOptions, Replayer
from .web import create_server

log = logging.getLogger(__name__)

LOG_DIR = "logs"
LOG_NAME = "RAWLOG"
LOG_EXT = ".bin"


@dataclass(frozen=True)
class Options:
    """Settings from the command line."""

    port: str = "auto"
    baud: int = DEFAULT_BAUD_RATE
    addr: str = ":8080"
    replay: str = ""
    replay_speed: float = 1.0
    replay_loop: bool = False
    replay_skip_frames: int = 0

    @property
    def replay_options(self) -> ReplayOptions | None:
        """How to replay, or None when reading from the serial port."""
        if not self.replay:
            return None
        return ReplayOptions(self.replay, self.replay_speed, self.replay_loop, self.replay_skip_frames)


def parse_args(argv: Sequence[str] | None = None) -> Options:
    """Parse command line arguments into :class:`Options`."""
    parser = argparse.ArgumentParser(prog="huskki", description="Live engine data dashboard.")

    def flag(name: str, **kwargs: object) -> None:
        parser.add_argument(f"-{name}", f"--{name}", **kwargs)

    flag("port", default="auto", help="serial device path or 'auto'")
    flag("baud", type=int, default=DEFAULT_BAUD_RATE, help="baud rate")
    flag("addr", default=":8080", help="http listen address")
    flag("replay", default="", help="path to .bin to replay")
    flag("replay-speed", type=float, default=1.0, help="replay speed multiplier (0 = as fast as possible)")
    flag("replay-loop", action="store_true", help="loop replay at end of file")
    flag("replay-skip-frames", type=int, default=0, help="skip this many frames from the start")
    return Options(**vars(parser.parse_args(argv)))


def next_available_filename(directory: str | Path, name: str, ext: str) -> Path:
    """The first of ``name+ext``, ``name_1+ext``, ``name_2+ext``... that does not exist."""
    path = Path(directory) / f"{name}{ext}"
    index = 1
    while path.exists():
        path = Path(directory) / f"{name}_{index}{ext}"
        index += 1
    return path


def main(argv: Sequence[str] | None = None) -> int:
    """Run the dashboard; returns the process exit status."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    options = parse_args(argv)
    hub = EventHub()
    replay = options.replay_options
    failures: list[BaseException] = []

    with contextlib.ExitStack() as stack:
        if replay is None:
            try:
                port = stack.enter_context(contextlib.closing(open_port(options.port, options.baud)))
            except (LookupError, serial.SerialException) as exc:
                log.error("couldn't open serial %s: %s", options.port, exc)
                return 1
            log_path = next_available_filename(LOG_DIR, LOG_NAME, LOG_EXT)
            try:
                log_path.parent.mkdir(parents=True, exist_ok=True)
                raw = stack.enter_context(open(log_path, "ab", buffering=1 << 20))
            except OSError as exc:
                log.error("couldn't open rawlog: %s", exc)
                return 1

        try:
            server = create_server(options.addr, hub)
        except (OSError, ValueError) as exc:
            log.error("couldn't listen on %s: %s", options.addr, exc)
            return 1
        stack.callback(server.server_close)

        def source() -> None:
            if replay is None:
                read_binary(port, hub, raw)
                return
            try:
                Replayer(replay).run(hub)
            except (OSError, FrameError) as exc:
                log.error("couldn't run replay: %s", exc)
                failures.append(exc)
                server.shutdown()

        threading.Thread(target=source, name="huskki-source", daemon=True).start()
        log.info("listening on %s …", options.addr)
        with contextlib.suppress(KeyboardInterrupt):
            server.serve_forever()

    return 1 if failures else 0