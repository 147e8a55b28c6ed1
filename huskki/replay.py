"""Replays a recorded frame log into an event hub."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from os import PathLike
from typing import Callable

from .frames import read_frame
from .hub import EventHub
from .parsing import broadcast_parsed_sensor_data

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplayOptions:
    """Where to replay from and how."""

    path: str | PathLike[str]
    speed: float = 1.0
    loop: bool = False
    skip_frames: int = 0


class Replayer:
    """Feeds frames from a log file to a hub, keeping their original pacing."""

    def __init__(
        self,
        options: ReplayOptions,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.options = options
        self._sleep = sleep
        self._clock = clock

    def run(self, hub: EventHub) -> None:
        """Play the log once, or forever when looping is enabled."""
        self.play_once(hub)
        while self.options.loop:
            self.play_once(hub)

    def play_once(self, hub: EventHub) -> None:
        """Play the log from start to end; raises OSError or FrameError on failure."""
        speed = self.options.speed
        previous_ms: int | None = None
        with open(self.options.path, "rb", buffering=1 << 20) as stream:
            index = 0
            while True:
                try:
                    frame = read_frame(stream)
                except EOFError:
                    break
                index += 1
                if index <= self.options.skip_frames:
                    continue
                if previous_ms is None:
                    previous_ms = frame.millis
                if speed > 0:
                    delta = frame.millis - previous_ms
                    if delta > 0:
                        self._sleep(delta / 1000.0 / speed)
                    previous_ms = frame.millis
                broadcast_parsed_sensor_data(
                    hub, frame.did, frame.data, int(self._clock() * 1000)
                )
        log.info("end of replay")