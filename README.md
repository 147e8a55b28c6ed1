# huskki

A small live dashboard for engine sensor data. Frames arrive from a
microcontroller on a serial port, or from a recorded log, and are decoded into
readings: RPM, throttle, grip, throttle-plate position (TPS) and coolant
temperature. The readings are pushed to a browser page as server-sent events.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Usage

Read live data from the first USB serial port whose vendor id belongs to an
Arduino or a common clone chip (2341, 2A03, 1A86, 10C4, 0403), and serve the
dashboard on port 8080:

```
huskki
```

Options (each may also be given with a single dash, e.g. `-port`):

| Option | Default | Meaning |
| --- | --- | --- |
| `--port` | `auto` | serial device path, or `auto` to pick one by USB vendor id |
| `--baud` | `115200` | baud rate |
| `--addr` | `:8080` | HTTP listen address, `host:port` (host may be empty) |
| `--replay` | (none) | path of a `.bin` log to replay instead of reading serial |
| `--replay-speed` | `1.0` | replay speed multiplier; `0` or less plays as fast as possible |
| `--replay-loop` | off | start the replay again at end of file |
| `--replay-skip-frames` | `0` | number of frames to skip from the start |

While reading live data every valid frame is appended to a raw log in
`logs/` (created if missing), named `RAWLOG.bin`, or `RAWLOG_1.bin`,
`RAWLOG_2.bin` and so on if earlier ones exist, so the session can be replayed
later:

```
huskki --replay logs/RAWLOG.bin --replay-speed 2
```

Invalid frames on the serial line are logged and skipped. During a replay an
invalid frame (bad length, bad checksum, truncated) stops the replay, shuts the
server down and the command exits with status 1. The command also exits with
status 1 if the serial port, the raw log or the listen address cannot be
opened.

## The web server

- `/` serves the dashboard page: a card for each reading and, unless charts
  are disabled, a canvas for the TPS and RPM charts.
- `/events` is a `text/event-stream`. Each new reading produces a
  `datastar-patch-elements` event that replaces the matching
  `<span id="<name>-value">` element, and, for TPS and RPM, an event that
  appends a script calling `pushData("<name>", timestamp, value);`.
- `/static/<file>` serves files from a `static/` directory in the current
  working directory.

## Frame format

```
[AA 55][millis:u32 LE][DID:u16 BE][len:u8][data:len][crc8:u8]
```

The checksum is CRC-8 (polynomial 0x07, initial value 0x00) over everything
between the magic bytes and the checksum itself. Payloads longer than 64
bytes are rejected. Bytes before a magic marker are skipped.

Known identifiers and how they are decoded:

| DID | Key | Value |
| --- | --- | --- |
| `0x0100` | `rpm` | big-endian u16 / 4 |
| `0x0001` | `throttle` | last byte as a percentage of 255 |
| `0x0070` | `grip` | last byte as a percentage of 255 |
| `0x0076` | `tps` | big-endian u16, capped at 1023, as a percentage of 1023 |
| `0x0009` | `coolant` | big-endian u16 (or a single byte) minus 40, in °C |

## Library use

```python
from huskki.hub import EventHub
from huskki.parsing import parse_sensor_data

hub = EventHub()
with hub.subscribe() as subscription:
    hub.broadcast(parse_sensor_data(0x0100, b"\x0b\xb8", 0))
    print(subscription.get(timeout=1))   # {'rpm': 750, 'timestamp': 0}
```

- `huskki.hub`: `EventHub` keeps the merged latest state (`last`) and hands a
  copy of each broadcast to every `Subscription` whose queue (16 events by
  default) has room; a new subscription starts with the latest state.
  `Subscription.get` raises `TimeoutError` on timeout and returns `None` once
  cancelled and drained.
- `huskki.frames`: `Frame` (with `encode()`), `read_frame`, `crc8`,
  `crc8_update`, and the errors `FrameError`, `BadLengthError`,
  `BadChecksumError`. `read_frame` raises `EOFError` at a clean end of stream.
- `huskki.parsing`: `parse_sensor_data` and `broadcast_parsed_sensor_data`.
- `huskki.arduino`: `auto_select_port`, `open_port` and `read_binary`.
- `huskki.replay`: `ReplayOptions` and `Replayer`, which plays a log into a
  hub with the original pacing.
- `huskki.web`: `generate_patch`, `render_index`, `create_server` and the
  event helpers.

## What is not included

The dashboard page loads `/static/datastar.js`, and the chart patches call a
client-side `pushData` function. No client-side script ships with the package:
place one in a `static/` directory in the working directory, or the page will
show its initial values without updating and the charts stay empty.