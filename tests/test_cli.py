from pathlib import Path

from huskki.cli import Options, main, next_available_filename, parse_args
from huskki.replay import ReplayOptions


def test_parse_args_defaults():
    options = parse_args([])
    assert options == Options()
    assert options.port == "auto"
    assert options.baud == 115200
    assert options.addr == ":8080"
    assert options.replay_options is None


def test_parse_args_single_dash_flags():
    options = parse_args(
        [
            "-port", "/dev/ttyUSB1",
            "-baud", "9600",
            "-addr", "127.0.0.1:9000",
        ]
    )
    assert (options.port, options.baud, options.addr) == ("/dev/ttyUSB1", 9600, "127.0.0.1:9000")


def test_parse_args_replay_options():
    options = parse_args(
        [
            "--replay", "ride.bin",
            "--replay-speed", "0",
            "--replay-loop",
            "--replay-skip-frames", "25",
        ]
    )
    assert options.replay_options == ReplayOptions(
        path="ride.bin", speed=0.0, loop=True, skip_frames=25
    )


def test_next_available_filename_in_empty_directory(tmp_path):
    assert next_available_filename(tmp_path, "RAWLOG", ".bin") == tmp_path / "RAWLOG.bin"


def test_next_available_filename_counts_up(tmp_path):
    (tmp_path / "RAWLOG.bin").write_bytes(b"")
    assert next_available_filename(tmp_path, "RAWLOG", ".bin") == tmp_path / "RAWLOG_1.bin"
    (tmp_path / "RAWLOG_1.bin").write_bytes(b"")
    assert next_available_filename(str(tmp_path), "RAWLOG", ".bin") == Path(tmp_path) / "RAWLOG_2.bin"


def test_next_available_filename_result_does_not_exist(tmp_path):
    for name in ("RAWLOG.bin", "RAWLOG_1.bin", "RAWLOG_3.bin"):
        (tmp_path / name).write_bytes(b"")
    result = next_available_filename(tmp_path, "RAWLOG", ".bin")
    assert not result.exists()
    assert result.parent == tmp_path


def test_main_fails_when_serial_port_cannot_open(tmp_path):
    assert main(["-port", str(tmp_path / "no-such-device")]) == 1


def test_main_fails_when_replay_file_is_missing(tmp_path):
    argv = ["-replay", str(tmp_path / "missing.bin"), "-addr", "127.0.0.1:0"]
    assert main(argv) == 1


def test_main_fails_on_invalid_listen_address(tmp_path):
    argv = ["-replay", str(tmp_path / "ride.bin"), "-addr", "nonsense"]
    assert main(argv) == 1