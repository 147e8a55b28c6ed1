import pytest

from huskki.hub import EventHub
from huskki.parsing import (
    COOLANT_DID,
    COOLANT_OFFSET,
    GRIP_DID,
    RPM_DID,
    THROTTLE_DID,
    TPS_DID,
    broadcast_parsed_sensor_data,
    parse_sensor_data,
)


@pytest.mark.parametrize("rpm", [0, 1, 1500, 16383])
def test_rpm_is_quarter_of_u16be(rpm):
    raw = rpm * 4
    data = bytes([raw >> 8, raw & 0xFF])
    assert parse_sensor_data(RPM_DID, data, 10) == {"rpm": rpm, "timestamp": 10}


def test_rpm_needs_two_bytes():
    assert parse_sensor_data(RPM_DID, b"\x01", 0) is None


@pytest.mark.parametrize("did,key", [(THROTTLE_DID, "throttle"), (GRIP_DID, "grip")])
def test_byte_percent_bounds(did, key):
    assert parse_sensor_data(did, b"\x00", 1) == {key: 0, "timestamp": 1}
    assert parse_sensor_data(did, b"\xff", 1) == {key: 100, "timestamp": 1}


@pytest.mark.parametrize("did,key", [(THROTTLE_DID, "throttle"), (GRIP_DID, "grip")])
def test_byte_percent_uses_last_byte(did, key):
    assert parse_sensor_data(did, b"\x00\x00\xff", 2)[key] == 100


@pytest.mark.parametrize("did", [THROTTLE_DID, GRIP_DID])
def test_byte_percent_monotonic(did):
    values = [parse_sensor_data(did, bytes([b]), 0) for b in range(256)]
    pcts = [v[next(k for k in v if k != "timestamp")] for v in values]
    assert pcts == sorted(pcts)
    assert all(0 <= p <= 100 for p in pcts)


def test_byte_percent_empty_ignored():
    assert parse_sensor_data(THROTTLE_DID, b"", 0) is None
    assert parse_sensor_data(GRIP_DID, b"", 0) is None


def test_tps_full_scale_and_clamp():
    assert parse_sensor_data(TPS_DID, bytes([1023 >> 8, 1023 & 0xFF]), 3) == {
        "tps": 100,
        "timestamp": 3,
    }
    assert parse_sensor_data(TPS_DID, b"\xff\xff", 3)["tps"] == 100
    assert parse_sensor_data(TPS_DID, b"\x00\x00", 3)["tps"] == 0


def test_tps_needs_two_bytes():
    assert parse_sensor_data(TPS_DID, b"\x03", 0) is None


def test_coolant_single_and_double_byte():
    assert parse_sensor_data(COOLANT_DID, b"\x00", 5) == {
        "coolant": COOLANT_OFFSET,
        "timestamp": 5,
    }
    assert parse_sensor_data(COOLANT_DID, b"\x00\x00", 5)["coolant"] == -40


def test_coolant_one_and_two_bytes_agree():
    one = parse_sensor_data(COOLANT_DID, b"\x64", 0)
    two = parse_sensor_data(COOLANT_DID, b"\x00\x64", 0)
    assert one == two


def test_coolant_empty_ignored():
    assert parse_sensor_data(COOLANT_DID, b"", 0) is None


def test_unknown_did_ignored():
    assert parse_sensor_data(0x1234, b"\x01\x02", 0) is None


def test_did_truncated_to_16_bits():
    data = b"\x00\x04"
    assert parse_sensor_data(RPM_DID | 0x10000, data, 0) == parse_sensor_data(
        RPM_DID, data, 0
    )


def test_broadcast_sends_known_event():
    hub = EventHub()
    sub = hub.subscribe()
    broadcast_parsed_sensor_data(hub, THROTTLE_DID, b"\xff", 99)
    assert sub.get(timeout=1) == {"throttle": 100, "timestamp": 99}


def test_broadcast_skips_unknown():
    hub = EventHub()
    sub = hub.subscribe()
    broadcast_parsed_sensor_data(hub, 0x4242, b"\x01", 0)
    assert hub.last == {}
    with pytest.raises(TimeoutError):
        sub.get(timeout=0.01)