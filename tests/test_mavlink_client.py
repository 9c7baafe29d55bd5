import time

import pytest

from local_xy_util.local_xy import LocalXyWgs84Util
from local_xy_util.mavlink_client import MavlinkOriginClient, origin_from_mavlink


class FakeMsg:
    def __init__(self, msg_type, **fields):
        self._type = msg_type
        self.__dict__.update(fields)

    def get_type(self):
        return self._type


class FakeMav:
    def __init__(self, fail=False):
        self.fail = fail
        self.commands = []

    def command_long_send(self, *args):
        if self.fail:
            raise OSError("link down")
        self.commands.append(args)


class FakeMaster:
    target_system = 1
    target_component = 1

    def __init__(self, messages=(), fail=False):
        self.messages = list(messages)
        self.mav = FakeMav(fail)
        self.recv_calls = 0

    def recv_match(self, type=None, blocking=False, timeout=None):
        self.recv_calls += 1
        while self.messages:
            msg = self.messages.pop(0)
            if type is None or msg.get_type() in type:
                return msg
        time.sleep(0.001)
        return None


def gps_origin(lat=35.0, lon=-106.6, alt=1619.5):
    return FakeMsg("GPS_GLOBAL_ORIGIN", latitude=int(lat * 1e7),
                   longitude=int(lon * 1e7), altitude=int(alt * 1000))


def test_decode_gps_global_origin():
    update = origin_from_mavlink(gps_origin(), "map")
    assert update.latitude == pytest.approx(35.0)
    assert update.longitude == pytest.approx(-106.6)
    assert update.altitude == pytest.approx(1619.5)
    assert update.heading == 0.0
    assert update.frame == "map"


def test_decode_home_position_and_global_position_int():
    home = FakeMsg("HOME_POSITION", latitude=296000000, longitude=-984000000, altitude=200000)
    update = origin_from_mavlink(home)
    assert update.latitude == pytest.approx(29.6)
    assert update.longitude == pytest.approx(-98.4)
    assert update.altitude == pytest.approx(200.0)
    assert update.frame == ""

    fix = FakeMsg("GLOBAL_POSITION_INT", lat=-338688000, lon=1512093000, alt=58000)
    update = origin_from_mavlink(fix)
    assert update.latitude == pytest.approx(-33.8688)
    assert update.longitude == pytest.approx(151.2093)
    assert update.altitude == pytest.approx(58.0)


def test_decode_ignores_no_fix_and_other_messages():
    assert origin_from_mavlink(None) is None
    assert origin_from_mavlink(FakeMsg("GLOBAL_POSITION_INT", lat=0, lon=0, alt=0)) is None
    assert origin_from_mavlink(FakeMsg("HEARTBEAT")) is None


def test_client_requests_origin_on_connect():
    master = FakeMaster()
    MavlinkOriginClient(LocalXyWgs84Util(), master=master)
    assert len(master.mav.commands) == 1


def test_failed_origin_request_is_not_fatal():
    util = LocalXyWgs84Util()
    client = MavlinkOriginClient(util, master=FakeMaster([gps_origin()], fail=True))
    assert client.poll(timeout=0.0)


def test_poll_initializes_util_with_first_origin():
    util = LocalXyWgs84Util()
    master = FakeMaster([
        FakeMsg("GLOBAL_POSITION_INT", lat=0, lon=0, alt=0),
        gps_origin(),
        gps_origin(lat=40.0, lon=-105.0),
    ])
    client = MavlinkOriginClient(util, master=master, frame="map")

    assert not client.poll(timeout=0.0)
    assert client.poll(timeout=0.0)
    assert util.reference_latitude() == pytest.approx(35.0)
    assert util.frame() == "map"

    # once initialized the link is no longer read
    calls = master.recv_calls
    assert client.poll(timeout=0.0)
    assert master.recv_calls == calls
    assert util.reference_latitude() == pytest.approx(35.0)


def test_wait_for_origin_times_out_without_raising():
    util = LocalXyWgs84Util()
    client = MavlinkOriginClient(util, master=FakeMaster())
    assert not client.wait_for_origin(timeout=0.05)
    assert not util.initialized()


def test_wait_for_origin_returns_once_received():
    util = LocalXyWgs84Util()
    client = MavlinkOriginClient(util, master=FakeMaster([gps_origin()]))
    assert client.wait_for_origin(timeout=1.0)
    assert util.initialized()


def test_background_thread_acquires_origin():
    util = LocalXyWgs84Util()
    client = MavlinkOriginClient(util, master=FakeMaster([gps_origin()]))
    client.start()
    client._thread.join(timeout=2.0)

    assert not client._thread.is_alive()
    assert util.initialized()
    x, y, ok = util.to_local_xy(35.0, -106.6)
    assert ok
    assert x == pytest.approx(0.0, abs=1e-6)
    assert y == pytest.approx(0.0, abs=1e-6)


def test_background_thread_stops_on_request():
    util = LocalXyWgs84Util()
    client = MavlinkOriginClient(util, master=FakeMaster())
    client.start()
    client.stop(timeout=2.0)
    assert not client._thread.is_alive()
    assert not util.initialized()


def test_stop_without_timeout_waits_for_thread():
    util = LocalXyWgs84Util()
    client = MavlinkOriginClient(util, master=FakeMaster())
    client.stop()

    client.start()
    client.stop()
    assert not client._thread.is_alive()
