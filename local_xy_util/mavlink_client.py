# local_xy_util/mavlink_client.py
import threading
import time
from typing import Optional

from pymavlink import mavutil

from .config import (
    MAVLINK_CONNECTION, ORIGIN_MESSAGE_TYPES, ORIGIN_POLL_TIMEOUT_S,
    ORIGIN_WAIT_TIMEOUT_S, GLOBAL_POSITION_INT_REQUIRE_FIX,
)
from .local_xy import OriginUpdate
from .utils import log


def origin_from_mavlink(msg, frame: str = ""):
    """
    Decode a MAVLink message into an OriginUpdate.

    Supports GPS_GLOBAL_ORIGIN, HOME_POSITION and GLOBAL_POSITION_INT
    (lat/lon in degE7, altitude in mm). Returns None for anything else,
    or for a GLOBAL_POSITION_INT without a fix.
    """
    if msg is None:
        return None

    msg_type = msg.get_type()
    if msg_type in ("GPS_GLOBAL_ORIGIN", "HOME_POSITION"):
        lat_e7, lon_e7, alt_mm = msg.latitude, msg.longitude, msg.altitude
    elif msg_type == "GLOBAL_POSITION_INT":
        lat_e7, lon_e7, alt_mm = msg.lat, msg.lon, msg.alt
        if GLOBAL_POSITION_INT_REQUIRE_FIX and lat_e7 == 0 and lon_e7 == 0:
            return None
    else:
        return None

    return OriginUpdate(
        latitude=lat_e7 * 1e-7,
        longitude=lon_e7 * 1e-7,
        altitude=alt_mm / 1000.0,
        frame=frame,
    )


class MavlinkOriginClient:
    """
    Feeds the first origin seen on a MAVLink link into a LocalXyWgs84Util.
    """

    def __init__(self, util, connection_str=MAVLINK_CONNECTION, master=None, frame=""):
        self.util = util
        self.frame = frame

        if master is None:
            log(f"[MAVLINK] Connecting to {connection_str} ...")
            master = mavutil.mavlink_connection(connection_str)
            master.wait_heartbeat()
            log(f"[MAVLINK] Heartbeat received. System: {master.target_system} "
                f"Component: {master.target_component}")
        self.master = master

        self._stop = threading.Event()
        self._thread = None

        self._request_origin()

    def _request_origin(self):
        try:
            self.master.mav.command_long_send(
                self.master.target_system,
                self.master.target_component,
                mavutil.mavlink.MAV_CMD_REQUEST_MESSAGE,
                0,
                mavutil.mavlink.MAVLINK_MSG_ID_GPS_GLOBAL_ORIGIN,
                0, 0, 0, 0, 0, 0,
            )
        except Exception as e:
            # Not fatal; GLOBAL_POSITION_INT is streamed anyway
            log(f"[MAVLINK] Origin request failed: {e}")

    def poll(self, timeout: float = ORIGIN_POLL_TIMEOUT_S) -> bool:
        """
        Wait up to `timeout` for one origin-carrying message and hand it to
        the utility. Returns True if the utility is initialized afterwards.
        """
        if self.util.initialized():
            return True

        msg = self.master.recv_match(type=ORIGIN_MESSAGE_TYPES,
                                     blocking=True, timeout=timeout)
        update = origin_from_mavlink(msg, self.frame)
        if update is not None:
            self.util.handle_origin(update)
        return self.util.initialized()

    def wait_for_origin(self, timeout: float = ORIGIN_WAIT_TIMEOUT_S) -> bool:
        """Poll until the origin is known or `timeout` seconds have passed."""
        log("[MAVLINK] Waiting for origin ...")
        start = time.time()
        while not self.poll(min(ORIGIN_POLL_TIMEOUT_S, timeout)):
            if time.time() - start > timeout:
                log("[MAVLINK] No origin received before timeout")
                return False
        return True

    # ------------------------------------------------------------------
    # Background acquisition
    # ------------------------------------------------------------------

    def start(self):
        """Acquire the origin on a daemon thread; returns immediately."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="mavlink-origin",
                                        daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self):
        while not self._stop.is_set():
            try:
                if self.poll():
                    return
            except Exception as e:
                log(f"[MAVLINK] Origin poll error: {e}")
                self._stop.wait(ORIGIN_POLL_TIMEOUT_S)
