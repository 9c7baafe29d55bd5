#!/usr/bin/env python3
import time

from local_xy_util.config import MAVLINK_CONNECTION
from local_xy_util.mavlink_client import MavlinkOriginClient
from local_xy_util.registry import get_shared_util

LOOP_HZ = 2.0


def main():
    util = get_shared_util()
    client = MavlinkOriginClient(util, MAVLINK_CONNECTION)
    client.start()

    # The origin thread owns the link until it has finished.
    while not util.initialized():
        print("[DEMO] Origin not known yet")
        time.sleep(1.0 / LOOP_HZ)
    client.stop(timeout=2.0)

    print(f"[DEMO] Origin lat={util.reference_latitude():.7f} "
          f"lon={util.reference_longitude():.7f} frame={util.frame()}")
    print("[DEMO] Streaming drone fixes as LocalXY. Ctrl-C to quit.")
    try:
        while True:
            msg = client.master.recv_match(type="GLOBAL_POSITION_INT",
                                           blocking=True, timeout=1.0)
            if msg is None:
                continue

            lat, lon = msg.lat * 1e-7, msg.lon * 1e-7
            x, y, _ = util.to_local_xy(lat, lon)
            lat2, lon2, _ = util.to_wgs84(x, y)
            print(f"[DEMO] lat={lat:.7f} lon={lon:.7f} -> x={x:8.2f} m y={y:8.2f} m "
                  f"-> lat={lat2:.7f} lon={lon2:.7f}")
    except KeyboardInterrupt:
        print("\n[DEMO] Exiting on user interrupt.")


if __name__ == "__main__":
    main()
