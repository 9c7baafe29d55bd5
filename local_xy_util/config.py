# local_xy_util/config.py

# --- Earth model ------------------------------------------------------
# WGS84 equatorial radius, used as a spherical Earth for the flat-earth
# LocalXY projection.
EARTH_RADIUS_M = 6_378_137.0

# --- Frames -----------------------------------------------------------
# Frame id reported by a utility until an origin update names another one.
DEFAULT_FRAME = "far_field"

# --- MAVLink origin source --------------------------------------------
MAVLINK_CONNECTION = "udp:127.0.0.1:14550"

# Checked in this order when decoding; GPS_GLOBAL_ORIGIN is the EKF origin,
# the others are fallbacks that SITL always streams.
ORIGIN_MESSAGE_TYPES = ["GPS_GLOBAL_ORIGIN", "HOME_POSITION", "GLOBAL_POSITION_INT"]

ORIGIN_POLL_TIMEOUT_S = 1.0
ORIGIN_WAIT_TIMEOUT_S = 10.0

# lat == lon == 0 on GLOBAL_POSITION_INT means "no fix yet"
GLOBAL_POSITION_INT_REQUIRE_FIX = True
