# local_xy_util/local_xy.py
"""
Reference-origin utility for converting between WGS84 lat/lon and an
ortho-rectified LocalXY frame.

The origin is either given at construction, or arrives later through
handle_origin() (e.g. from MavlinkOriginClient). Until then conversions
report failure instead of producing numbers.
"""

import math
import numbers
import threading
from typing import NamedTuple, Optional

import numpy as np

from .config import DEFAULT_FRAME
from .geometry import (
    meters_per_degree, project_scaled, unproject_scaled, rotate_xy, unrotate_xy,
)
from .utils import log


class NotInitializedError(RuntimeError):
    """Batch conversion requested before the reference origin is known."""


class OriginUpdate(NamedTuple):
    """
    One "origin available" event. Angles in degrees, altitude in meters.
    An empty frame keeps whatever frame the receiving utility already has.
    A heading or altitude of None means "not reported" and is read as 0.
    """
    latitude: float
    longitude: float
    heading: Optional[float] = 0.0
    altitude: Optional[float] = 0.0
    frame: str = ""

    def with_defaults(self) -> "OriginUpdate":
        return self._replace(
            heading=0.0 if self.heading is None else self.heading,
            altitude=0.0 if self.altitude is None else self.altitude,
            frame=self.frame or "",
        )

    def is_valid(self) -> bool:
        values = (self.latitude, self.longitude, self.heading, self.altitude)
        for v in values:
            if isinstance(v, bool) or not isinstance(v, numbers.Real):
                return False
            if not math.isfinite(v):
                return False
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0


class _Origin(NamedTuple):
    # Reference angles in radians (altitude in meters) plus the constants
    # derived from them, including the reference in degrees for the
    # projection. Published as a single object so readers never see a
    # partial update.
    latitude: float
    longitude: float
    heading: float
    altitude: float
    frame: str
    latitude_deg: float
    longitude_deg: float
    rho_lat: float
    rho_lon: float
    cos_heading: float
    sin_heading: float


def _build_origin(update: OriginUpdate, frame: str) -> _Origin:
    latitude_deg = float(update.latitude)
    longitude_deg = float(update.longitude)
    heading = math.radians(update.heading)
    rho_lat, rho_lon = meters_per_degree(latitude_deg)
    return _Origin(
        latitude=math.radians(latitude_deg),
        longitude=math.radians(longitude_deg),
        heading=heading,
        altitude=float(update.altitude),
        frame=update.frame or frame,
        latitude_deg=latitude_deg,
        longitude_deg=longitude_deg,
        rho_lat=rho_lat,
        rho_lon=rho_lon,
        cos_heading=math.cos(heading),
        sin_heading=math.sin(heading),
    )


class LocalXyWgs84Util:
    """
    Converts between WGS84 lat/lon and LocalXY around one reference origin.

    LocalXyWgs84Util(lat, lon, heading=0, altitude=0) is usable immediately.
    LocalXyWgs84Util() waits for handle_origin(); the first valid origin
    wins and later ones are ignored.

    The reference heading is in degrees, counter-clockwise from east. A
    point's east/north offset is rotated by it:

        x = east * cos(h) - north * sin(h)
        y = east * sin(h) + north * cos(h)

    so with heading 90 a point due north lands on -x and a point due east
    on +y. Heading 0 gives x east and y north.
    """

    def __init__(
        self,
        reference_latitude: Optional[float] = None,
        reference_longitude: Optional[float] = None,
        reference_heading: Optional[float] = 0.0,
        reference_altitude: Optional[float] = 0.0,
        frame: str = DEFAULT_FRAME,
    ):
        self._lock = threading.Lock()
        self._frame = frame
        self._origin: Optional[_Origin] = None

        if reference_latitude is None and reference_longitude is None:
            return
        if reference_latitude is None or reference_longitude is None:
            raise ValueError("Reference latitude and longitude must be given together")

        update = OriginUpdate(
            reference_latitude, reference_longitude,
            reference_heading, reference_altitude, frame,
        ).with_defaults()
        if not update.is_valid():
            raise ValueError(f"Invalid reference origin: {update}")
        self._origin = _build_origin(update, frame)

    # ------------------------------------------------------------------
    # Origin acquisition
    # ------------------------------------------------------------------

    def handle_origin(self, update: OriginUpdate) -> bool:
        """
        Accept an externally delivered origin.

        Returns True only for the call that initialized this utility.
        Malformed updates are rejected and leave it uninitialized. A missing
        (None) heading or altitude defaults to 0.
        """
        if self._origin is not None:
            return False

        update = update.with_defaults()
        if not update.is_valid():
            log(f"[ORIGIN] Rejected invalid origin: {update}")
            return False

        origin = _build_origin(update, self._frame)
        with self._lock:
            if self._origin is not None:
                return False
            self._origin = origin

        log(f"[ORIGIN] Origin set: lat={update.latitude:.7f}, lon={update.longitude:.7f}, "
            f"hdg={update.heading:.1f}, alt={update.altitude:.1f} m, frame={origin.frame}")
        return True

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def initialized(self) -> bool:
        return self._origin is not None

    def reference_latitude(self) -> float:
        origin = self._origin
        return math.degrees(origin.latitude) if origin else 0.0

    def reference_longitude(self) -> float:
        origin = self._origin
        return math.degrees(origin.longitude) if origin else 0.0

    def reference_heading(self) -> float:
        origin = self._origin
        return math.degrees(origin.heading) if origin else 0.0

    def reference_altitude(self) -> float:
        origin = self._origin
        return origin.altitude if origin else 0.0

    def frame(self) -> str:
        origin = self._origin
        return origin.frame if origin else self._frame

    def origin(self) -> Optional[OriginUpdate]:
        """Snapshot of the held origin in degrees, or None."""
        origin = self._origin
        if origin is None:
            return None
        return OriginUpdate(
            math.degrees(origin.latitude),
            math.degrees(origin.longitude),
            math.degrees(origin.heading),
            origin.altitude,
            origin.frame,
        )

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def to_local_xy(self, latitude: float, longitude: float):
        """
        WGS84 (degrees) -> LocalXY (meters).

        Returns:
            (x, y, ok). x and y are NaN when ok is False.
        """
        origin = self._origin
        if origin is None:
            return math.nan, math.nan, False
        x, y = _forward(origin, latitude, longitude)
        return float(x), float(y), True

    def to_wgs84(self, x: float, y: float):
        """
        LocalXY (meters) -> WGS84 (degrees).

        Returns:
            (latitude, longitude, ok). Both NaN when ok is False.
        """
        origin = self._origin
        if origin is None:
            return math.nan, math.nan, False
        latitude, longitude = _inverse(origin, x, y)
        return float(latitude), float(longitude), True

    def points_to_local_xy(self, points) -> np.ndarray:
        """
        Batch form of to_local_xy.

        points: array-like of shape (N, 2) with columns (latitude, longitude).
        Returns an (N, 2) array of (x, y).
        """
        origin = self._require_origin()
        pts = np.asarray(points, dtype=float).reshape(-1, 2)
        x, y = _forward(origin, pts[:, 0], pts[:, 1])
        return np.column_stack((x, y))

    def points_to_wgs84(self, points) -> np.ndarray:
        """
        Batch form of to_wgs84: (N, 2) of (x, y) -> (N, 2) of (lat, lon).
        """
        origin = self._require_origin()
        pts = np.asarray(points, dtype=float).reshape(-1, 2)
        latitude, longitude = _inverse(origin, pts[:, 0], pts[:, 1])
        return np.column_stack((latitude, longitude))

    def _require_origin(self) -> _Origin:
        origin = self._origin
        if origin is None:
            raise NotInitializedError("LocalXY reference origin has not been received")
        return origin


def _forward(origin: _Origin, latitude, longitude):
    d_east, d_north = project_scaled(
        latitude, longitude, origin.latitude_deg, origin.longitude_deg,
        origin.rho_lat, origin.rho_lon,
    )
    return rotate_xy(d_east, d_north, origin.cos_heading, origin.sin_heading)


def _inverse(origin: _Origin, x, y):
    d_east, d_north = unrotate_xy(x, y, origin.cos_heading, origin.sin_heading)
    return unproject_scaled(
        d_east, d_north, origin.latitude_deg, origin.longitude_deg,
        origin.rho_lat, origin.rho_lon,
    )
