# local_xy_util/geometry.py
import math

import numpy as np

from .config import EARTH_RADIUS_M


def wrap_longitude_deg(longitude):
    """
    Wrap a longitude (or longitude difference) in degrees into [-180, 180).
    Works elementwise on numpy arrays.
    """
    return (longitude + 180.0) % 360.0 - 180.0


def normalize_longitude_deg(longitude):
    """
    Leave longitudes already in [-180, 180] untouched and wrap the rest.
    Both 180 and -180 survive as given.
    """
    if np.ndim(longitude) == 0:
        if -180.0 <= longitude <= 180.0:
            return longitude
        return wrap_longitude_deg(longitude)
    longitude = np.asarray(longitude, dtype=float)
    return np.where(np.abs(longitude) <= 180.0, longitude, wrap_longitude_deg(longitude))


def meters_per_radian(reference_latitude_rad: float):
    """
    Scale factors of the spherical flat-earth model at a reference latitude
    given in radians.

    Returns:
        (rho_lat, rho_lon): meters per radian of latitude, and meters per
        radian of longitude at that latitude.
    """
    rho_lat = EARTH_RADIUS_M
    rho_lon = EARTH_RADIUS_M * math.cos(reference_latitude_rad)
    return rho_lat, rho_lon


def meters_per_degree(reference_latitude: float):
    """
    Same scale factors as meters_per_radian, per degree, for a reference
    latitude in degrees.
    """
    rho_lat, rho_lon = meters_per_radian(math.radians(reference_latitude))
    to_deg = math.pi / 180.0
    return rho_lat * to_deg, rho_lon * to_deg


def rotate_xy(x, y, cos_heading: float, sin_heading: float):
    """
    Rotate an east/north offset counter-clockwise by the reference heading.
    """
    return x * cos_heading - y * sin_heading, x * sin_heading + y * cos_heading


def unrotate_xy(x, y, cos_heading: float, sin_heading: float):
    """
    Inverse of rotate_xy: back to east/north.
    """
    return x * cos_heading + y * sin_heading, y * cos_heading - x * sin_heading


def project_scaled(latitude, longitude, reference_latitude, reference_longitude,
                   rho_lat, rho_lon):
    """
    Degrees -> east/north meters with precomputed per-degree scale factors.
    """
    y = (latitude - reference_latitude) * rho_lat
    x = normalize_longitude_deg(longitude - reference_longitude) * rho_lon
    return x, y


def unproject_scaled(x, y, reference_latitude, reference_longitude, rho_lat, rho_lon):
    """
    Inverse of project_scaled.
    """
    latitude = reference_latitude + y / rho_lat
    longitude = normalize_longitude_deg(reference_longitude + x / rho_lon)
    return latitude, longitude


def local_xy_from_wgs84(latitude, longitude, reference_latitude, reference_longitude):
    """
    Transform WGS84 lat/lon (degrees) into an ortho-rectified LocalXY frame
    centered on the reference point.

    x is meters east and y is meters north of the reference. No heading
    rotation is applied. Scalars or numpy arrays are accepted for the point;
    the reference must be a scalar.
    """
    rho_lat, rho_lon = meters_per_degree(reference_latitude)
    return project_scaled(latitude, longitude, reference_latitude, reference_longitude,
                          rho_lat, rho_lon)


def wgs84_from_local_xy(x, y, reference_latitude, reference_longitude):
    """
    Inverse of local_xy_from_wgs84. Assumes the LocalXY data was generated
    against the WGS84 datum with the same reference point.
    """
    rho_lat, rho_lon = meters_per_degree(reference_latitude)
    return unproject_scaled(x, y, reference_latitude, reference_longitude,
                            rho_lat, rho_lon)
