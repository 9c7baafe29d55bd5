# local_xy_util/__init__.py
from .geometry import local_xy_from_wgs84, wgs84_from_local_xy
from .local_xy import LocalXyWgs84Util, NotInitializedError, OriginUpdate
from .registry import get_shared_util, register_util

__all__ = [
    "local_xy_from_wgs84",
    "wgs84_from_local_xy",
    "LocalXyWgs84Util",
    "NotInitializedError",
    "OriginUpdate",
    "get_shared_util",
    "register_util",
]
