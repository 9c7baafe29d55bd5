# local_xy_util/registry.py
"""
Process-wide sharing of LocalXyWgs84Util instances, keyed by frame id.

Entries are weak: a utility stays alive as long as anyone holds it and
drops out of the registry once the last holder lets go.
"""

import threading
import weakref

from .config import DEFAULT_FRAME
from .local_xy import LocalXyWgs84Util

_lock = threading.Lock()
_utils = weakref.WeakValueDictionary()


def get_shared_util(frame: str = DEFAULT_FRAME) -> LocalXyWgs84Util:
    """
    Return the shared utility for `frame`, creating a deferred (uninitialized)
    one on first request.
    """
    with _lock:
        util = _utils.get(frame)
        if util is None:
            util = LocalXyWgs84Util(frame=frame)
            _utils[frame] = util
        return util


def register_util(util: LocalXyWgs84Util) -> LocalXyWgs84Util:
    """
    Publish `util` under its frame. If a live utility is already registered
    for that frame it is returned instead and `util` is not stored.
    """
    with _lock:
        existing = _utils.get(util.frame())
        if existing is not None:
            return existing
        _utils[util.frame()] = util
        return util


def clear_registry():
    with _lock:
        _utils.clear()
