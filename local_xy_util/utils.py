# local_xy_util/utils.py
import time


def log(msg: str):
    """
    Tiny logging helper shared by the origin utility and the MAVLink source.
    """
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}")
