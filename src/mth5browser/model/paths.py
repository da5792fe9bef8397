"""
HDF5 path and text helpers shared by the loader, the exporter and the views.
"""
from typing import Any, Iterable


def safe_text(x: Any) -> str:
    """Convert any value to text without ever raising."""
    if x is None:
        return ""

    if isinstance(x, str):
        return x

    if isinstance(x, (bytes, bytearray, memoryview)):
        return bytes(x).decode("utf-8", errors="replace")

    if isinstance(x, (list, tuple)):
        if len(x) == 0:
            return ""
        if len(x) == 1 and isinstance(x[0], (str, bytes)):
            return safe_text(x[0])

    try:
        return str(x)
    except Exception:
        return "<unprintable>"


def tail_name(path: Any) -> str:
    """Return the last component of an HDF5 path ('/' for the root)."""
    path = safe_text(path)

    if not path or path == "/":
        return "/"

    path = path.rstrip("/")
    if not path:
        return "/"

    return path.rsplit("/", 1)[-1]


def join_h5_path(group_path: Any, name: Any) -> str:
    """Join a group path and an object name into a valid HDF5 path."""
    group_path = safe_text(group_path)
    name = safe_text(name)

    if not group_path or group_path == "/":
        return "/" + name

    if group_path.endswith("/"):
        return group_path + name

    return f"{group_path}/{name}"


def join_num(values: Iterable[Any], sep: str = "x") -> str:
    """Join numbers into 'a{sep}b{sep}c'."""
    return sep.join(str(int(v)) if _is_integral(v) else str(v) for v in values)


def _is_integral(v: Any) -> bool:
    try:
        return float(v).is_integer()
    except (TypeError, ValueError, OverflowError):
        return False
