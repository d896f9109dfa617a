"""
offset.py

Shared coordinate origin for a pipeline run.

Projected coordinates (metres, six or seven digits) lose their decimals when
stored as float32. Every loader therefore subtracts one shared origin before
narrowing to float32 and every writer adds it back in float64. The origin is
taken from the X/Y of the first coordinate any loader sees; its z is always 0
so elevations are kept as they are.

Public API:
- `CoordinateOffset` : holds the (optional, write-once) origin
- `translate_in(points, origin, base_elevation)` -> float32 local points
- `translate_out(points, origin)` -> float64 world points
- `shared_offset()` : process-wide default instance

"""
import logging
import threading
from typing import Optional

import numpy as np

from vectorflow.geometry import POINT_DTYPE, as_points

log = logging.getLogger(__name__)


class CoordinateOffset:
    """Write-once 3D origin shared by every load and save of a run.

    Pass one instance to all loaders and writers of a pipeline. Establishing
    the origin is serialized with a lock; after that the origin never changes.
    """

    def __init__(self, origin=None):
        self._lock = threading.Lock()
        self._origin: Optional[np.ndarray] = None
        if origin is not None:
            self._origin = np.asarray(origin, dtype=np.float64).reshape(3)

    @property
    def origin(self) -> Optional[np.ndarray]:
        if self._origin is None:
            return None
        return self._origin.copy()

    @property
    def is_set(self) -> bool:
        return self._origin is not None

    def get_or_establish(self, candidate) -> np.ndarray:
        """Return the origin, setting it to ``(x, y, 0)`` of ``candidate`` if unset."""
        with self._lock:
            if self._origin is None:
                self._origin = np.array([float(candidate[0]), float(candidate[1]), 0.0])
                log.info('Established coordinate offset at (%.3f, %.3f, 0)', self._origin[0], self._origin[1])
            return self._origin.copy()

    def current_or_zero(self) -> np.ndarray:
        """Origin for writing; an unset offset writes coordinates unchanged."""
        if self._origin is None:
            return np.zeros(3)
        return self._origin.copy()

    def __repr__(self):
        if self._origin is None:
            return 'CoordinateOffset(unset)'
        return 'CoordinateOffset(%r, %r, %r)' % tuple(float(v) for v in self._origin)


def translate_in(points, origin, base_elevation: float = 0.0) -> np.ndarray:
    """Move raw world ``points`` into the local frame.

    The subtraction happens in float64; only the small result is narrowed to
    float32. ``base_elevation`` is added to z after narrowing.
    """
    pts = as_points(points, dtype=np.float64)
    local = (pts - np.asarray(origin, dtype=np.float64)).astype(POINT_DTYPE)
    local[:, 2] += POINT_DTYPE(base_elevation)
    return local


def translate_out(points, origin) -> np.ndarray:
    """Move local ``points`` back to world coordinates (float64).

    The base elevation added by `translate_in` is not removed.
    """
    pts = as_points(points, dtype=np.float64)
    return pts + np.asarray(origin, dtype=np.float64)


_SHARED = CoordinateOffset()


def shared_offset() -> CoordinateOffset:
    """Process-wide offset used when a loader or writer is not given one."""
    return _SHARED
