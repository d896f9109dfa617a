"""Whitespace separated point CSV files.

Input files have one header line followed by ``x y z`` rows; output files
carry an extra per-point ``distance`` column and two decimals per value.
"""
import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from vectorflow.config import CSV_DEFAULTS
from vectorflow.geometry import PointCollection
from vectorflow.offset import CoordinateOffset, shared_offset, translate_in, translate_out

log = logging.getLogger(__name__)


def load_points_csv(filepath, thin_nth: int = CSV_DEFAULTS['thin_nth'],
                    offset: Optional[CoordinateOffset] = None) -> PointCollection:
    """Read every ``thin_nth``-th point (0 or 1 keeps all) into the local frame."""
    thin_nth = int(thin_nth)
    if thin_nth < 0 or thin_nth > CSV_DEFAULTS['thin_nth_max']:
        raise ValueError(f"thin_nth must be within 0..{CSV_DEFAULTS['thin_nth_max']}, got {thin_nth}")
    offset = offset if offset is not None else shared_offset()

    try:
        df = pd.read_csv(filepath, sep=r'\s+', skiprows=1, header=None, usecols=[0, 1, 2], dtype=float)
    except pd.errors.EmptyDataError:
        log.warning('%s holds no points', filepath)
        return PointCollection()

    pts = df.to_numpy(dtype=np.float64)
    if thin_nth > 1:
        pts = pts[::thin_nth]
    if pts.shape[0] == 0:
        return PointCollection()

    origin = offset.get_or_establish(pts[0])
    log.info('read %d points from %s (thin factor %d)', pts.shape[0], filepath, thin_nth)
    return PointCollection(translate_in(pts, origin))


def write_points_csv(filepath, points: PointCollection, distances: Sequence[float],
                     offset: Optional[CoordinateOffset] = None,
                     precision: int = CSV_DEFAULTS['precision']) -> None:
    """Write ``points`` in world coordinates with one distance per point."""
    distances = np.asarray(distances, dtype=np.float64).reshape(-1)
    if distances.shape[0] != len(points):
        raise ValueError(f'{len(points)} points but {distances.shape[0]} distances')
    offset = offset if offset is not None else shared_offset()

    world = translate_out(points.points, offset.current_or_zero())
    x, y, z, d = CSV_DEFAULTS['header']
    df = pd.DataFrame({x: world[:, 0], y: world[:, 1], z: world[:, 2], d: distances})
    df.to_csv(filepath, sep=' ', index=False, float_format=f'%.{int(precision)}f')
    log.info('wrote %d points to %s', len(df), filepath)
