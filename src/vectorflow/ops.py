"""Geometry operations on in-memory collections."""
import logging
from typing import Iterable, List

import numpy as np
from shapely.geometry import LineString as ShapelyLineString, MultiLineString
from shapely.ops import linemerge

from vectorflow.geometry import LineString

log = logging.getLogger(__name__)


def merge_lines(lines: Iterable[LineString]) -> List[LineString]:
    """Merge touching line strings into maximal continuous lines.

    Lines with fewer than two points cannot take part and are dropped.
    Coordinates stay in the local frame; z is carried through.
    """
    segments = []
    for i, line in enumerate(lines):
        if len(line) < 2:
            log.debug('line %d has %d points; not merged', i, len(line))
            continue
        segments.append(ShapelyLineString(line.points.astype(np.float64)))
    if not segments:
        return []

    merged = linemerge(MultiLineString(segments))
    if merged.is_empty:
        return []
    parts = getattr(merged, 'geoms', [merged])
    out = [LineString(np.asarray(part.coords)) for part in parts]
    log.info('Merged %d lines into %d', len(segments), len(out))
    return out
