"""
geometry.py

In-memory geometry types passed between loaders, pipeline steps and writers.
Coordinates are single precision and, once a dataset has been loaded, relative
to the shared origin held by `vectorflow.offset.CoordinateOffset`.

Public types:
- `LineString` : open sequence of points
- `LinearRing` : closed boundary (closing point not stored) owning its holes
- `TriangleCollection` : ordered triangles of a surface mesh
- `PointCollection` : point cloud
- `GeometryKind` : one output layer type per collection kind

"""
from enum import Enum
from typing import Iterable, List, Optional, Sequence

import numpy as np

POINT_DTYPE = np.float32


def as_points(coords, dtype=POINT_DTYPE) -> np.ndarray:
    """Return ``coords`` as a C-contiguous (N, 3) array.

    2D input gets z = 0; any extra ordinates (e.g. a measure) are dropped.
    """
    pts = np.asarray(coords, dtype=dtype)
    if pts.size == 0:
        return np.empty((0, 3), dtype=dtype)
    if pts.ndim == 1:
        pts = pts.reshape(1, -1)
    if pts.ndim != 2 or pts.shape[1] < 2:
        raise ValueError(f'expected (N, 2) or (N, 3) coordinates, got shape {pts.shape}')
    if pts.shape[1] == 2:
        pts = np.column_stack([pts, np.zeros(pts.shape[0], dtype=dtype)])
    return np.ascontiguousarray(pts[:, :3])


class _PointSequence:

    def __init__(self, points=()):
        self.points = as_points(points)

    def __len__(self):
        return self.points.shape[0]

    def __iter__(self):
        return iter(self.points)

    def __getitem__(self, i):
        return self.points[i]

    def to_list(self) -> List[tuple]:
        return [tuple(float(v) for v in p) for p in self.points]

    def __repr__(self):
        return f'{type(self).__name__}({len(self)} points)'


class LineString(_PointSequence):
    """Open polyline; the last point is not joined back to the first."""


class PointCollection(_PointSequence):
    """Unordered point cloud, e.g. read from a point CSV."""

    def append(self, point) -> None:
        self.points = np.vstack([self.points, as_points(point)])


class LinearRing(_PointSequence):
    """Exterior ring of a polygon plus its interior rings (holes).

    The duplicate closing point is never stored: writers close the ring when
    they build the native geometry.
    """

    def __init__(self, points=(), interior_rings: Optional[Iterable] = None):
        super().__init__(points)
        self.interior_rings: List[np.ndarray] = []
        for ring in interior_rings or ():
            self.add_interior_ring(ring)

    def add_interior_ring(self, points) -> None:
        ring = as_points(points)
        if ring.shape[0] == 0:
            raise ValueError('interior ring must contain at least one point')
        self.interior_rings.append(ring)

    def __repr__(self):
        return f'LinearRing({len(self)} points, {len(self.interior_rings)} holes)'


class TriangleCollection:
    """Ordered triangle facets of one surface.

    Triangles are kept as individual (k, 3) arrays and are not validated here;
    writers skip facets that do not have exactly three finite vertices.
    """

    def __init__(self, triangles: Iterable = ()):
        self.triangles: List[np.ndarray] = [as_points(t) for t in triangles]

    def append(self, triangle) -> None:
        self.triangles.append(as_points(triangle))

    def __len__(self):
        return len(self.triangles)

    def __iter__(self):
        return iter(self.triangles)

    def __getitem__(self, i):
        return self.triangles[i]

    def __repr__(self):
        return f'TriangleCollection({len(self)} triangles)'


def is_valid_triangle(triangle: np.ndarray) -> bool:
    tri = np.asarray(triangle)
    return tri.ndim == 2 and tri.shape[0] == 3 and bool(np.all(np.isfinite(tri)))


class GeometryKind(Enum):
    """Geometry kind of a collection, mapped to the fiona schema geometry type."""

    LINE_STRING = '3D LineString'
    LINEAR_RING = '3D Polygon'
    TRIANGLE_COLLECTION = '3D MultiPolygon'

    @property
    def schema_type(self) -> str:
        return self.value


_KIND_BY_TYPE = {
    LineString: GeometryKind.LINE_STRING,
    LinearRing: GeometryKind.LINEAR_RING,
    TriangleCollection: GeometryKind.TRIANGLE_COLLECTION,
}


def geometry_kind(geometries: Sequence, kind: Optional[GeometryKind] = None) -> GeometryKind:
    """Determine the single geometry kind of ``geometries``.

    An explicit ``kind`` wins for empty collections; otherwise the type of the
    first element decides and every other element must share it.
    """
    if len(geometries) == 0:
        if kind is None:
            raise ValueError('cannot determine the geometry kind of an empty collection; pass kind=')
        return kind

    found = _KIND_BY_TYPE.get(type(geometries[0]))
    if found is None:
        raise ValueError(f'unsupported geometry type {type(geometries[0]).__name__}')
    if kind is not None and kind is not found:
        raise ValueError(f'collection holds {found.name} but {kind.name} was requested')
    for i, geom in enumerate(geometries):
        if type(geom) is not type(geometries[0]):
            raise ValueError(
                f'mixed geometry collection: item {i} is {type(geom).__name__}, '
                f'expected {type(geometries[0]).__name__}'
            )
    return found
