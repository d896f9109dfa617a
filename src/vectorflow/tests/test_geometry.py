import numpy as np
import pytest

from vectorflow.geometry import (
    GeometryKind,
    LineString,
    LinearRing,
    PointCollection,
    TriangleCollection,
    as_points,
    geometry_kind,
    is_valid_triangle,
)


def test_as_points_pads_2d_and_drops_measures():
    pts = as_points([(1, 2), (3, 4)])
    assert pts.shape == (2, 3)
    assert pts.dtype == np.float32
    assert np.all(pts[:, 2] == 0)
    assert as_points([(1, 2, 3, 4)]).shape == (1, 3)
    assert as_points([]).shape == (0, 3)


def test_as_points_rejects_bad_shape():
    with pytest.raises(ValueError):
        as_points([[1], [2]])


def test_linear_ring_holes():
    ring = LinearRing([(0, 0), (1, 0), (1, 1)], interior_rings=[[(0.2, 0.2), (0.4, 0.2), (0.4, 0.4)]])
    assert len(ring) == 3
    assert len(ring.interior_rings) == 1
    assert ring.interior_rings[0].shape == (3, 3)
    with pytest.raises(ValueError):
        ring.add_interior_ring([])


def test_point_collection_append():
    pc = PointCollection()
    pc.append((1.0, 2.0, 3.0))
    pc.append((4.0, 5.0, 6.0))
    assert len(pc) == 2
    assert pc.to_list()[1] == (4.0, 5.0, 6.0)


def test_triangle_validity():
    assert is_valid_triangle(np.zeros((3, 3)))
    assert not is_valid_triangle(np.zeros((4, 3)))
    assert not is_valid_triangle([[0, 0, 0], [1, 0, np.nan], [0, 1, 0]])


def test_geometry_kind_from_first_element():
    assert geometry_kind([LineString([(0, 0), (1, 1)])]) is GeometryKind.LINE_STRING
    assert geometry_kind([LinearRing([(0, 0), (1, 0), (1, 1)])]) is GeometryKind.LINEAR_RING
    assert geometry_kind([TriangleCollection()]) is GeometryKind.TRIANGLE_COLLECTION
    assert GeometryKind.LINEAR_RING.schema_type == '3D Polygon'


def test_geometry_kind_rejects_mixed_and_empty():
    with pytest.raises(ValueError):
        geometry_kind([LineString([(0, 0)]), LinearRing([(0, 0)])])
    with pytest.raises(ValueError):
        geometry_kind([])
    assert geometry_kind([], GeometryKind.LINE_STRING) is GeometryKind.LINE_STRING
    with pytest.raises(ValueError):
        geometry_kind([LineString([(0, 0)])], GeometryKind.LINEAR_RING)
