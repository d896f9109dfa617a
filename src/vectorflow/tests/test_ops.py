import numpy as np

from vectorflow.geometry import LineString
from vectorflow.ops import merge_lines


def test_merge_touching_segments():
    segments = [
        LineString([(0, 0, 0), (1, 0, 1)]),
        LineString([(1, 0, 1), (2, 0, 2)]),
        LineString([(5, 5, 0), (6, 5, 0)]),
    ]
    merged = merge_lines(segments)
    assert len(merged) == 2
    lengths = sorted(len(m) for m in merged)
    assert lengths == [2, 3]
    longest = max(merged, key=len)
    np.testing.assert_array_equal(sorted(longest.points[:, 0]), [0, 1, 2])


def test_merge_skips_degenerate_lines():
    assert merge_lines([LineString([(0, 0)])]) == []
    assert merge_lines([]) == []
