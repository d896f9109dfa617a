import numpy as np
import pytest

from vectorflow.geometry import PointCollection
from vectorflow.io.csv_points import load_points_csv, write_points_csv
from vectorflow.offset import CoordinateOffset


def _write_points(path, n):
    with open(path, 'w') as f:
        f.write('x y z\n')
        for i in range(n):
            f.write(f'{100000 + i} {200000 + 2 * i} {i * 0.5}\n')
    return str(path)


def test_thinning_keeps_every_nth(tmp_path, offset):
    path = _write_points(tmp_path / 'pts.csv', 12)
    pts = load_points_csv(path, thin_nth=5, offset=offset)
    assert len(pts) == 3
    np.testing.assert_array_equal(pts.points[:, 0], [0, 5, 10])
    np.testing.assert_array_equal(offset.origin, [100000, 200000, 0])


@pytest.mark.parametrize('thin', [0, 1])
def test_no_thinning(tmp_path, thin):
    path = _write_points(tmp_path / 'pts.csv', 4)
    assert len(load_points_csv(path, thin_nth=thin, offset=CoordinateOffset())) == 4


def test_thin_factor_bounds(tmp_path, offset):
    path = _write_points(tmp_path / 'pts.csv', 4)
    with pytest.raises(ValueError):
        load_points_csv(path, thin_nth=101, offset=offset)
    with pytest.raises(ValueError):
        load_points_csv(path, thin_nth=-1, offset=offset)


def test_header_only_file(tmp_path, offset):
    path = tmp_path / 'empty.csv'
    path.write_text('x y z\n')
    assert len(load_points_csv(str(path), offset=offset)) == 0
    assert not offset.is_set


def test_write_points_restores_world_coordinates(tmp_path):
    offset = CoordinateOffset((100000.0, 200000.0, 0.0))
    pts = PointCollection([(1.0, 2.0, 3.0), (4.5, 5.25, 6.125)])
    out = tmp_path / 'out.csv'
    write_points_csv(str(out), pts, [0.5, 1.0], offset=offset)
    lines = out.read_text().splitlines()
    assert lines[0] == 'x y z distance'
    assert lines[1] == '100001.00 200002.00 3.00 0.50'
    assert lines[2] == '100004.50 200005.25 6.12 1.00'


def test_write_points_length_mismatch(tmp_path, offset):
    with pytest.raises(ValueError):
        write_points_csv(str(tmp_path / 'bad.csv'), PointCollection([(0, 0, 0)]), [1.0, 2.0], offset=offset)
