"""Write line strings, polygons or triangle meshes to an OGR vector dataset.

Unlike the loader, the writer is strict: the attribute channels come from
in-memory data that is expected to be consistent, so any failure to populate
or submit a feature aborts the whole save with `FeatureWriteError`. The only
tolerated failure is a degenerate triangle facet, which is logged and left
out of its surface.

fiona cannot build PolyhedralSurface features, so a TriangleCollection is
written to a '3D MultiPolygon' layer with one polygon per triangle.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import fiona
from fiona.crs import CRS
from fiona.errors import FionaError
from fiona.model import Feature
import numpy as np
from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon, mapping

from vectorflow.attributes import AttributeSchema
from vectorflow.config import WRITER_DEFAULTS
from vectorflow.exceptions import DatasetCreationError, DriverNotFoundError, FeatureWriteError
from vectorflow.geometry import (
    GeometryKind,
    LineString,
    LinearRing,
    TriangleCollection,
    geometry_kind,
    is_valid_triangle,
)
from vectorflow.offset import CoordinateOffset, shared_offset, translate_out

log = logging.getLogger(__name__)


def close_ring(pts: np.ndarray) -> np.ndarray:
    """Append the first point to ``pts`` unless the ring is already closed."""
    if pts.shape[0] == 0 or np.array_equal(pts[0], pts[-1]):
        return pts
    return np.vstack([pts, pts[:1]])


def _coords(pts: np.ndarray) -> List[tuple]:
    return [tuple(float(v) for v in p) for p in pts]


def line_string_geometry(line: LineString, origin) -> Dict[str, Any]:
    return {'type': 'LineString', 'coordinates': _coords(translate_out(line.points, origin))}


def polygon_geometry(ring: LinearRing, origin) -> Dict[str, Any]:
    rings = [_coords(close_ring(translate_out(ring.points, origin)))]
    for hole in ring.interior_rings:
        rings.append(_coords(close_ring(translate_out(hole, origin))))
    return {'type': 'Polygon', 'coordinates': rings}


def surface_geometry(triangles: TriangleCollection, origin) -> Dict[str, Any]:
    """One closed polygon per triangle, gathered into a 3D multipolygon.

    Facets that are not proper triangles are logged and left out.
    """
    facets = []
    for i, tri in enumerate(triangles):
        if not is_valid_triangle(tri):
            log.warning("couldn't add triangle %d to surface: expected 3 finite vertices, got %s", i, np.shape(tri))
            continue
        try:
            facets.append(Polygon(close_ring(translate_out(tri, origin))))
        except (ValueError, GEOSException) as e:
            log.warning("couldn't add triangle %d to surface: %s", i, e)
    log.debug('num tri in surface %d', len(facets))
    if not facets:
        log.warning('surface of %d triangles has no valid facets; writing an empty multipolygon', len(triangles))
    return mapping(MultiPolygon(facets))


_BUILDERS = {
    GeometryKind.LINE_STRING: line_string_geometry,
    GeometryKind.LINEAR_RING: polygon_geometry,
    GeometryKind.TRIANGLE_COLLECTION: surface_geometry,
}


class OGRWriter:
    """Writer for one output layer.

    Parameters:
    - filepath: output dataset path
    - epsg: EPSG code of the output spatial reference
    - driver: OGR driver short name, e.g. 'GPKG'
    - layer_name: name of the created layer
    - append: add the layer to an existing dataset instead of replacing it
    - offset: shared `CoordinateOffset`; defaults to the process-wide one
    """

    def __init__(self, filepath, epsg: int = WRITER_DEFAULTS['epsg'], driver: str = WRITER_DEFAULTS['driver'],
                 layer_name: str = WRITER_DEFAULTS['layer_name'], append: bool = WRITER_DEFAULTS['append'],
                 offset: Optional[CoordinateOffset] = None):
        self.filepath = str(filepath)
        self.epsg = int(epsg)
        self.driver = str(driver)
        self.layer_name = str(layer_name)
        self.append = bool(append)
        self.offset = offset if offset is not None else shared_offset()

    def _check_driver(self) -> None:
        modes = fiona.supported_drivers.get(self.driver)
        if modes is None or 'w' not in modes:
            log.error('%s driver not available.', self.driver)
            raise DriverNotFoundError(f"driver '{self.driver}' is not available for writing")

    def _create(self, kind: GeometryKind, attributes: AttributeSchema):
        schema = {'geometry': kind.schema_type, 'properties': attributes.fiona_properties()}
        try:
            crs = CRS.from_epsg(self.epsg)
            if os.path.exists(self.filepath) and not self.append:
                log.info('Replacing existing dataset %s', self.filepath)
                fiona.remove(self.filepath, driver=self.driver)
            dst = fiona.open(self.filepath, 'w', driver=self.driver, schema=schema, crs=crs, layer=self.layer_name)
        except (FionaError, OSError, ValueError) as e:
            log.error('Creation of output layer %r in %s failed: %s', self.layer_name, self.filepath, e)
            raise DatasetCreationError(f'could not create layer {self.layer_name!r} in {self.filepath}: {e}') from e
        return dst

    def write(self, geometries: Sequence, attributes=None, kind: Optional[GeometryKind] = None) -> int:
        """Write ``geometries`` with their ``attributes``; returns the feature count.

        ``geometries`` must hold a single kind (LineString, LinearRing or
        TriangleCollection). ``attributes`` is an `AttributeSchema`, a list of
        `AttributeChannel` or a mapping of field name to channel/column.
        """
        kind = geometry_kind(geometries, kind)
        fields = AttributeSchema.from_channels(attributes)
        self._check_driver()

        if self.offset.is_set:
            log.debug('Writing with offset %s; base elevation from loading is kept in z', self.offset)
        else:
            log.warning('No coordinate offset established; writing coordinates unchanged')
        origin = self.offset.current_or_zero()
        build = _BUILDERS[kind]

        log.info('input geometries length %d', len(geometries))
        with self._create(kind, fields) as dst:
            field_index = fields.field_indices(start=max(0, len(dst.schema['properties']) - len(fields)))
            log.debug('Output fields: %s', field_index)

            for i, geom in enumerate(geometries):
                try:
                    properties = {name: fields.value_at(name, i) for name in field_index}
                except (KeyError, IndexError) as e:
                    raise FeatureWriteError(f'setting fields of feature {i} failed: {e}') from e

                feature = Feature.from_dict({'geometry': build(geom, origin), 'properties': properties})
                try:
                    dst.write(feature)
                except (FionaError, ValueError, TypeError, OSError) as e:
                    log.error('Failed to create feature %d in %s', i, self.filepath)
                    raise FeatureWriteError(f'failed to create feature {i} in {self.filepath}: {e}') from e

        log.info('wrote %d %s features to %s:%s', len(geometries), kind.name.lower(), self.filepath, self.layer_name)
        return len(geometries)


def write_vector(filepath, geometries: Sequence, attributes=None, kind: Optional[GeometryKind] = None,
                 offset: Optional[CoordinateOffset] = None, **kwargs) -> int:
    """Convenience wrapper: ``OGRWriter(filepath, **kwargs).write(...)``."""
    return OGRWriter(filepath, offset=offset, **kwargs).write(geometries, attributes, kind=kind)
