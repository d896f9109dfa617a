"""Read line and polygon features from an OGR vector dataset.

The loader walks the features of one layer, decodes line strings and polygons
(with holes) into local float32 geometries and fills one attribute channel per
supported field. Feature ``i`` of the result always owns row ``i`` of every
channel: a feature whose geometry or attributes cannot be decoded contributes
to nothing and is only logged.
"""

from typing import List, Optional, Union
import logging

import fiona
from fiona.errors import FionaError
import numpy as np

from vectorflow.attributes import AttributeSchema
from vectorflow.config import LOADER_DEFAULTS
from vectorflow.exceptions import AttributeTypeError, DatasetOpenError, MixedGeometryError
from vectorflow.geometry import LineString, LinearRing, as_points
from vectorflow.offset import CoordinateOffset, shared_offset, translate_in

log = logging.getLogger(__name__)

# fiona reports feature geometries with GeoJSON names (measures dropped, z kept);
# layer-level names may carry a '3D ' prefix or Z/M/ZM suffix.
LINE_STRING_TYPES = frozenset(['LineString', '3D LineString', 'LineStringZ', 'LineStringM', 'LineStringZM'])
POLYGON_TYPES = frozenset(['Polygon', '3D Polygon', 'PolygonZ', 'PolygonM', 'PolygonZM'])


def classify_geometry_type(geom_type: Optional[str]) -> Optional[str]:
    """Return 'line', 'polygon' or None for an unsupported geometry type."""
    if geom_type in LINE_STRING_TYPES:
        return 'line'
    if geom_type in POLYGON_TYPES:
        return 'polygon'
    return None


def open_ring(coords) -> np.ndarray:
    """Ring coordinates (float64) without the duplicate closing point."""
    pts = as_points(coords, dtype=np.float64)
    if pts.shape[0] > 1 and np.array_equal(pts[0], pts[-1]):
        pts = pts[:-1]
    return pts


class LoadResult:
    """Geometries and attribute channels decoded from one layer."""

    def __init__(self, line_strings: List[LineString], linear_rings: List[LinearRing],
                 attributes: AttributeSchema, skipped: int = 0, layer=None, geometry_type: Optional[str] = None):
        self.line_strings = line_strings
        self.linear_rings = linear_rings
        self.attributes = attributes
        self.skipped = skipped
        self.layer = layer
        self.geometry_type = geometry_type

    @property
    def mixed_geometry(self) -> bool:
        return bool(self.line_strings) and bool(self.linear_rings)

    @property
    def payload(self) -> Union[List[LineString], List[LinearRing]]:
        """The loaded geometries: line strings if any, otherwise linear rings.

        Raises MixedGeometryError when the layer held both kinds, since the
        attribute rows then interleave two collections.
        """
        if self.mixed_geometry:
            raise MixedGeometryError(
                f'layer {self.layer!r} mixes {len(self.line_strings)} line strings and '
                f'{len(self.linear_rings)} polygons; use line_strings/linear_rings explicitly'
            )
        if self.line_strings:
            return self.line_strings
        return self.linear_rings

    def __len__(self):
        return len(self.line_strings) + len(self.linear_rings)

    def __repr__(self):
        return (f'LoadResult(line_strings={len(self.line_strings)}, linear_rings={len(self.linear_rings)}, '
                f'fields={self.attributes.names}, skipped={self.skipped})')


class OGRLoader:
    """Loader for one layer of a vector dataset.

    Parameters:
    - filepath: dataset path (any format fiona can open)
    - base_elevation: added to z of every vertex
    - layer: layer index or name
    - offset: shared `CoordinateOffset`; defaults to the process-wide one
    """

    def __init__(self, filepath, base_elevation: float = LOADER_DEFAULTS['base_elevation'],
                 layer: Union[int, str] = LOADER_DEFAULTS['layer'], offset: Optional[CoordinateOffset] = None):
        self.filepath = str(filepath)
        self.base_elevation = float(base_elevation)
        self.layer = layer
        self.offset = offset if offset is not None else shared_offset()

    def resolve_layer(self, layers: List[str]) -> str:
        """Name of the requested layer; integer layers index ``layers``."""
        if isinstance(self.layer, int):
            if not 0 <= self.layer < len(layers):
                raise IndexError(f'layer index {self.layer} out of range, dataset has {len(layers)} layers')
            return layers[self.layer]
        if self.layer not in layers:
            raise ValueError(f'no layer named {self.layer!r}, available: {layers}')
        return self.layer

    def _open(self):
        # fiona 1.10 resolves layer=0 to a layer named after the file stem,
        # so indices are turned into names before opening.
        try:
            layers = fiona.listlayers(self.filepath)
            src = fiona.open(self.filepath, 'r', layer=self.resolve_layer(layers))
        except (FionaError, OSError, ValueError, IndexError) as e:
            log.error('Open failed: %s (%s)', self.filepath, e)
            raise DatasetOpenError(f'could not open {self.filepath}: {e}') from e
        log.info('Layer count: %d', len(layers))
        return src

    def load(self) -> LoadResult:
        line_strings: List[LineString] = []
        linear_rings: List[LinearRing] = []
        skipped = 0

        with self._open() as src:
            geometry_type = src.schema.get('geometry')
            log.info('Layer %r feature count: %d', src.name, len(src))
            log.info('Layer geometry type: %s', geometry_type)

            attributes = AttributeSchema.from_fiona_properties(src.schema.get('properties', {}))

            for feat in src:
                geom = feat.geometry
                if geom is None:
                    log.debug('Feature %s has no geometry; skipped', feat.id)
                    skipped += 1
                    continue

                kind = classify_geometry_type(geom.type)
                if kind is None:
                    log.warning('Unsupported geometry %s in feature %s; skipped', geom.type, feat.id)
                    skipped += 1
                    continue

                try:
                    row = attributes.convert_row(feat.properties)
                except AttributeTypeError as e:
                    log.warning('Feature %s skipped: %s', feat.id, e)
                    skipped += 1
                    continue

                if kind == 'line':
                    decoded = self.decode_line_string(geom.coordinates)
                else:
                    decoded = self.decode_polygon(geom.coordinates)
                if decoded is None:
                    log.warning('Empty %s in feature %s; skipped', geom.type, feat.id)
                    skipped += 1
                    continue

                if kind == 'line':
                    line_strings.append(decoded)
                else:
                    linear_rings.append(decoded)
                attributes.append_row(row)

        if line_strings:
            log.info('pushed %d line_string features...', len(line_strings))
        if linear_rings:
            log.info('pushed %d linear_ring features...', len(linear_rings))
        if line_strings and linear_rings:
            log.warning('%s mixes line strings and polygons; attribute rows follow source order across both',
                        self.filepath)
        if skipped:
            log.info('skipped %d features', skipped)

        return LoadResult(line_strings, linear_rings, attributes, skipped=skipped,
                          layer=self.layer, geometry_type=geometry_type)

    def decode_line_string(self, coords) -> Optional[LineString]:
        pts = as_points(coords, dtype=np.float64)
        if pts.shape[0] == 0:
            return None
        origin = self.offset.get_or_establish(pts[0])
        return LineString(translate_in(pts, origin, self.base_elevation))

    def decode_polygon(self, rings) -> Optional[LinearRing]:
        if not rings:
            return None
        exterior = open_ring(rings[0])
        if exterior.shape[0] == 0:
            return None
        origin = self.offset.get_or_establish(exterior[0])
        ring = LinearRing(translate_in(exterior, origin, self.base_elevation))
        for coords in rings[1:]:
            hole = open_ring(coords)
            if hole.shape[0] == 0:
                log.debug('Dropping empty interior ring')
                continue
            ring.add_interior_ring(translate_in(hole, origin, self.base_elevation))
        return ring


def load_vector(filepath, base_elevation: float = LOADER_DEFAULTS['base_elevation'],
                layer: Union[int, str] = LOADER_DEFAULTS['layer'], offset: Optional[CoordinateOffset] = None) -> LoadResult:
    """Convenience wrapper: ``OGRLoader(...).load()``."""
    return OGRLoader(filepath, base_elevation=base_elevation, layer=layer, offset=offset).load()
