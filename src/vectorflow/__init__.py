"""vectorflow: typed in-memory vector geometries and their OGR transcoding.

Loaders decode datasets into float32 geometries anchored at a shared
`CoordinateOffset` plus one typed attribute channel per field; writers do the
reverse.
"""
from vectorflow.attributes import AttributeChannel, AttributeKind, AttributeSchema
from vectorflow.geometry import GeometryKind, LineString, LinearRing, PointCollection, TriangleCollection
from vectorflow.io import LoadResult, OGRLoader, OGRWriter, load_points_csv, load_vector, write_points_csv, write_vector
from vectorflow.offset import CoordinateOffset, shared_offset
from vectorflow.ops import merge_lines

__version__ = '0.1.0'
