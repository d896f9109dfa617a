# -*- coding: utf-8 -*-

"""
vectorflow/config.py

Central defaults for the vector loaders and writers. Every loader/writer takes
these as keyword arguments, so a pipeline can override any of them per call;
keeping the values here means the CLI, the library and the tests agree on them.

Contents:
---------
1. LOADER_DEFAULTS:
   - `base_elevation` is added to every z on load (m).
   - `layer` is the layer index (or name) read from the source dataset.

2. WRITER_DEFAULTS:
   - `epsg` is the spatial reference of the output layer.
   - `driver` is the OGR driver short name.
   - `layer_name` names the output layer.
   - `append` adds the layer to an existing dataset instead of replacing it.

3. CSV_DEFAULTS:
   - thinning factor and number formatting for the point CSV helpers.

4. FIELD_TYPE_MAP:
   - source field type names (as reported by fiona) -> attribute channel kind.

Usage:
------
    from vectorflow.config import WRITER_DEFAULTS
    epsg = WRITER_DEFAULTS['epsg']
"""

# ───────────────────────────────────────────────────────────────────────────────
# 1) LOADING
# ───────────────────────────────────────────────────────────────────────────────
LOADER_DEFAULTS = {
    'base_elevation': 0.0,      # added to z of every decoded vertex (m)
    'layer': 0,                 # first layer of the dataset
}

# ───────────────────────────────────────────────────────────────────────────────
# 2) WRITING
# ───────────────────────────────────────────────────────────────────────────────
WRITER_DEFAULTS = {
    'epsg': 7415,               # Amersfoort / RD New + NAP height
    'driver': 'GPKG',
    'layer_name': 'geom',
    'append': False,
}

# ───────────────────────────────────────────────────────────────────────────────
# 3) POINT CSV
# ───────────────────────────────────────────────────────────────────────────────
CSV_DEFAULTS = {
    'thin_nth': 5,              # keep every 5th point
    'thin_nth_max': 100,
    'precision': 2,             # decimals written per value
    'header': ('x', 'y', 'z', 'distance'),
}

# ───────────────────────────────────────────────────────────────────────────────
# 4) FIELD TYPES
# ───────────────────────────────────────────────────────────────────────────────
# fiona reports OFTInteger as 'int32', OFTInteger64 as 'int'/'int64', and the
# boolean/int16 subtypes of OFTInteger under their own names. Widths such as
# 'str:80' are stripped before lookup.
FIELD_TYPE_MAP = {
    'int': 'integer',
    'int16': 'integer',
    'int32': 'integer',
    'int64': 'integer',
    'bool': 'integer',
    'float': 'real',
    'str': 'text',
}
