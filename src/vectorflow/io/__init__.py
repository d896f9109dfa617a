"""Readers and writers for vector datasets and point files."""
from vectorflow.io.csv_points import load_points_csv, write_points_csv
from vectorflow.io.ogr_reader import LoadResult, OGRLoader, load_vector
from vectorflow.io.ogr_writer import OGRWriter, write_vector

__all__ = [
    'LoadResult',
    'OGRLoader',
    'OGRWriter',
    'load_points_csv',
    'load_vector',
    'write_points_csv',
    'write_vector',
]
