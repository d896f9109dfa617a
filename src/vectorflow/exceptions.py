"""Exceptions raised by the vectorflow loaders and writers.

Decoding is tolerant and only raises when the source cannot be opened at all;
encoding is strict and raises on the first failure.
"""


class VectorIOError(RuntimeError):
    """Base class for all vectorflow failures."""


class DatasetOpenError(VectorIOError):
    """The source dataset could not be opened for reading."""


class DriverNotFoundError(VectorIOError):
    """The requested output driver is unknown or cannot write."""


class DatasetCreationError(VectorIOError):
    """The output dataset, layer or its fields could not be created."""


class FeatureWriteError(VectorIOError):
    """A feature could not be populated or submitted to the output layer."""


class MixedGeometryError(VectorIOError):
    """A load produced both line strings and polygons."""


class AttributeTypeError(VectorIOError, TypeError):
    """A value does not convert to the fixed type of its attribute channel."""
