"""Typed attribute channels aligned with geometry collections.

A channel is a named, append-only column whose kind (integer, real or text)
is fixed when it is created. An `AttributeSchema` keeps the channels of one
load or save in field order and guarantees that a feature either contributes
a value to every channel or to none.
"""
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union
import logging

import numpy as np

from vectorflow.config import FIELD_TYPE_MAP
from vectorflow.exceptions import AttributeTypeError

log = logging.getLogger(__name__)


class AttributeKind(Enum):
    INTEGER = 'integer'
    REAL = 'real'
    TEXT = 'text'

    @property
    def dtype(self):
        return _DTYPES[self]

    @property
    def schema_type(self) -> str:
        """fiona field type used when writing a channel of this kind."""
        return _SCHEMA_TYPES[self]

    def convert(self, value):
        """Convert ``value`` to this kind's Python type.

        Null values become 0, 0.0 or '' like OGR's GetFieldAs* accessors.
        """
        if value is None:
            return _NULLS[self]
        try:
            if self is AttributeKind.TEXT:
                return value if isinstance(value, str) else str(value)
            if self is AttributeKind.INTEGER:
                if isinstance(value, (float, np.floating)) and not np.isfinite(value):
                    raise ValueError(f'non-finite value {value!r}')
                return int(value)
            return float(value)
        except (TypeError, ValueError) as e:
            raise AttributeTypeError(f'cannot convert {value!r} to {self.value}: {e}') from e

    @classmethod
    def from_field_type(cls, field_type: str) -> Optional['AttributeKind']:
        """Channel kind for a fiona field type such as 'int:10' or 'str:80'."""
        base = str(field_type).split(':', 1)[0].strip().lower()
        name = FIELD_TYPE_MAP.get(base)
        return cls(name) if name is not None else None

    @classmethod
    def infer(cls, values) -> 'AttributeKind':
        """Guess the kind of an already populated column."""
        arr = np.asarray(values)
        if arr.dtype.kind in 'iub':
            return cls.INTEGER
        if arr.dtype.kind == 'f':
            return cls.REAL
        if arr.dtype.kind in 'US':
            return cls.TEXT
        for v in values:
            if v is None:
                continue
            if isinstance(v, (bool, int, np.integer)):
                return cls.INTEGER
            if isinstance(v, (float, np.floating)):
                return cls.REAL
            return cls.TEXT
        raise AttributeTypeError('cannot infer the kind of a column without values')


_DTYPES = {
    AttributeKind.INTEGER: np.int64,
    AttributeKind.REAL: np.float64,
    AttributeKind.TEXT: object,
}

_SCHEMA_TYPES = {
    AttributeKind.INTEGER: 'int64',
    AttributeKind.REAL: 'float',
    AttributeKind.TEXT: 'str',
}

_NULLS = {
    AttributeKind.INTEGER: 0,
    AttributeKind.REAL: 0.0,
    AttributeKind.TEXT: '',
}


class AttributeChannel:
    """Append-only column of one fixed `AttributeKind`."""

    def __init__(self, name: str, kind: AttributeKind, values: Iterable = ()):
        self.name = str(name)
        self._kind = AttributeKind(kind)
        self._values: List[Any] = []
        for v in values:
            self.append(v)

    @property
    def kind(self) -> AttributeKind:
        return self._kind

    def append(self, value) -> None:
        self._values.append(self._kind.convert(value))

    def extend(self, values: Iterable) -> None:
        converted = [self._kind.convert(v) for v in values]
        self._values.extend(converted)

    def to_numpy(self) -> np.ndarray:
        return np.asarray(self._values, dtype=self._kind.dtype)

    def __len__(self):
        return len(self._values)

    def __getitem__(self, i):
        return self._values[i]

    def __iter__(self):
        return iter(self._values)

    def __repr__(self):
        return f'AttributeChannel({self.name!r}, {self._kind.value}, {len(self)} values)'


ChannelSource = Union[AttributeChannel, Iterable]


class AttributeSchema:
    """Field name -> `AttributeChannel`, in field order.

    Load mode: `from_fiona_properties` builds empty channels from the source
    field definitions; `append_feature` then adds one row per decoded feature.

    Save mode: `from_channels` wraps populated channels; `field_indices` and
    `value_at` drive the writer.
    """

    def __init__(self, channels: Iterable[AttributeChannel] = ()):
        self._channels: Dict[str, AttributeChannel] = {}
        for channel in channels:
            if channel.name in self._channels:
                raise ValueError(f'duplicate attribute channel {channel.name!r}')
            self._channels[channel.name] = channel

    # --- load mode ---------------------------------------------------------

    @classmethod
    def from_fiona_properties(cls, properties: Mapping[str, str]) -> 'AttributeSchema':
        """Create one empty channel per supported source field.

        ``properties`` is the ``schema['properties']`` mapping of a fiona
        collection. Fields of other types (dates, binaries, lists) get no
        channel and their values are dropped.
        """
        schema = cls()
        for name, field_type in properties.items():
            kind = AttributeKind.from_field_type(field_type)
            if kind is None:
                log.warning("Skipping field '%s' of unsupported type '%s'", name, field_type)
                continue
            schema.add(name, kind)
        return schema

    def add(self, name: str, kind: AttributeKind) -> AttributeChannel:
        """Create (or return the existing) channel ``name`` of ``kind``."""
        existing = self._channels.get(name)
        if existing is not None:
            if existing.kind is not AttributeKind(kind):
                raise AttributeTypeError(
                    f"channel '{name}' is {existing.kind.value}, cannot redefine it as {AttributeKind(kind).value}"
                )
            return existing
        channel = AttributeChannel(name, kind)
        self._channels[name] = channel
        return channel

    def append_value(self, name: str, raw_value) -> bool:
        """Append ``raw_value`` to channel ``name``; False if there is no such channel."""
        channel = self._channels.get(name)
        if channel is None:
            log.debug("No channel for field '%s'; value dropped", name)
            return False
        channel.append(raw_value)
        return True

    def convert_row(self, properties: Optional[Mapping[str, Any]]) -> List[Any]:
        """Convert a feature's properties to one value per channel, in field order.

        Raises AttributeTypeError without touching any channel.
        """
        properties = properties or {}
        return [ch.kind.convert(properties.get(name)) for name, ch in self._channels.items()]

    def append_row(self, row: List[Any]) -> None:
        """Append a row produced by `convert_row`."""
        if len(row) != len(self._channels):
            raise ValueError(f'row has {len(row)} values for {len(self._channels)} channels')
        for ch, value in zip(self._channels.values(), row):
            ch.append(value)

    def append_feature(self, properties: Optional[Mapping[str, Any]]) -> None:
        """Append one row taken from a feature's properties.

        All values are converted before any channel is touched, so a value
        that fails conversion leaves every channel unchanged.
        """
        self.append_row(self.convert_row(properties))

    # --- save mode ---------------------------------------------------------

    @classmethod
    def from_channels(cls, channels: Union[Mapping[str, ChannelSource], Iterable[AttributeChannel], None]) -> 'AttributeSchema':
        """Wrap caller supplied columns.

        Accepts `AttributeChannel` instances, or a mapping of name to either a
        channel or a plain sequence/array whose kind is inferred.
        """
        if channels is None:
            return cls()
        if isinstance(channels, AttributeSchema):
            return channels
        if not isinstance(channels, Mapping):
            return cls(channels)
        out = []
        for name, source in channels.items():
            if isinstance(source, AttributeChannel):
                if source.name != name:
                    source = AttributeChannel(name, source.kind, source)
                out.append(source)
            else:
                out.append(AttributeChannel(name, AttributeKind.infer(source), source))
        return cls(out)

    def field_indices(self, start: int = 0) -> Dict[str, int]:
        """Sequential output field index per channel, after ``start`` existing fields."""
        return {name: start + i for i, name in enumerate(self._channels)}

    def fiona_properties(self) -> Dict[str, str]:
        """``schema['properties']`` for an output layer holding these channels."""
        return {name: ch.kind.schema_type for name, ch in self._channels.items()}

    def value_at(self, name: str, index: int):
        """Typed value of field ``name`` for feature ``index``.

        Raises KeyError for an unknown field and IndexError for a short channel.
        """
        channel = self._channels[name]
        if index < 0 or index >= len(channel):
            raise IndexError(f"channel '{name}' has {len(channel)} values, no value for feature {index}")
        return channel[index]

    def row(self, index: int) -> Dict[str, Any]:
        return {name: self.value_at(name, index) for name in self._channels}

    # --- common ------------------------------------------------------------

    def lengths(self) -> Dict[str, int]:
        return {name: len(ch) for name, ch in self._channels.items()}

    def check_aligned(self, count: int) -> None:
        """Raise ValueError unless every channel holds exactly ``count`` values."""
        bad = {name: n for name, n in self.lengths().items() if n != count}
        if bad:
            raise ValueError(f'attribute channels not aligned with {count} geometries: {bad}')

    def to_dict(self) -> Dict[str, np.ndarray]:
        return {name: ch.to_numpy() for name, ch in self._channels.items()}

    @property
    def names(self) -> List[str]:
        return list(self._channels)

    def get(self, name: str) -> Optional[AttributeChannel]:
        return self._channels.get(name)

    def __getitem__(self, name: str) -> AttributeChannel:
        return self._channels[name]

    def __contains__(self, name) -> bool:
        return name in self._channels

    def __iter__(self) -> Iterator[AttributeChannel]:
        return iter(self._channels.values())

    def __len__(self):
        return len(self._channels)

    def __repr__(self):
        fields = ', '.join(f'{n}:{c.kind.value}' for n, c in self._channels.items())
        return f'AttributeSchema({fields})'
