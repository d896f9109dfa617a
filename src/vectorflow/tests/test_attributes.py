import numpy as np
import pytest

from vectorflow.attributes import AttributeChannel, AttributeKind, AttributeSchema
from vectorflow.exceptions import AttributeTypeError


def test_schema_from_fiona_properties_skips_unsupported():
    schema = AttributeSchema.from_fiona_properties({
        'gid': 'int:10',
        'small': 'int32',
        'flag': 'bool',
        'height': 'float:24.15',
        'name': 'str:80',
        'built': 'date',
        'blob': 'bytes',
    })
    assert schema.names == ['gid', 'small', 'flag', 'height', 'name']
    assert schema['gid'].kind is AttributeKind.INTEGER
    assert schema['flag'].kind is AttributeKind.INTEGER
    assert schema['height'].kind is AttributeKind.REAL
    assert schema['name'].kind is AttributeKind.TEXT
    assert 'built' not in schema
    assert all(len(ch) == 0 for ch in schema)


def test_append_value_for_missing_field_is_dropped():
    schema = AttributeSchema.from_fiona_properties({'gid': 'int'})
    assert schema.append_value('gid', '3')
    assert not schema.append_value('built', '2020-01-01')
    assert list(schema['gid']) == [3]


def test_null_values_get_defaults():
    schema = AttributeSchema.from_fiona_properties({'a': 'int', 'b': 'float', 'c': 'str'})
    schema.append_feature({'a': None, 'b': None})
    assert schema.row(0) == {'a': 0, 'b': 0.0, 'c': ''}


def test_channel_kind_is_fixed():
    ch = AttributeChannel('gid', AttributeKind.INTEGER)
    ch.append(4.9)
    ch.append('12')
    ch.append(True)
    assert list(ch) == [4, 12, 1]
    assert all(type(v) is int for v in ch)
    with pytest.raises(AttributeTypeError):
        ch.append('twelve')
    with pytest.raises(AttributeTypeError):
        ch.append(float('nan'))
    assert ch.kind is AttributeKind.INTEGER
    assert len(ch) == 3


def test_redefining_channel_kind_is_rejected():
    schema = AttributeSchema()
    schema.add('h', AttributeKind.REAL)
    assert schema.add('h', AttributeKind.REAL) is schema['h']
    with pytest.raises(AttributeTypeError):
        schema.add('h', AttributeKind.TEXT)


def test_append_feature_is_all_or_nothing():
    schema = AttributeSchema.from_fiona_properties({'name': 'str', 'gid': 'int', 'h': 'float'})
    schema.append_feature({'name': 'ok', 'gid': 1, 'h': 1.5})
    with pytest.raises(AttributeTypeError):
        schema.append_feature({'name': 'bad', 'gid': 'x', 'h': 2.0})
    assert schema.lengths() == {'name': 1, 'gid': 1, 'h': 1}
    schema.check_aligned(1)
    with pytest.raises(ValueError):
        schema.check_aligned(2)


def test_from_channels_infers_kinds():
    schema = AttributeSchema.from_channels({
        'gid': np.array([1, 2], dtype=np.int32),
        'h': [1.0, 2.5],
        'name': ['a', 'b'],
        'pre': AttributeChannel('other', AttributeKind.TEXT, ['x', 'y']),
    })
    assert [ch.kind for ch in schema] == [AttributeKind.INTEGER, AttributeKind.REAL, AttributeKind.TEXT, AttributeKind.TEXT]
    assert schema['pre'].name == 'pre'
    assert schema.fiona_properties() == {'gid': 'int64', 'h': 'float', 'name': 'str', 'pre': 'str'}


def test_field_indices_follow_existing_fields():
    schema = AttributeSchema.from_channels({'a': [1], 'b': [2.0], 'c': ['x']})
    assert schema.field_indices() == {'a': 0, 'b': 1, 'c': 2}
    assert schema.field_indices(start=3) == {'a': 3, 'b': 4, 'c': 5}


def test_value_at():
    schema = AttributeSchema.from_channels({'h': [1.0, 2.0]})
    assert schema.value_at('h', 1) == 2.0
    with pytest.raises(IndexError):
        schema.value_at('h', 2)
    with pytest.raises(KeyError):
        schema.value_at('missing', 0)


def test_to_dict_types():
    schema = AttributeSchema.from_channels({'gid': [1, 2], 'name': ['a', 'b']})
    arrays = schema.to_dict()
    assert arrays['gid'].dtype == np.int64
    assert arrays['name'].dtype == object
