import logging

import pytest

from vectorflow.offset import CoordinateOffset


def pytest_configure(config):
    """Keep GDAL/fiona chatter out of captured test logs."""
    logging.getLogger('fiona').setLevel(logging.ERROR)


@pytest.fixture
def offset():
    """A fresh, unset coordinate offset so tests never share an origin."""
    return CoordinateOffset()
