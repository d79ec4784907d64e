import json
from pathlib import Path

import pytest

from olapclient.metadata import Cube
from olapclient.settings import get_settings

DATA_PATH = Path(__file__).parent / "data"


def load_json(name):
    with open(DATA_PATH / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process, tests changing the environment need
    a fresh instance."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def plain_cube():
    return load_json("trade_cube.json")


@pytest.fixture
def cube(plain_cube):
    return Cube.from_plain(plain_cube)


@pytest.fixture
def query(cube):
    return cube.query
