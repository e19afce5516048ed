import pytest


@pytest.fixture
def records():
    return [
        {"Year": 2019, "Entity": "A", "Smoking": "10", "Alcohol": "5"},
        {"Year": 2019, "Entity": "B", "Smoking": "20", "Alcohol": "15"},
    ]


def _feature(name):
    return {
        "type": "Feature",
        "properties": {"name": name},
        "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]},
    }


@pytest.fixture
def boundaries():
    # "C" has no row in the dataset
    return {"type": "FeatureCollection", "features": [_feature("A"), _feature("B"), _feature("C")]}


@pytest.fixture
def make_feature():
    return _feature
