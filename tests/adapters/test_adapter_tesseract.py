import pytest

from olapclient.adapters import tesseract
from olapclient.enums import AggregatorType
from olapclient.metadata import Cube, Member

SERVER = "https://tesseract.example.com"

SCHEMA = {
    "cubes": [
        {
            "name": "trade_i",
            "annotations": {"default": "Trade Value"},
            "dimensions": [
                {
                    "name": "Time",
                    "type": "time",
                    "hierarchies": [
                        {
                            "name": "Time",
                            "levels": [
                                {"name": "Year", "unique_name": "Year"},
                                {"name": "Quarter", "unique_name": "Quarter"},
                            ],
                        }
                    ],
                },
                {
                    "name": "Exporter",
                    "type": "geo",
                    "default_hierarchy": "Geography",
                    "hierarchies": [
                        {
                            "name": "Geography",
                            "levels": [
                                {
                                    "name": "Country",
                                    "unique_name": "Exporter Country",
                                    "properties": [
                                        {"name": "ISO 3", "unique_name": "Exporter ISO 3"},
                                        {"name": "ES Label", "caption_set": "es"},
                                    ],
                                }
                            ],
                        }
                    ],
                },
            ],
            "measures": [
                {"name": "Quantity", "aggregator": {"name": "avg"}},
                {"name": "Trade Value", "aggregator": {"name": "sum"}},
            ],
        }
    ]
}


@pytest.fixture
def trade():
    (record,) = tesseract.plain_to_schema(SCHEMA, SERVER)
    return Cube.from_plain(record)


def test_cube(trade):
    assert trade.name == "trade_i"
    assert trade.default_measure.name == "Trade Value"
    assert trade.get_measure("Quantity").aggregator_type == AggregatorType.AVG
    assert trade.namedsets == ()


def test_levels(trade):
    assert [level.depth for level in trade.get_dimension("Time").level_iterator()] == [1, 2]
    country = trade.get_level("Exporter Country")
    assert country.name == "Country"
    assert country.get_property("Exporter ISO 3").name == "ISO 3"
    assert country.get_property("ES Label").caption_set == "es"


def test_default_hierarchy(trade):
    assert trade.get_dimension("Time").default_hierarchy.name == "Time"
    assert trade.get_dimension("Exporter").default_hierarchy.name == "Geography"


def test_member(trade):
    country = trade.get_level("Exporter Country")
    record = tesseract.member_to_plain(
        {"ID": "mex", "Label": "Mexico", "ES Label": "México"},
        country.unique_name,
        SERVER,
        locale="es",
    )
    member = Member.from_plain(record, country)
    assert member.key == "mex"
    assert member.caption == "México"
    assert member.full_name == "Exporter Country.mex"
    assert member.uri == "https://tesseract.example.com/members?level=Exporter%20Country"


def test_member_without_label():
    record = tesseract.member_to_plain({"ID": 4}, "Year", SERVER)
    assert record["name"] == "4"
    assert record["caption"] == "4"
