import pytest

from olapclient.adapters import mondrian
from olapclient.enums import AggregatorType, DimensionType
from olapclient.metadata import Cube, Member

SERVER = "https://mondrian.example.com"

SCHEMA = {
    "cubes": [
        {
            "name": "Sales",
            "caption": "Sales",
            "annotations": {"source": "warehouse"},
            "dimensions": [
                {
                    "name": "Date",
                    "type": "time",
                    "hierarchies": [
                        {
                            "name": "Date",
                            "has_all": True,
                            "levels": [
                                {"name": "(All)", "depth": 0, "properties": []},
                                {"name": "Year", "depth": 1, "properties": []},
                                {"name": "Month", "depth": 2, "properties": ["Month Name"]},
                            ],
                        }
                    ],
                },
                {
                    "name": "Store",
                    "type": "standard",
                    "hierarchies": [
                        {
                            "name": "Store",
                            "has_all": False,
                            "levels": [{"name": "Store", "depth": 0, "properties": []}],
                        }
                    ],
                },
            ],
            "measures": [
                {"name": "Units", "aggregator": "SUM"},
                {"name": "Price", "aggregator": "avg"},
            ],
            "named_sets": [{"name": "Top Stores", "dimension": "Store", "level": "Store"}],
        }
    ]
}


@pytest.fixture
def sales():
    (record,) = mondrian.plain_to_schema(SCHEMA, SERVER)
    return Cube.from_plain(record)


def test_cube(sales):
    assert sales.server == SERVER
    assert sales.uri == "https://mondrian.example.com/cubes/Sales"
    assert sales.get_annotation("source") == "warehouse"
    assert sales.get_dimension("Date").dimension_type == DimensionType.TIME
    assert sales.get_measure("Units").aggregator_type == AggregatorType.SUM
    assert sales.get_measure("Price").aggregator_type == AggregatorType.AVG
    assert sales.get_named_set("Top Stores").level is sales.get_level("Store")


def test_all_level_is_removed(sales):
    date = sales.get_dimension("Date").default_hierarchy
    assert [level.name for level in date.levels] == ["Year", "Month"]
    assert [level.depth for level in date.levels] == [1, 2]
    assert sales.get_level("Month").has_property("Month Name")


def test_hierarchy_without_all_level(sales):
    store = sales.get_level("Store")
    assert store.depth == 1


def test_uris(sales):
    assert sales.get_level("Month").uri == (
        "https://mondrian.example.com/cubes/Sales/dimensions/Date/hierarchies/Date"
        "/levels/Month"
    )


def test_list_of_cubes():
    records = mondrian.plain_to_schema(SCHEMA["cubes"], SERVER)
    assert [record["name"] for record in records] == ["Sales"]


def test_member(sales):
    month = sales.get_level("Month")
    record = mondrian.member_to_plain(
        {
            "key": 201901,
            "name": "January",
            "caption": "January 2019",
            "full_name": "[Date].[2019].[January]",
            "depth": 2,
            "level_name": "Month",
            "num_children": 0,
            "ancestors": [{"key": 2019, "name": "2019", "depth": 1, "level_name": "Year"}],
        },
        month.hierarchy.uri,
    )
    member = Member.from_plain(record, month)
    assert member.key == 201901
    assert member.caption == "January 2019"
    assert member.ancestors[0].key == 2019
    assert member.uri.endswith("/levels/Month/members/201901")
