import json

import pytest

from olapclient.errors import ArgumentError, NoSuchMeasureError
from olapclient.metadata import Cube


def build_full_query(query):
    return (
        query.set_format("csv")
        .set_locale("es")
        .add_drilldown("Year")
        .add_drilldown("Top Exporters")
        .add_measure("Value")
        .add_measure("Quantity")
        .add_cut("Country", ["mx", "ca"], exclusive=True)
        .add_cut("Top Exporters", ["us"], for_match=True)
        .add_caption("ES Name")
        .add_property("ISO 3")
        .add_filter("Value", ("gt", 100), "or", ("lt", -5.5))
        .add_calculation("growth", category="Year", value="Value")
        .add_calculation("topk", amount=5, category="Country", value="Value", order="asc")
        .set_pagination(10, 20)
        .set_sorting("Section Color", "asc")
        .set_time("year", "latest")
        .set_option("parents", True)
        .set_option("debug", False)
    )


class TestQueryToJson:
    def test_empty_query(self, query):
        assert query.to_json() == {
            "server": "https://olap.example.com",
            "cube": "trade",
            "format": "jsonrecords",
            "locale": "",
            "calculations": [],
            "captions": [],
            "cuts": [],
            "drilldowns": [],
            "filters": [],
            "page_limit": 0,
            "page_offset": 0,
            "measures": [],
            "properties": [],
            "sort_property": None,
            "sort_direction": None,
            "time": None,
            "options": {},
        }

    def test_full_query(self, query):
        result = build_full_query(query).to_json()

        assert result["format"] == "csv"
        assert result["drilldowns"] == [
            {"level": "Year", "hierarchy": "Year", "dimension": "Year"},
            {"namedset": "Top Exporters"},
        ]
        assert result["cuts"] == [
            {
                "level": "Country",
                "hierarchy": "Geography",
                "dimension": "Geography",
                "members": ["mx", "ca"],
                "exclusive": True,
                "for_match": False,
            },
            {
                "namedset": "Top Exporters",
                "members": ["us"],
                "exclusive": False,
                "for_match": True,
            },
        ]
        assert result["captions"] == [
            {
                "property": "ES Name",
                "level": "Country",
                "hierarchy": "Geography",
                "dimension": "Geography",
            }
        ]
        assert result["filters"] == [
            {
                "measure": "Value",
                "constraint": ["gt", 100],
                "joint": "or",
                "constraint2": ["lt", -5.5],
            }
        ]
        assert result["calculations"][1] == {
            "kind": "topk",
            "amount": 5,
            "category": {"level": "Country", "hierarchy": "Geography", "dimension": "Geography"},
            "value": "Value",
            "order": "asc",
        }
        assert result["page_limit"] == 10
        assert result["page_offset"] == 20
        assert result["sort_property"]["property"] == "Section Color"
        assert result["sort_direction"] == "asc"
        assert result["time"] == ["year", "latest"]
        assert result["options"] == {"parents": True, "debug": False}

    def test_is_json_serializable(self, query):
        text = json.dumps(build_full_query(query).to_json())
        assert json.loads(text)["cube"] == "trade"

    def test_measure_sorting(self, query):
        result = query.set_sorting("Value").to_json()
        assert result["sort_property"] == "Value"
        assert result["sort_direction"] == "desc"


class TestQueryFromJson:
    def test_round_trip(self, cube):
        original = build_full_query(cube.query)
        descriptor = json.loads(json.dumps(original.to_json()))

        rebuilt = cube.query.from_json(descriptor)
        assert rebuilt.to_json() == original.to_json()
        assert rebuilt.drilldowns == original.drilldowns
        assert rebuilt.captions == original.captions
        assert rebuilt.sorting == original.sorting

    def test_round_trip_on_another_cube_instance(self, plain_cube, cube):
        original = build_full_query(cube.query)
        other = Cube.from_plain(plain_cube)
        rebuilt = other.query.from_json(original.to_json())
        assert rebuilt.to_json() == original.to_json()
        assert rebuilt.drilldowns[0] is other.get_level("Year")

    def test_partial_descriptor(self, query):
        query.from_json({"drilldowns": ["Year"], "measures": ["Value"], "cuts": None})
        assert [item.name for item in query.drilldowns] == ["Year"]
        assert query.format.value == "jsonrecords"
        assert not query.pagination

    def test_plain_member_values(self, query):
        query.from_json({"cuts": [{"level": "Year", "members": [2019, 2020]}]})
        assert query.get_cut("Year").members == ["2019", "2020"]

    def test_cube_mismatch(self, query):
        with pytest.raises(ArgumentError):
            query.from_json({"cube": "exports"})

    def test_server_mismatch(self, query):
        with pytest.raises(ArgumentError):
            query.from_json({"server": "https://other.example.com", "cube": "trade"})

    def test_malformed_descriptor(self, query):
        with pytest.raises(ArgumentError):
            query.from_json({"filters": [{"measure": "Value"}]})
        with pytest.raises(ArgumentError):
            query.from_json({"page_limit": "many"})

    def test_unknown_reference(self, query):
        with pytest.raises(NoSuchMeasureError):
            query.from_json({"measures": ["Price"]})
