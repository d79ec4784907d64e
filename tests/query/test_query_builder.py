import math

import pytest

from olapclient.enums import Calculation, Comparison, Direction, Format, Joint, TimePrecision, TimeValue
from olapclient.errors import (
    ArgumentError,
    NoSuchLevelError,
    NoSuchMeasureError,
    NoSuchPropertyError,
)
from olapclient.metadata import Measure, NamedSet, Property
from olapclient.query import GrowthCalculation, Pagination, TopkCalculation


class TestDrilldowns:
    def test_add_drilldown(self, cube, query):
        query.add_drilldown("Year").add_drilldown("Geography.Geography.Country")
        assert query.drilldowns == [cube.get_level("Year"), cube.get_level("Country")]

    def test_add_drilldown_is_idempotent(self, query):
        query.add_drilldown("Year").add_drilldown("Year.Year.Year")
        query.add_drilldown({"level": "Year", "dimension": "Year"})
        assert len(query.drilldowns) == 1

    def test_named_set_drilldown(self, cube, query):
        query.add_drilldown("Top Exporters")
        query.add_drilldown({"namedset": "Top Exporters"})
        assert query.drilldowns == [cube.get_named_set("Top Exporters")]
        assert isinstance(query.drilldowns[0], NamedSet)

    def test_unknown_drilldown(self, query):
        with pytest.raises(NoSuchLevelError):
            query.add_drilldown("Town")
        assert query.drilldowns == []


class TestCuts:
    def test_add_cut(self, cube, query):
        query.add_cut("Country", ["mx", 124, None, ""], exclusive=True)
        cut = query.get_cut("Country")
        assert cut.drillable is cube.get_level("Country")
        assert cut.members == ["mx", "124"]
        assert cut.exclusive is True
        assert cut.for_match is False
        assert cut.key == "Geography.Geography.Country"

    def test_cuts_are_merged(self, query):
        query.add_cut("Country", ["a"], exclusive=True)
        query.add_cut("Country", ["a", "b"])
        cuts = query.cuts
        assert len(cuts) == 1
        assert cuts[0].members == ["a", "b"]
        assert cuts[0].exclusive is True

        query.add_cut("Geography.Geography.Country", [], exclusive=False, for_match=True)
        cut = query.get_cut("Country")
        assert cut.exclusive is False
        assert cut.for_match is True

    def test_scalar_member(self, query):
        query.add_cut("Year", 2020)
        assert query.get_cut("Year").members == ["2020"]

    def test_cut_copies(self, query):
        query.add_cut("Year", ["2020"])
        query.cuts[0].members.append("2021")
        query.get_cut("Year").members.append("2022")
        assert query.get_cut("Year").members == ["2020"]

    def test_missing_cut(self, query):
        assert query.get_cut("Year") is None


class TestMeasures:
    def test_add_measure(self, cube, query):
        query.add_measure("Value").add_measure("Quantity").add_measure("Value")
        assert query.measures == [cube.get_measure("Value"), cube.get_measure("Quantity")]

    def test_unknown_measure(self, query):
        with pytest.raises(NoSuchMeasureError):
            query.add_measure("Price")


class TestCaptionsAndProperties:
    def test_caption_replaces_previous(self, cube, query):
        query.add_caption("ES Name")
        query.add_caption("Country", "EN Name")
        assert query.captions == [cube.get_property("EN Name")]

    def test_captions_per_level(self, query):
        query.add_caption("ES Name").add_caption("Section Color")
        assert [prop.name for prop in query.captions] == ["ES Name", "Section Color"]

    def test_add_property(self, cube, query):
        query.add_property("ISO 3")
        query.add_property("Country", "ISO 3")
        query.add_property({"property": "ES Name", "level": "Country"})
        assert query.properties == [cube.get_property("ISO 3"), cube.get_property("ES Name")]
        assert all(isinstance(prop, Property) for prop in query.properties)

    def test_property_of_wrong_level(self, query):
        with pytest.raises(NoSuchPropertyError):
            query.add_property("Continent", "ISO 3")


class TestFilters:
    def test_add_filter(self, cube, query):
        query.add_filter("Value", (">", "100"), "and", ("lte", 1000.5))
        (item,) = query.filters
        assert item.measure is cube.get_measure("Value")
        assert item.constraint == (Comparison.GT, 100)
        assert item.joint == Joint.AND
        assert item.constraint2 == (Comparison.LTE, 1000.5)
        assert item.measure_name == "Value"
        assert len(item.constraints) == 2

    def test_single_constraint(self, query):
        query.add_filter("Quantity", ["eq", 3])
        assert query.filters[0].constraints == [(Comparison.EQ, 3)]

    def test_calculation_filter(self, query):
        query.add_filter("growth", ("gt", 0))
        assert query.filters[0].measure == Calculation.GROWTH
        assert query.filters[0].measure_name == "growth"

    def test_duplicate_filter(self, query):
        query.add_filter("Value", ("gt", 1)).add_filter("Value", (">", "1"))
        assert len(query.filters) == 1

    @pytest.mark.parametrize(
        "args",
        [
            (("gt", 1), "and", None),
            (("gt", 1), None, ("lt", 3)),
            (("gt", 1), "xor", ("lt", 3)),
            (("between", 1), None, None),
            (("gt", math.nan), None, None),
            (("gt", "many"), None, None),
            ("gt 1", None, None),
            (("gt",), None, None),
        ],
    )
    def test_invalid_filter(self, query, args):
        with pytest.raises(ArgumentError):
            query.add_filter("Value", *args)
        assert query.filters == []


class TestCalculations:
    def test_growth(self, cube, query):
        query.add_calculation("growth", category="Year", value="Value")
        (calculation,) = query.calculations
        assert isinstance(calculation, GrowthCalculation)
        assert calculation.category is cube.get_level("Year")
        assert calculation.value is cube.get_measure("Value")
        assert calculation.key == "growth:Year.Year.Year,Value"

    def test_calculations_are_deduplicated(self, query):
        query.add_calculation("growth", {"category": "Year", "value": "Value"})
        query.add_calculation("growth", {"kind": "growth"}, category="Year.Year.Year", value="Value")
        query.add_calculation("growth", category="Year", value="Quantity")
        assert len(query.calculations) == 2

    def test_rca(self, cube, query):
        query.add_calculation("rca", location="Country", category="HS4", value="Value")
        calculation = query.calculations[0]
        assert calculation.location is cube.get_level("Country")
        assert calculation.category is cube.get_level("HS4 2012")
        assert calculation.describe() == {
            "kind": "rca",
            "location": {"level": "Country", "hierarchy": "Geography", "dimension": "Geography"},
            "category": {"level": "HS4", "hierarchy": "HS 2012", "dimension": "Product"},
            "value": "Value",
        }

    def test_topk(self, query):
        query.add_calculation("topk", amount="10", category="Country", value="rca", order="asc")
        calculation = query.calculations[0]
        assert isinstance(calculation, TopkCalculation)
        assert calculation.amount == 10
        assert calculation.value == Calculation.RCA
        assert calculation.order == Direction.ASC

    def test_topk_invalid_amount(self, query):
        with pytest.raises(ArgumentError, match="amount"):
            query.add_calculation("topk", amount="ten", category="Country", value="Value")

    def test_missing_parameters(self, query):
        with pytest.raises(ArgumentError):
            query.add_calculation("rca", location="Country", value="Value")

    @pytest.mark.parametrize("kind", ["rate", "median", None])
    def test_unsupported_kind(self, query, kind):
        with pytest.raises(ArgumentError):
            query.add_calculation(kind, category="Year", value="Value")

    def test_unknown_operand(self, query):
        with pytest.raises(NoSuchLevelError):
            query.add_calculation("growth", category="Decade", value="Value")
        assert query.calculations == []


class TestSettings:
    def test_defaults(self, query):
        assert query.format == Format.JSONRECORDS
        assert query.locale == ""
        assert not query.pagination
        assert not query.sorting
        assert not query.time
        assert query.options == {}

    def test_format_and_locale(self, query):
        query.set_format("csv").set_locale("es")
        assert query.format == Format.CSV
        assert query.locale == "es"
        query.set_locale(None)
        assert query.locale == ""
        with pytest.raises(ArgumentError):
            query.set_format("pdf")

    def test_options(self, query):
        query.set_option("parents", "true").set_option("debug", "false")
        query.set_option("sparse", 1)
        assert query.options == {"parents": True, "debug": False, "sparse": True}
        query.set_option("parents", None)
        assert "parents" not in query.options
        with pytest.raises(ArgumentError):
            query.set_option("", True)

    @pytest.mark.parametrize(
        "limit,offset,expected",
        [
            (10, 20, Pagination(10, 20)),
            ("10", "5", Pagination(10, 5)),
            (10, -3, Pagination(10, 0)),
            (10, None, Pagination(10, 0)),
            (0, 5, Pagination(0, 0)),
            (-5, 3, Pagination(0, 0)),
            (None, 3, Pagination(0, 0)),
        ],
    )
    def test_pagination(self, query, limit, offset, expected):
        query.set_pagination(limit, offset)
        assert query.pagination == expected

    def test_sorting(self, cube, query):
        query.set_sorting("Value")
        assert query.sorting.target is cube.get_measure("Value")
        assert query.sorting.direction == Direction.DESC

        query.set_sorting("growth", "asc")
        assert query.sorting.target == Calculation.GROWTH

        query.set_sorting("ISO 3", False)
        assert query.sorting.target is cube.get_property("ISO 3")
        assert query.sorting.direction == Direction.ASC
        assert query.sorting.target_name == "ISO 3"

        query.set_sorting({"property": "Section Color", "level": "Section"}, "desc")
        assert query.sorting.target is cube.get_property("Section Color")

        query.set_sorting(cube.get_measure("Share"))
        assert isinstance(query.sorting.target, Measure)

        query.set_sorting(None)
        assert not query.sorting
        assert query.sorting.direction is None

    def test_invalid_sorting(self, query):
        with pytest.raises(NoSuchPropertyError):
            query.set_sorting("Price")
        with pytest.raises(ArgumentError):
            query.set_sorting(12)

    def test_time(self, query):
        query.set_time("year", "latest")
        assert query.time.precision == TimePrecision.YEAR
        assert query.time.value == TimeValue.LATEST
        assert query.time.wire_value == "latest"

        query.set_time("month", "3")
        assert query.time.value == 3

        query.set_time("month", None)
        assert not query.time

        with pytest.raises(ArgumentError):
            query.set_time("decade", "latest")


def test_failed_calls_leave_query_unchanged(query):
    query.add_drilldown("Year").add_measure("Value").set_pagination(10)
    before = query.to_json()

    for call in (
        lambda: query.add_drilldown("Town"),
        lambda: query.add_cut("Town", ["x"]),
        lambda: query.add_filter("Value", ("gt", "x")),
        lambda: query.add_caption("Continent", "ISO 3"),
        lambda: query.set_sorting("Price"),
    ):
        with pytest.raises((ArgumentError, NoSuchLevelError, NoSuchPropertyError)):
            call()

    assert query.to_json() == before


def test_queries_are_independent(cube):
    first = cube.query.add_drilldown("Year")
    second = cube.query
    assert second.drilldowns == []
    assert len(first.drilldowns) == 1
