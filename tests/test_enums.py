"""
Tests for the enumerations shared by the schema graph, queries and dialects.
"""

import pytest

from olapclient.enums import (
    AggregatorType,
    Calculation,
    Comparison,
    DimensionType,
    Direction,
    Format,
    Joint,
    TimePrecision,
    TimeValue,
)
from olapclient.errors import ArgumentError


@pytest.mark.parametrize(
    "value,expected",
    [
        ("sum", AggregatorType.SUM),
        ("SUM", AggregatorType.SUM),
        ({"name": "avg"}, AggregatorType.AVG),
        ("median", AggregatorType.UNKNOWN),
        (None, AggregatorType.UNKNOWN),
    ],
)
def test_aggregator_type_parse(value, expected):
    assert AggregatorType.parse(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        ("=", Comparison.EQ),
        ("==", Comparison.EQ),
        ("<>", Comparison.NEQ),
        ("!=", Comparison.NEQ),
        (">", Comparison.GT),
        (">=", Comparison.GTE),
        ("<", Comparison.LT),
        ("<=", Comparison.LTE),
        ("gte", Comparison.GTE),
        ("NEQ", Comparison.NEQ),
        (Comparison.LT, Comparison.LT),
    ],
)
def test_comparison_parse(value, expected):
    assert Comparison.parse(value) == expected


def test_comparison_parse_invalid():
    with pytest.raises(ArgumentError):
        Comparison.parse("between")


@pytest.mark.parametrize(
    "value,expected",
    [
        ("standard", DimensionType.STANDARD),
        ("std", DimensionType.STANDARD),
        ("time", DimensionType.TIME),
        ("geo", DimensionType.GEO),
        ("geographic", DimensionType.GEO),
        ("whatever", DimensionType.STANDARD),
        (None, DimensionType.STANDARD),
    ],
)
def test_dimension_type_parse(value, expected):
    assert DimensionType.parse(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (False, Direction.ASC),
        (True, Direction.DESC),
        (None, Direction.DESC),
        ("asc", Direction.ASC),
        ("DESC", Direction.DESC),
        ("sideways", Direction.DESC),
    ],
)
def test_direction_parse(value, expected):
    assert Direction.parse(value) == expected


def test_calculation_get():
    assert Calculation.get("growth") == Calculation.GROWTH
    assert Calculation.get("TopK") == Calculation.TOPK
    assert Calculation.get("Value") is None
    assert Calculation.get(None) is None


def test_strict_parsers():
    assert Format.parse("CSV") == Format.CSV
    assert Joint.parse("and") == Joint.AND
    assert TimePrecision.parse("Month") == TimePrecision.MONTH

    for parser, value in (
        (Format.parse, "pdf"),
        (Joint.parse, "xor"),
        (TimePrecision.parse, "decade"),
    ):
        with pytest.raises(ArgumentError):
            parser(value)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("latest", TimeValue.LATEST),
        ("Oldest", TimeValue.OLDEST),
        (3, 3),
        ("-2", -2),
        (4.0, 4),
    ],
)
def test_time_value_parse(value, expected):
    assert TimeValue.parse(value) == expected


@pytest.mark.parametrize("value", ["soon", True, 2.5, None])
def test_time_value_parse_invalid(value):
    with pytest.raises(ArgumentError):
        TimeValue.parse(value)


def test_members_are_strings():
    assert Format.JSONRECORDS == "jsonrecords"
    assert Direction.DESC.value == "desc"
