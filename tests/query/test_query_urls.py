import pytest

from olapclient.errors import ArgumentError
from olapclient.query import apply_parse_url_rules, match_cube_name_from_url, params_from_url


def test_params_from_url():
    params = params_from_url(
        "https://api.example.com/cubes/trade/aggregate?drilldown=Year&drilldown=Country"
        "&measures=Value&empty="
    )
    assert params == {"drilldown": ["Year", "Country"], "measures": "Value"}


def test_params_from_query_string():
    assert params_from_url("limit=10%2C0&sort=Value.desc") == {
        "limit": "10,0",
        "sort": "Value.desc",
    }


class TestParseRules:
    def setup_method(self):
        self.params = {"drilldown": "Year", "measures": "Value", "limit": "10"}

    def test_no_rules(self):
        assert apply_parse_url_rules(self.params) == self.params

    def test_include(self):
        assert apply_parse_url_rules(self.params, include=["measures", "limit"]) == {
            "measures": "Value",
            "limit": "10",
        }

    def test_exclude(self):
        assert apply_parse_url_rules(self.params, exclude=["limit"]) == {
            "drilldown": "Year",
            "measures": "Value",
        }

    def test_include_and_exclude(self):
        result = apply_parse_url_rules(
            self.params, include=["measures", "limit"], exclude=["limit"]
        )
        assert result == {"measures": "Value"}

    def test_filter(self):
        result = apply_parse_url_rules(self.params, filter=lambda key, value: key != "drilldown")
        assert list(result) == ["measures", "limit"]

    def test_filter_ignored_with_include(self):
        result = apply_parse_url_rules(
            self.params, include=["drilldown"], filter=lambda key, value: False
        )
        assert result == {"drilldown": "Year"}


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://api.example.com/cubes/trade/aggregate?drilldown=Year", "trade"),
        ("https://api.example.com/cubes/trade%20flows/aggregate.jsonrecords", "trade flows"),
        ("https://api.example.com/data?cube=trade&drilldowns=Year", "trade"),
        ("https://api.example.com/data?cube=world+trade&measures=Value", "world trade"),
    ],
)
def test_match_cube_name(url, expected):
    assert match_cube_name_from_url(url) == expected


def test_match_cube_name_failure():
    with pytest.raises(ArgumentError):
        match_cube_name_from_url("https://api.example.com/data?drilldowns=Year")
