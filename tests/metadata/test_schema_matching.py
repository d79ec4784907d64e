import pytest

from olapclient.errors import ArgumentError, NoSuchLevelError, NoSuchPropertyError
from olapclient.metadata import LevelDescriptor, PropertyDescriptor
from olapclient.metadata.matching import describe_reference, suggestion_for


class TestLevelDescriptor:
    def test_from_string(self):
        descriptor = LevelDescriptor.from_format("Country")
        assert descriptor == LevelDescriptor(level="Country")
        assert descriptor.to_dict() == {"level": "Country"}

    def test_from_mapping(self):
        descriptor = LevelDescriptor.from_format(
            {"level": "Country", "dimension": "Geography", "extra": "ignored"}
        )
        assert descriptor.dimension == "Geography"
        assert descriptor.hierarchy is None

    @pytest.mark.parametrize("value", [None, "", 12, {"dimension": "Geography"}])
    def test_invalid(self, value):
        with pytest.raises(ArgumentError):
            LevelDescriptor.from_format(value)

    def test_skim(self):
        descriptor = LevelDescriptor("Year", "Year", "Year", "trade", "https://x")
        assert descriptor.to_dict(skim=True) == {
            "level": "Year",
            "hierarchy": "Year",
            "dimension": "Year",
        }


class TestPropertyDescriptor:
    def test_from_mapping(self):
        descriptor = PropertyDescriptor.from_format({"property": "ISO 3", "level": "Country"})
        assert descriptor.to_dict() == {"property": "ISO 3", "level": "Country"}

    def test_invalid_level(self):
        with pytest.raises(ArgumentError):
            PropertyDescriptor.from_format({"property": "ISO 3", "level": 2})


class TestLevelMatching:
    def test_by_name_unique_name_and_full_name(self, cube):
        hs4 = cube.get_level("HS4")
        assert cube.get_level("HS4 2012") is hs4
        assert cube.get_level("Product.HS 2012.HS4") is hs4
        assert cube.get_level(hs4) is hs4

    def test_descriptor_narrowing(self, cube):
        subregion = cube.get_level("Subregion")
        assert cube.get_level({"level": "Subregion", "hierarchy": "Region"}) is subregion
        assert cube.get_level({"level": "Region Subregion", "cube": "trade"}) is subregion

        with pytest.raises(NoSuchLevelError):
            cube.get_level({"level": "Subregion", "hierarchy": "Geography"})
        with pytest.raises(NoSuchLevelError):
            cube.get_level({"level": "Subregion", "cube": "exports"})
        with pytest.raises(NoSuchLevelError):
            cube.get_level({"level": "Subregion", "server": "https://other.example.com"})

    def test_level_does_not_match_property_descriptor(self, cube):
        country = cube.get_level("Country")
        assert not country.matches({"property": "ISO 3", "level": "Country"})

    def test_has_level(self, cube):
        assert cube.has_level("Continent")
        assert not cube.has_level("Town")
        assert not cube.has_level(None)


class TestPropertyMatching:
    def test_by_descriptor(self, cube):
        iso = cube.get_property("ISO 3")
        assert cube.get_property({"property": "ISO 3", "level": "Country"}) is iso
        assert cube.get_property(
            {"property": "ISO 3", "level": "Country", "dimension": "Geography"}
        ) is iso
        assert cube.get_property(PropertyDescriptor("ISO 3")) is iso

    def test_descriptor_narrowing(self, cube):
        with pytest.raises(NoSuchPropertyError):
            cube.get_property({"property": "ISO 3", "level": "Continent"})
        with pytest.raises(NoSuchPropertyError):
            cube.get_property({"property": "ISO 3", "dimension": "Product"})

    def test_suggestion(self, cube):
        with pytest.raises(NoSuchPropertyError) as excinfo:
            cube.get_property("ISO3")
        assert "Did you mean 'ISO 3'?" in str(excinfo.value)


def test_describe_reference(cube):
    assert describe_reference("Town") == "'Town'"
    assert describe_reference(cube.get_level("Year")) == "level 'Year'"
    assert describe_reference(LevelDescriptor("Town")) == "{'level': 'Town'}"


def test_suggestion_for_non_strings():
    assert suggestion_for({"level": "Town"}, ["Country"]) == ""
    assert suggestion_for("Town", []) == ""
