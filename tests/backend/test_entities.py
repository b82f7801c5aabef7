import pytest
from shipchat.models.enums import DimensionUnit, EntityType, PackageType, PriorityLevel, WeightUnit
from shipchat.nlu.entities import (
    extract_boolean,
    extract_dimensions,
    extract_email,
    extract_package_type,
    extract_phone,
    extract_priority,
    extract_weight,
    run_extractors,
)

class TestDimensionExtraction:

    @pytest.mark.parametrize("text, expected", [
        ("10 x 5 x 3 cm", (10.0, 5.0, 3.0, DimensionUnit.CM)),
        ("12X8X6 inches", (12.0, 8.0, 6.0, DimensionUnit.INCH)),
        ("2×1×0.5 m", (2.0, 1.0, 0.5, DimensionUnit.M)),
        ("it is 30 x 20 x 10 centimeters", (30.0, 20.0, 10.0, DimensionUnit.CM)),
        ("1,200 x 800 x 600 cm", (1200.0, 800.0, 600.0, DimensionUnit.CM)),
    ])
    def test_primary_pattern(self, text, expected):
        dims = extract_dimensions(text)
        assert (dims["length"], dims["width"], dims["height"], dims["unit"]) == expected

    def test_labelled_fallback_with_unit(self):
        dims = extract_dimensions("length: 10, width: 5, height: 3 inches")
        assert dims == {"length": 10.0, "width": 5.0, "height": 3.0, "unit": DimensionUnit.INCH}

    def test_labelled_fallback_defaults_to_cm(self):
        dims = extract_dimensions("length 10 width 5 height 3")
        assert dims["unit"] == DimensionUnit.CM

    def test_primary_wins_over_labels(self):
        dims = extract_dimensions("length 1 width 1 height 1, actually 10 x 5 x 3 cm")
        assert dims["length"] == 10.0

    @pytest.mark.parametrize("text", ["10 x 5 x 3", "ten by five", "length 10 width 5", "1,200 x 800 x 600 mm"])
    def test_no_match(self, text):
        assert extract_dimensions(text) is None


class TestWeightExtraction:

    @pytest.mark.parametrize("text, value, unit", [
        ("5 kg", 5.0, WeightUnit.KG),
        ("it weighs 5kg", 5.0, WeightUnit.KG),
        ("7 kgs", 7.0, WeightUnit.KG),
        ("10 lbs", 10.0, WeightUnit.LBS),
        ("5 pounds", 5.0, WeightUnit.LBS),
        ("500 g", 500.0, WeightUnit.G),
        ("2.5 grams", 2.5, WeightUnit.G),
        ("3 ounces", 3.0, WeightUnit.OZ),
        ("2,500 g", 2500.0, WeightUnit.G),
        ("1,000 kg", 1000.0, WeightUnit.KG),
        ("1,250.5 lbs", 1250.5, WeightUnit.LBS),
    ])
    def test_units(self, text, value, unit):
        assert extract_weight(text) == {"value": value, "unit": unit}

    @pytest.mark.parametrize("text", ["heavy", "5", "5 kilometres", "10,5 kg"])
    def test_no_match(self, text):
        assert extract_weight(text) is None


class TestKeywordExtraction:

    @pytest.mark.parametrize("text, expected", [
        ("small box", PackageType.BOX),
        ("large envelope", PackageType.ENVELOPE),
        ("a wooden crate", PackageType.CRATE),
        ("PALLET", PackageType.PALLET),
        ("poster tube", PackageType.TUBE),
        ("Canada", None),
    ])
    def test_package_type(self, text, expected):
        assert extract_package_type(text) == expected

    @pytest.mark.parametrize("text, expected", [
        ("next day please", PriorityLevel.OVERNIGHT),
        ("overnight", PriorityLevel.OVERNIGHT),
        ("same day", PriorityLevel.SAME_DAY),
        ("make it fast", PriorityLevel.EXPRESS),
        ("regular", PriorityLevel.STANDARD),
        ("whenever", None),
    ])
    def test_priority(self, text, expected):
        assert extract_priority(text) == expected

    @pytest.mark.parametrize("text, expected", [
        ("yes", True),
        ("Y", True),
        ("sure.", True),
        ("nope", False),
        ("false", False),
        ("maybe", None),
        ("yes I think so", None),
    ])
    def test_boolean_is_whole_utterance(self, text, expected):
        assert extract_boolean(text) == expected


class TestContactExtraction:

    def test_email(self):
        assert extract_email("contact me at jane.doe@example.com please") == "jane.doe@example.com"
        assert extract_email("no email here") is None

    @pytest.mark.parametrize("text, expected", [
        ("+1 (555) 123-4567", "+1 (555) 123-4567"),
        ("call 555-123-4567 now", "555-123-4567"),
        ("12345", None),
    ])
    def test_phone(self, text, expected):
        assert extract_phone(text) == expected


class TestRunExtractors:

    def test_all_entities_in_one_utterance(self):
        hits = run_extractors("small box 10 x 5 x 3 cm 5 kg")
        types = [hit["type"] for hit in hits]
        assert types == [EntityType.PACKAGE_TYPE, EntityType.DIMENSION, EntityType.WEIGHT]

    def test_confidence_and_span(self):
        hits = run_extractors("5 kg")
        assert hits == [{
            "type": EntityType.WEIGHT,
            "value": {"value": 5.0, "unit": WeightUnit.KG},
            "confidence": 0.85,
            "raw_span": "5 kg",
        }]

    def test_nothing_found(self):
        assert run_extractors("hello there") == []
