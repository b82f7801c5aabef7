import pytest
from shipchat.models.enums import DimensionUnit, RecordField, WeightUnit
from shipchat.nlu.processor import process
from shipchat.orchestrator.parsing import (
    parse_address,
    parse_dimensions,
    parse_edit_target,
    parse_package_number,
    parse_package_type,
    parse_priority,
    parse_sender,
    parse_template_name,
    parse_tracking_preferences,
    parse_value,
    parse_weight,
    parse_yes_no,
    wants_to_leave_editing,
)

EXPECTED_US = {
    "street": "123 Main St",
    "city": "Springfield",
    "state": "IL",
    "postal_code": "62704",
    "country": "USA",
}

class TestAddressParsing:

    @pytest.mark.parametrize("text", [
        "123 Main St, Springfield, IL, 62704, USA",
        "123 Main St, Springfield, IL 62704, USA",
        "123 Main St, Springfield IL, 62704, USA",
        "123 Main St, Springfield IL 62704, USA",
        "123 Main St\nSpringfield, IL\n62704\nUSA",
        "123 Main St\nSpringfield, IL 62704\nUSA",
        "123 Main St\nSpringfield, IL\n62704 USA",
    ])
    def test_accepted_shapes(self, text):
        assert parse_address(text) == EXPECTED_US

    def test_street_with_commas(self):
        parsed = parse_address("Unit 4, 123 Main St, Springfield, IL, 62704, USA")
        assert parsed["street"] == "Unit 4, 123 Main St"
        assert parsed["city"] == "Springfield"

    def test_uk_postcode_kept_whole(self):
        parsed = parse_address("10 Downing St\nLondon, Greater London\nSW1A 2AA\nUK")
        assert parsed["state"] == "Greater London"
        assert parsed["postal_code"] == "SW1A 2AA"
        assert parsed["country"] == "UK"

    @pytest.mark.parametrize("text", ["Springfield", "123 Main St, Springfield", "somewhere\nover there"])
    def test_unrecognized(self, text):
        assert parse_address(text) is None


class TestSenderParsing:

    def test_name_email_phone(self):
        text = "Jane Smith, jane@email.com, +1 (555) 123-4567"
        assert parse_sender(text, process(text)) == {
            "name": "Jane Smith",
            "email": "jane@email.com",
            "phone": "+1 (555) 123-4567",
        }

    def test_name_only(self):
        assert parse_sender("John Doe", process("John Doe")) == {"name": "John Doe"}

    def test_multiline(self):
        text = "Jane Smith\njane@email.com"
        assert parse_sender(text, process(text))["name"] == "Jane Smith"

    def test_contact_without_name(self):
        text = "email: jane@email.com"
        assert parse_sender(text, process(text)) is None


class TestValueParsing:

    @pytest.mark.parametrize("text, amount, currency", [
        ("100", 100.0, "USD"),
        ("$250.50", 250.5, "USD"),
        ("1,200", 1200.0, "USD"),
        ("€80", 80.0, "EUR"),
        ("£15", 15.0, "GBP"),
        ("about 300 CAD", 300.0, "CAD"),
    ])
    def test_amounts(self, text, amount, currency):
        assert parse_value(text, "USD") == {"amount": amount, "currency": currency}

    def test_default_currency(self):
        assert parse_value("75", "INR")["currency"] == "INR"

    def test_negative_passes_through_for_validation(self):
        assert parse_value("-5", "USD")["amount"] == -5.0

    def test_no_number(self):
        assert parse_value("priceless", "USD") is None


class TestLooseFieldParsing:

    def test_dimensions_by_without_unit(self):
        dims, warnings = parse_dimensions("10 by 5 by 3", DimensionUnit.CM)
        assert dims == {"length": 10.0, "width": 5.0, "height": 3.0, "unit": DimensionUnit.CM}
        assert warnings == ["No unit given, assuming cm."]

    def test_dimensions_with_unit(self):
        dims, warnings = parse_dimensions("10 by 5 by 3 inches", DimensionUnit.CM)
        assert dims["unit"] == DimensionUnit.INCH
        assert warnings == []

    def test_dimensions_miss(self):
        assert parse_dimensions("big", DimensionUnit.CM) == (None, [])

    @pytest.mark.parametrize("text", ["300 x 200 x 100 mm", "10 by 5 by 3 ft", "1,200 x 800 x 600mm"])
    def test_dimensions_unknown_unit_is_a_miss(self, text):
        assert parse_dimensions(text, DimensionUnit.CM) == (None, [])

    def test_dimensions_with_thousands_separator(self):
        dims, warnings = parse_dimensions("1,200 by 800 by 600.", DimensionUnit.CM)
        assert dims == {"length": 1200.0, "width": 800.0, "height": 600.0, "unit": DimensionUnit.CM}
        assert warnings == ["No unit given, assuming cm."]

    def test_bare_weight_with_thousands_separator(self):
        weight, _ = parse_weight("1,500", WeightUnit.G)
        assert weight == {"value": 1500.0, "unit": WeightUnit.G}

    def test_bare_weight_uses_default_unit(self):
        weight, warnings = parse_weight("12", WeightUnit.LBS)
        assert weight == {"value": 12.0, "unit": WeightUnit.LBS}
        assert warnings == ["No unit given, assuming lbs."]

    def test_weight_miss(self):
        assert parse_weight("heavy", WeightUnit.KG) == (None, [])

    @pytest.mark.parametrize("text, expected", [
        ("carton", "box"),
        ("a letter", "envelope"),
        ("bag", "bag"),
        ("a big thing", None),
    ])
    def test_package_type_fallback(self, text, expected):
        assert parse_package_type(text) == expected

    @pytest.mark.parametrize("text, expected", [
        ("same-day", "same_day"),
        ("rush", "express"),
        ("economy", "standard"),
        ("rocket", "rocket"),
        ("as soon as possible please", None),
    ])
    def test_priority_fallback(self, text, expected):
        assert parse_priority(text) == expected


class TestYesNo:

    @pytest.mark.parametrize("text, expected", [
        ("yes", True),
        ("yes it is", True),
        ("no, it's sturdy", False),
        ("not fragile", False),
        ("it's fragile", True),
        ("hmm", None),
    ])
    def test_fragile(self, text, expected):
        assert parse_yes_no(text, process(text), keyword="fragile") == expected

    def test_without_nlu(self):
        assert parse_yes_no("Absolutely") is True


class TestTrackingParsing:

    def test_email_and_sms(self):
        assert parse_tracking_preferences("email and SMS") == {
            "email_notifications": True,
            "sms_notifications": True,
            "signature_required": False,
        }

    def test_all(self):
        assert all(parse_tracking_preferences("all of them").values())

    def test_nothing(self):
        assert not any(parse_tracking_preferences("whatever").values())


class TestEditingHelpers:

    @pytest.mark.parametrize("text, expected", [
        ("change weight", RecordField.WEIGHT),
        ("the size is wrong", RecordField.DIMENSIONS),
        ("edit sender address", RecordField.SENDER),
        ("edit destination", RecordField.DESTINATION),
        ("package type", RecordField.PACKAGE_TYPE),
        ("insurance", RecordField.INSURANCE_REQUIRED),
        ("something else", None),
    ])
    def test_edit_target(self, text, expected):
        assert parse_edit_target(text) == expected

    @pytest.mark.parametrize("text, expected", [
        ("back", True),
        ("never mind", True),
        ("no", True),
        ("weight", False),
    ])
    def test_leave_editing(self, text, expected):
        assert wants_to_leave_editing(text) is expected

    def test_template_name(self):
        assert parse_template_name("save as template Weekly") == "weekly"
        assert parse_template_name("use template called 'fragile-stuff'") == "fragile-stuff"
        assert parse_template_name("save as template") is None

    def test_package_number(self):
        assert parse_package_number("delete package 2") == 2
        assert parse_package_number("delete it") is None
