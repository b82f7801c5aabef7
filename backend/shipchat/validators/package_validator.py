"""
Field and record validation for shipment intake.

Hard failures come back as ``is_valid=False`` with errors; soft problems come
back as warnings on a valid result. Nothing here raises for bad user input.
"""
import re
from typing import Any, Dict, List, Pattern, Set, Tuple, Union

from pydantic import BaseModel, ValidationError

from shipchat.models.dialogue import ValidationResult
from shipchat.models.enums import DimensionUnit, PackageType, PriorityLevel
from shipchat.models.records import (
    Address,
    Dimensions,
    InProgressRecord,
    MonetaryValue,
    SenderInfo,
    ShipmentRecord,
    Weight,
)
from shipchat.utils.logger import get_logger

logger = get_logger(__name__)

MAX_INSTRUCTIONS_LENGTH = 500

# (country aliases, postal code pattern, warning)
POSTAL_CODE_FORMATS: List[Tuple[Set[str], Pattern, str]] = [
    (
        {"usa", "us", "united states", "united states of america"},
        re.compile(r"^\d{5}(-\d{4})?$"),
        "US postal code format should be XXXXX or XXXXX-XXXX",
    ),
    (
        {"canada"},
        re.compile(r"^[A-Za-z]\d[A-Za-z] ?\d[A-Za-z]\d$"),
        "Canadian postal code format should be A1A 1A1",
    ),
    (
        {"uk", "united kingdom", "great britain", "england"},
        re.compile(r"^[A-Za-z]{1,2}\d[A-Za-z\d]? ?\d[A-Za-z]{2}$"),
        "UK postcode format should look like SW1A 1AA",
    ),
    (
        {"germany", "deutschland"},
        re.compile(r"^\d{5}$"),
        "German postal code format should be 5 digits",
    ),
    (
        {"india"},
        re.compile(r"^\d{6}$"),
        "Indian PIN code format should be 6 digits",
    ),
]

ModelInput = Union[Dict[str, Any], BaseModel]


def _format_errors(error: ValidationError) -> List[str]:
    messages = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ()))
        messages.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return messages


def _check_model(model: type, value: ModelInput, result: ValidationResult):
    """Parse value into model, recording any schema errors on result."""
    try:
        return model.model_validate(value)
    except ValidationError as e:
        result.is_valid = False
        result.errors.extend(_format_errors(e))
        return None


class PackageValidator:
    """Validator for shipment record fields"""

    def validate_dimensions(self, dimensions: ModelInput) -> ValidationResult:
        result = ValidationResult()

        dims = _check_model(Dimensions, dimensions, result)
        if dims is None:
            result.suggestions.append(
                "Please provide length, width, and height as positive numbers with a unit (cm, inch, or m)"
            )
            return result

        if dims.unit == DimensionUnit.CM:
            sides = (dims.length, dims.width, dims.height)
            if any(side > 500 for side in sides):
                result.warnings.append("Dimensions seem unusually large for cm. Did you mean meters?")
            if any(side < 1 for side in sides):
                result.warnings.append("Dimensions seem very small. Are you sure about the values?")
            if dims.volume() > 1000000:
                result.warnings.append(
                    "This is a very large package. Consider using pallet or crate packaging."
                )

        return result

    def validate_weight(self, weight: ModelInput) -> ValidationResult:
        result = ValidationResult()

        w = _check_model(Weight, weight, result)
        if w is None:
            result.suggestions.append(
                "Please provide weight as a positive number with a unit (kg, lbs, g, or oz)"
            )
            return result

        weight_in_kg = w.in_kg()
        if weight_in_kg > 1000:
            result.warnings.append("This is a very heavy package (>1000kg). Ensure proper handling.")
        if weight_in_kg < 0.01:
            result.warnings.append("Weight seems very light. Please verify.")

        return result

    def validate_address(self, address: ModelInput) -> ValidationResult:
        result = ValidationResult()

        addr = _check_model(Address, address, result)
        if addr is None:
            result.suggestions.append(
                "Please provide complete address: street, city, state, postal code, and country"
            )
            return result

        country = addr.country.strip().lower().rstrip(".")
        for aliases, pattern, warning in POSTAL_CODE_FORMATS:
            if country in aliases and not pattern.match(addr.postal_code.strip()):
                result.warnings.append(warning)

        return result

    def validate_sender_info(self, sender: ModelInput) -> ValidationResult:
        result = ValidationResult()

        s = _check_model(SenderInfo, sender, result)
        if s is None:
            result.suggestions.append(
                'Please provide a sender name, optionally followed by email and phone (e.g. "Jane Smith, jane@email.com")'
            )
            return result

        if not s.email and not s.phone:
            result.warnings.append("No contact information provided. Consider adding email or phone.")

        return result

    def validate_package_type(self, package_type: Any) -> ValidationResult:
        result = ValidationResult()

        raw = package_type.value if isinstance(package_type, PackageType) else str(package_type)
        valid_types = [t.value for t in PackageType]

        if raw.lower().strip() not in valid_types:
            result.fail(f"Invalid package type: {raw}")
            result.suggestions.append(f"Valid types: {', '.join(valid_types)}")

        return result

    def validate_priority(self, priority: Any) -> ValidationResult:
        result = ValidationResult()

        raw = priority.value if isinstance(priority, PriorityLevel) else str(priority)
        normalized = re.sub(r"[_\s-]+", "_", raw.lower().strip())
        valid_priorities = [p.value for p in PriorityLevel]

        if normalized not in valid_priorities:
            result.fail(f"Invalid priority: {raw}")
            result.suggestions.append(f"Valid priorities: {', '.join(valid_priorities)}")

        return result

    def validate_value(self, value: ModelInput) -> ValidationResult:
        result = ValidationResult()

        if _check_model(MonetaryValue, value, result) is None:
            result.suggestions.append('Please enter a number between 0 and 1,000,000 (e.g. "100", "$250.50")')

        return result

    def validate_special_instructions(self, instructions: str) -> ValidationResult:
        result = ValidationResult()

        text = (instructions or "").strip()
        if not text:
            result.fail("Special instructions cannot be empty")
        elif len(text) > MAX_INSTRUCTIONS_LENGTH:
            result.fail(
                f"Special instructions must be at most {MAX_INSTRUCTIONS_LENGTH} characters "
                f"(got {len(text)})"
            )

        return result

    def cross_validate(self, record: Union[InProgressRecord, ShipmentRecord]) -> ValidationResult:
        """Checks that only make sense once several fields are known together."""
        result = ValidationResult()

        value = record.estimated_value.amount if record.estimated_value else None
        insured = bool(record.insurance_required)

        if record.is_fragile and not insured and value is not None and value > 100:
            result.warnings.append("Fragile items with high value should consider insurance")
            result.suggestions.append("Would you like to add insurance for this fragile package?")

        if record.dimensions and record.weight:
            volume = record.dimensions.volume_cubic_meters()
            if volume > 0:
                density = record.weight.in_kg() / volume  # kg/m³
                if density > 1000:
                    result.warnings.append("Package seems very dense. Please verify dimensions and weight.")
                if density < 1:
                    result.warnings.append("Package seems very light for its size. Please verify.")

        if value is not None and value > 500 and not insured:
            result.warnings.append("High-value packages typically require insurance")
            result.suggestions.append("Consider adding insurance for packages valued over $500")

        if record.priority == PriorityLevel.STANDARD and value is not None and value > 1000:
            result.warnings.append(
                "High-value packages might benefit from express shipping for faster delivery"
            )

        return result

    def validate_record(self, record: InProgressRecord) -> ValidationResult:
        """Full schema check of a record about to be committed, plus cross-field checks."""
        result = ValidationResult()

        missing = record.missing_required_fields()
        if missing:
            for field in missing:
                result.fail(f"Missing required field: {field.value}")
            return result

        try:
            record.to_shipment()
        except ValidationError as e:
            result.is_valid = False
            result.errors.extend(_format_errors(e))
            logger.warning(f"⚠️ VALIDATOR: Record {record.id} failed schema check: {result.errors}")
            return result

        cross = self.cross_validate(record)
        result.warnings.extend(cross.warnings)
        result.suggestions.extend(cross.suggestions)
        return result


package_validator = PackageValidator()
