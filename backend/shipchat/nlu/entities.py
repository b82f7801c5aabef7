"""
Entity extractors.

Every extractor is a pure function ``(text) -> value | None``. The ``_find_*``
variants also return the span of text that produced the value, which the NLU
facade keeps for diagnostics.
"""
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from shipchat.models.enums import (
    DimensionUnit,
    EntityType,
    PackageType,
    PriorityLevel,
    WeightUnit,
)

Found = Optional[Tuple[Any, str]]

# Commas only as thousands separators; a match never begins inside another number.
NUMBER = r"(?<![\d,.])(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)"
DIMENSION_UNIT = r"(centimeters?|centimetres?|cm|inches|inch|in|meters?|metres?|m)"
WEIGHT_UNIT = r"(kilograms?|kgs?|grams?|g|pounds?|lbs?|ounces?|oz)"

DIMENSIONS_PATTERN = re.compile(
    rf"{NUMBER}\s*[x×*]\s*{NUMBER}\s*[x×*]\s*{NUMBER}\s*{DIMENSION_UNIT}\b",
    re.IGNORECASE,
)
LENGTH_PATTERN = re.compile(rf"\blength\s*:?\s*{NUMBER}", re.IGNORECASE)
WIDTH_PATTERN = re.compile(rf"\bwidth\s*:?\s*{NUMBER}", re.IGNORECASE)
HEIGHT_PATTERN = re.compile(rf"\bheight\s*:?\s*{NUMBER}", re.IGNORECASE)
# A unit written right after a number wins over a free-standing unit word.
UNIT_AFTER_NUMBER_PATTERN = re.compile(rf"\d\s*{DIMENSION_UNIT}\b", re.IGNORECASE)
STANDALONE_UNIT_PATTERN = re.compile(
    r"\b(centimeters?|centimetres?|cm|inches|inch|meters?|metres?|m)\b",
    re.IGNORECASE,
)

WEIGHT_PATTERN = re.compile(rf"{NUMBER}\s*{WEIGHT_UNIT}\b", re.IGNORECASE)

EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
PHONE_PATTERN = re.compile(r"\+?\(?\d[\d\s().-]{8,}\d")

PACKAGE_KEYWORDS: List[Tuple[str, PackageType]] = [
    ("box", PackageType.BOX),
    ("envelope", PackageType.ENVELOPE),
    ("crate", PackageType.CRATE),
    ("pallet", PackageType.PALLET),
    ("tube", PackageType.TUBE),
]

# Overnight and same-day go first so "next day" never falls through to a
# looser keyword further down.
PRIORITY_KEYWORDS: List[Tuple[List[str], PriorityLevel]] = [
    (["overnight", "next day"], PriorityLevel.OVERNIGHT),
    (["same day"], PriorityLevel.SAME_DAY),
    (["express", "fast", "quick"], PriorityLevel.EXPRESS),
    (["standard", "regular", "normal"], PriorityLevel.STANDARD),
]

TRUE_WORDS = {"yes", "y", "true", "yeah", "yep", "sure", "ok"}
FALSE_WORDS = {"no", "n", "false", "nope", "nah"}


def to_number(raw: str) -> float:
    return float(raw.replace(",", ""))


def normalize_dimension_unit(token: str) -> DimensionUnit:
    lower = token.lower()
    if lower.startswith("in"):
        return DimensionUnit.INCH
    if lower.startswith("c"):
        return DimensionUnit.CM
    return DimensionUnit.M


def normalize_weight_unit(token: str) -> WeightUnit:
    lower = token.lower()
    if lower.startswith("k"):
        return WeightUnit.KG
    if lower.startswith("lb") or lower.startswith("pound"):
        return WeightUnit.LBS
    if lower.startswith("oz") or lower.startswith("ounce"):
        return WeightUnit.OZ
    return WeightUnit.G


def _find_package_type(text: str) -> Found:
    lower = text.lower()
    for keyword, package_type in PACKAGE_KEYWORDS:
        if keyword in lower:
            return package_type, keyword
    return None


def _find_priority(text: str) -> Found:
    lower = text.lower()
    for keywords, priority in PRIORITY_KEYWORDS:
        for keyword in keywords:
            if keyword in lower:
                return priority, keyword
    return None


def _find_dimensions(text: str) -> Found:
    match = DIMENSIONS_PATTERN.search(text)
    if match:
        return {
            "length": to_number(match.group(1)),
            "width": to_number(match.group(2)),
            "height": to_number(match.group(3)),
            "unit": normalize_dimension_unit(match.group(4)),
        }, match.group(0)

    length = LENGTH_PATTERN.search(text)
    width = WIDTH_PATTERN.search(text)
    height = HEIGHT_PATTERN.search(text)
    if not (length and width and height):
        return None

    unit_match = UNIT_AFTER_NUMBER_PATTERN.search(text) or STANDALONE_UNIT_PATTERN.search(text)
    unit = normalize_dimension_unit(unit_match.group(1)) if unit_match else DimensionUnit.CM
    start = min(length.start(), width.start(), height.start())
    end = max(length.end(), width.end(), height.end())
    return {
        "length": to_number(length.group(1)),
        "width": to_number(width.group(1)),
        "height": to_number(height.group(1)),
        "unit": unit,
    }, text[start:end]


def _find_weight(text: str) -> Found:
    match = WEIGHT_PATTERN.search(text)
    if not match:
        return None
    return {
        "value": to_number(match.group(1)),
        "unit": normalize_weight_unit(match.group(2)),
    }, match.group(0)


def _find_boolean(text: str) -> Found:
    token = text.lower().strip().rstrip(".!")
    if token in TRUE_WORDS:
        return True, token
    if token in FALSE_WORDS:
        return False, token
    return None


def _find_email(text: str) -> Found:
    match = EMAIL_PATTERN.search(text)
    return (match.group(0), match.group(0)) if match else None


def _find_phone(text: str) -> Found:
    match = PHONE_PATTERN.search(text)
    if not match:
        return None
    phone = match.group(0).strip()
    return phone, phone


def _value_only(finder: Callable[[str], Found]) -> Callable[[str], Any]:
    def extract(text: str) -> Any:
        found = finder(text)
        return found[0] if found else None
    extract.__name__ = finder.__name__.replace("_find_", "extract_")
    extract.__doc__ = finder.__doc__
    return extract


extract_package_type = _value_only(_find_package_type)
extract_priority = _value_only(_find_priority)
extract_dimensions = _value_only(_find_dimensions)
extract_weight = _value_only(_find_weight)
extract_boolean = _value_only(_find_boolean)
extract_email = _value_only(_find_email)
extract_phone = _value_only(_find_phone)


# (entity type, finder, diagnostic confidence) in output order
ENTITY_EXTRACTORS: List[Tuple[EntityType, Callable[[str], Found], float]] = [
    (EntityType.PACKAGE_TYPE, _find_package_type, 0.9),
    (EntityType.PRIORITY, _find_priority, 0.9),
    (EntityType.DIMENSION, _find_dimensions, 0.85),
    (EntityType.WEIGHT, _find_weight, 0.85),
    (EntityType.BOOLEAN, _find_boolean, 0.95),
    (EntityType.EMAIL, _find_email, 0.9),
    (EntityType.PHONE, _find_phone, 0.8),
]


def run_extractors(text: str) -> List[Dict[str, Any]]:
    """Run every extractor once and return the hits as plain dicts."""
    hits = []
    for entity_type, finder, confidence in ENTITY_EXTRACTORS:
        found = finder(text)
        if found is None:
            continue
        value, span = found
        hits.append({
            "type": entity_type,
            "value": value,
            "confidence": confidence,
            "raw_span": span,
        })
    return hits
