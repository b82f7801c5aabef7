"""
State-specific parsers used by the dialogue controller.

The generic entity extractors know nothing about which question was asked;
these helpers do, and serve as the fallback when the extractors come up empty.
"""
import re
from typing import Any, Dict, List, Optional, Tuple

from shipchat.models.dialogue import NLUResult
from shipchat.models.enums import (
    DimensionUnit,
    EntityType,
    PackageType,
    PriorityLevel,
    RecordField,
    WeightUnit,
)
from shipchat.nlu.entities import NUMBER, normalize_dimension_unit, to_number

# --- package type / priority -------------------------------------------------

PACKAGE_SYNONYMS: List[Tuple[str, PackageType]] = [
    ("carton", PackageType.BOX),
    ("parcel", PackageType.BOX),
    ("letter", PackageType.ENVELOPE),
    ("document", PackageType.ENVELOPE),
    ("mailer", PackageType.ENVELOPE),
    ("skid", PackageType.PALLET),
    ("cylinder", PackageType.TUBE),
    ("poster", PackageType.TUBE),
    ("other", PackageType.OTHER),
]

PRIORITY_SYNONYMS: List[Tuple[str, PriorityLevel]] = [
    ("next_day", PriorityLevel.OVERNIGHT),
    ("nextday", PriorityLevel.OVERNIGHT),
    ("same_day", PriorityLevel.SAME_DAY),
    ("sameday", PriorityLevel.SAME_DAY),
    ("priority", PriorityLevel.EXPRESS),
    ("rush", PriorityLevel.EXPRESS),
    ("urgent", PriorityLevel.EXPRESS),
    ("economy", PriorityLevel.STANDARD),
    ("ground", PriorityLevel.STANDARD),
]

SINGLE_WORD = re.compile(r"^[a-z_-]+$")


def parse_package_type(text: str) -> Optional[str]:
    """
    Fallback package type parse. A lone unknown word is returned as-is so the
    validator can reject it and list the accepted types.
    """
    lower = text.lower().strip()
    for keyword, package_type in PACKAGE_SYNONYMS:
        if re.search(rf"\b{keyword}s?\b", lower):
            return package_type.value
    if SINGLE_WORD.match(lower):
        return lower
    return None


def parse_priority(text: str) -> Optional[str]:
    """Fallback priority parse; lone unknown words go to the validator as-is."""
    lower = text.lower().strip()
    joined = re.sub(r"[\s-]+", "_", lower)
    for keyword, priority in PRIORITY_SYNONYMS:
        if keyword in joined:
            return priority.value
    if SINGLE_WORD.match(lower):
        return lower
    return None


# --- dimensions / weight -----------------------------------------------------

# Without a known unit the numbers must end the phrase; "mm" or "ft" is a miss.
LOOSE_DIMENSIONS_PATTERN = re.compile(
    rf"{NUMBER}\s*(?:x|×|\*|by)\s*{NUMBER}\s*(?:x|×|\*|by)\s*{NUMBER}"
    r"(?:\s*(centimeters?|centimetres?|cm|inches|inch|in|meters?|metres?|m)\b|(?!\d|[.,]\d|\s*[a-z]))",
    re.IGNORECASE,
)
BARE_NUMBER_PATTERN = re.compile(rf"^{NUMBER}$")


def parse_dimensions(text: str, default_unit: DimensionUnit) -> Tuple[Optional[Dict[str, Any]], List[str]]:
    """
    Accept "10 by 5 by 3" or "10x5x3" with the unit optional.

    Returns:
        (dimensions dict or None, warnings about assumed units)
    """
    match = LOOSE_DIMENSIONS_PATTERN.search(text)
    if not match:
        return None, []

    warnings = []
    if match.group(4):
        unit = normalize_dimension_unit(match.group(4))
    else:
        unit = DimensionUnit(default_unit)
        warnings.append(f"No unit given, assuming {unit.value}.")

    return {
        "length": to_number(match.group(1)),
        "width": to_number(match.group(2)),
        "height": to_number(match.group(3)),
        "unit": unit,
    }, warnings


def parse_weight(text: str, default_unit: WeightUnit) -> Tuple[Optional[Dict[str, Any]], List[str]]:
    """Accept a bare number as a weight in the session's default unit."""
    match = BARE_NUMBER_PATTERN.match(text.strip())
    if not match:
        return None, []
    unit = WeightUnit(default_unit)
    return {
        "value": to_number(match.group(1)),
        "unit": unit,
    }, [f"No unit given, assuming {unit.value}."]


# --- yes / no ----------------------------------------------------------------

YES_PREFIX = re.compile(r"^(yes|yeah|yep|yup|sure|ok|okay|y|definitely|absolutely|of course)\b", re.IGNORECASE)
NO_PREFIX = re.compile(r"^(no|nope|nah|n|not really|negative)\b", re.IGNORECASE)


def parse_yes_no(text: str, nlu: Optional[NLUResult] = None, keyword: Optional[str] = None) -> Optional[bool]:
    """
    Work out a yes/no answer from looser phrasing.

    Order: the boolean entity, then a leading yes/no word, then
    "not <keyword>" / "<keyword>" (e.g. "not fragile").
    """
    if nlu is not None and nlu.has(EntityType.BOOLEAN):
        return nlu.get(EntityType.BOOLEAN)

    lower = text.lower().strip()
    if NO_PREFIX.match(lower):
        return False
    if YES_PREFIX.match(lower):
        return True
    if keyword:
        if re.search(rf"\b(not|no|non)[\s-]+{keyword}", lower):
            return False
        if re.search(rf"\b{keyword}", lower):
            return True
    return None


# --- address -----------------------------------------------------------------

def _looks_like_postal(token: str) -> bool:
    return any(ch.isdigit() for ch in token)


def _split_state_postal(segment: str) -> Tuple[str, str]:
    """
    "IL 62704" -> ("IL", "62704"); "SW1A 1AA" style codes keep both tokens.
    A segment with no digits is all state.
    """
    tokens = segment.split()
    if not tokens:
        return "", ""
    postal_tokens: List[str] = []
    while tokens and _looks_like_postal(tokens[-1]):
        postal_tokens.insert(0, tokens.pop())
    return " ".join(tokens), " ".join(postal_tokens)


def _split_city_state(segment: str) -> Tuple[str, str]:
    """'Springfield IL' -> ('Springfield', 'IL'); the last word is the state."""
    tokens = segment.split()
    if len(tokens) < 2:
        return segment.strip(), ""
    return " ".join(tokens[:-1]), tokens[-1]


def _parse_multiline(lines: List[str]) -> Dict[str, str]:
    street = lines[0]
    city_line = lines[1]
    rest = lines[2:]

    if "," in city_line:
        city, state_part = [p.strip() for p in city_line.split(",", 1)]
        state, postal = _split_state_postal(state_part)
    else:
        city, state = _split_city_state(city_line)
        postal = ""

    if postal:
        country = rest[-1]
    elif len(rest) >= 2:
        postal = rest[0]
        country = rest[-1]
    else:
        tokens = rest[0].split()
        postal = tokens[0]
        country = " ".join(tokens[1:])

    return {
        "street": street,
        "city": city,
        "state": state,
        "postal_code": postal,
        "country": country,
    }


def _parse_single_line(parts: List[str]) -> Optional[Dict[str, str]]:
    # The last comma segment is always the country; work inward from there.
    country = parts[-1]

    if len(parts) >= 5:
        return {
            "street": ", ".join(parts[:-4]),
            "city": parts[-4],
            "state": parts[-3],
            "postal_code": parts[-2],
            "country": country,
        }

    if len(parts) == 4:
        street, second, third = parts[0], parts[1], parts[2]
        state, postal = _split_state_postal(third)
        if state:
            # street, city, "state postal", country
            return {
                "street": street,
                "city": second,
                "state": state,
                "postal_code": postal,
                "country": country,
            }
        # street, "city state", postal, country
        city, state = _split_city_state(second)
        return {
            "street": street,
            "city": city,
            "state": state,
            "postal_code": postal,
            "country": country,
        }

    if len(parts) == 3:
        # street, "city state [postal]", country
        city_state, postal = _split_state_postal(parts[1])
        city, state = _split_city_state(city_state)
        return {
            "street": parts[0],
            "city": city,
            "state": state,
            "postal_code": postal,
            "country": country,
        }

    return None


def parse_address(text: str) -> Optional[Dict[str, str]]:
    """
    Parse a destination address from one of the accepted shapes:

    - three or more lines: street / "city, state [postal]" / postal and country
    - one line, comma separated, five or more parts:
      street, city, state, postal, country
    - one line with four parts ("state postal" combined, or "city state"
      combined with a separate postal code) or three parts

    Returns None when the input matches none of them.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if len(lines) >= 3:
        return _parse_multiline(lines)

    if len(lines) == 1 and "," in lines[0]:
        parts = [p.strip() for p in lines[0].split(",") if p.strip()]
        if len(parts) >= 3:
            return _parse_single_line(parts)

    return None


# --- sender ------------------------------------------------------------------

def parse_sender(text: str, nlu: NLUResult) -> Optional[Dict[str, Any]]:
    """Name from the first segment that is not the email or phone."""
    email = nlu.get(EntityType.EMAIL)
    phone = nlu.get(EntityType.PHONE)

    segments = [s.strip() for s in re.split(r"[\n,;]", text) if s.strip()]
    name = None
    for segment in segments:
        cleaned = segment
        for contact in (email, phone):
            if contact:
                cleaned = cleaned.replace(contact, "")
        cleaned = re.sub(r"\b(email|e-mail|phone|tel|mobile)\s*:?", "", cleaned, flags=re.IGNORECASE)
        cleaned = cleaned.strip(" :-")
        if cleaned:
            name = cleaned
            break

    if not name:
        return None

    sender: Dict[str, Any] = {"name": name}
    if email:
        sender["email"] = email
    if phone:
        sender["phone"] = phone
    return sender


# --- value -------------------------------------------------------------------

CURRENCY_SYMBOLS = {"$": "USD", "€": "EUR", "£": "GBP", "¥": "JPY", "₹": "INR"}
CURRENCY_CODE_PATTERN = re.compile(r"\b(usd|eur|gbp|jpy|inr|cad|aud|chf|cny)\b", re.IGNORECASE)
AMOUNT_PATTERN = re.compile(r"-?\d[\d,]*(?:\.\d+)?|-?\.\d+")


def parse_value(text: str, default_currency: str) -> Optional[Dict[str, Any]]:
    """'$250.50' -> {'amount': 250.5, 'currency': 'USD'}; None without a number."""
    match = AMOUNT_PATTERN.search(text)
    if not match:
        return None
    amount = float(match.group(0).replace(",", ""))

    currency = default_currency
    code = CURRENCY_CODE_PATTERN.search(text)
    if code:
        currency = code.group(1).upper()
    else:
        for symbol, symbol_code in CURRENCY_SYMBOLS.items():
            if symbol in text:
                currency = symbol_code
                break

    return {"amount": amount, "currency": currency}


# --- tracking preferences ----------------------------------------------------

def parse_tracking_preferences(text: str) -> Dict[str, bool]:
    lower = text.lower()
    if re.search(r"\b(all|everything)\b", lower):
        return {
            "email_notifications": True,
            "sms_notifications": True,
            "signature_required": True,
        }
    return {
        "email_notifications": bool(re.search(r"\be-?mail", lower)),
        "sms_notifications": bool(re.search(r"\b(sms|text)", lower)),
        "signature_required": bool(re.search(r"\bsignature", lower)),
    }


# --- editing / misc ----------------------------------------------------------

# Checked in order; "sender address" must land on sender, not destination.
EDIT_FIELD_KEYWORDS: List[Tuple[List[str], RecordField]] = [
    (["weight"], RecordField.WEIGHT),
    (["dimension", "size"], RecordField.DIMENSIONS),
    (["sender"], RecordField.SENDER),
    (["destination", "address"], RecordField.DESTINATION),
    (["type"], RecordField.PACKAGE_TYPE),
    (["fragile"], RecordField.IS_FRAGILE),
    (["priority", "shipping"], RecordField.PRIORITY),
    (["instruction", "special"], RecordField.SPECIAL_INSTRUCTIONS),
    (["value", "price"], RecordField.ESTIMATED_VALUE),
    (["insurance"], RecordField.INSURANCE_REQUIRED),
    (["tracking", "notification"], RecordField.TRACKING_PREFERENCES),
]

LEAVE_EDITING_PATTERN = re.compile(r"\b(back|no|nothing|never ?mind|return)\b", re.IGNORECASE)


def parse_edit_target(text: str) -> Optional[RecordField]:
    lower = text.lower()
    for keywords, field in EDIT_FIELD_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return field
    return None


def wants_to_leave_editing(text: str) -> bool:
    return bool(LEAVE_EDITING_PATTERN.search(text))


TEMPLATE_NAME_PATTERN = re.compile(
    r"template\s+(?:named\s+|called\s+)?[\"']?([\w-]+)[\"']?", re.IGNORECASE
)
DEFAULT_TEMPLATE_NAME = "default"


def parse_template_name(text: str) -> Optional[str]:
    match = TEMPLATE_NAME_PATTERN.search(text)
    return match.group(1).lower() if match else None


PACKAGE_NUMBER_PATTERN = re.compile(r"\b(\d+)\b")


def parse_package_number(text: str) -> Optional[int]:
    """1-based package number mentioned in the text"""
    match = PACKAGE_NUMBER_PATTERN.search(text)
    return int(match.group(1)) if match else None
