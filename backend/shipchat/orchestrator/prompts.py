from typing import List, Optional, Union

from shipchat.models.enums import ConversationState, RecordField
from shipchat.models.records import InProgressRecord, ShipmentRecord

WELCOME_MESSAGE = """Welcome to the shipment intake assistant! 🎉

I'll collect the details of your packages one question at a time.

You can:
- Add multiple packages with complete details
- Use natural language (e.g., "small box", "10kg")
- Say "same as last" to copy from the previous package
- Save templates for frequently shipped items
- View a summary of all packages anytime
- Edit a package before saving it

Would you like to add your first package?

Commands: help, summary, finish, cancel"""
WELCOME_SUGGESTIONS = ["Yes, add a package", "Help", "View summary"]

WELCOME_IDLE_MESSAGE = 'No problem! When you\'re ready to add a package, just let me know. Type "help" for more options.'

PACKAGE_TYPE_MESSAGE = """Great! Let's start with the package type.

What type of package are you shipping?

Options:
- Box (standard cardboard box)
- Envelope (document/letter)
- Crate (wooden crate)
- Pallet (large pallet)
- Tube (cylindrical tube)
- Other

You can also describe it naturally, like "small box" or "large envelope"."""
PACKAGE_TYPE_SUGGESTIONS = ["Box", "Envelope", "Crate", "Pallet"]

ANOTHER_PACKAGE_MESSAGE = "Great! Let's add another package. What type of package is this?"
ANOTHER_PACKAGE_SUGGESTIONS = ["Box", "Envelope", "Crate", "Same as last"]

# Prompt shown when a state is entered from the linear sequence
FIELD_PROMPTS = {
    ConversationState.ASKING_PACKAGE_TYPE: "What type of package is this?",
    ConversationState.ASKING_DIMENSIONS: """Perfect! Now, what are the dimensions?

Please provide in format: Length x Width x Height Unit
Example: "10 x 5 x 3 cm" or "12 x 8 x 6 inches"

Or type "same as last" to use previous package dimensions.""",
    ConversationState.ASKING_WEIGHT: """Great! What's the weight of this package?

Please include the unit (kg, lbs, g, oz)
Example: "5 kg", "10 lbs", "500 g"

Or type "same as last" to use previous weight.""",
    ConversationState.ASKING_FRAGILE: "Is this package fragile? (yes/no)",
    ConversationState.ASKING_PRIORITY: """What's the shipping priority?

Options:
- Standard (regular delivery)
- Express (faster delivery)
- Overnight (next day)
- Same Day (same day delivery)

Or type "same as last".""",
    ConversationState.ASKING_DESTINATION: """Where is this package being shipped to?

Please provide the full address or type "same as last":
Street address
City, State ZIP
Country

A single line works too: "123 Main St, Springfield, IL, 62704, USA\"""",
    ConversationState.ASKING_SENDER: """📤 Who is sending this package?

Please provide the sender's information:
- Name (required)
- Email (optional)
- Phone (optional)

Examples:
- "John Doe"
- "Jane Smith, jane@email.com, +1234567890"

Or type "skip" to leave blank, or "same as last" to reuse previous sender.""",
    ConversationState.ASKING_SPECIAL_INSTRUCTIONS: 'Any special handling instructions? (or type "skip")',
    ConversationState.ASKING_VALUE: 'What is the estimated value of the package contents? (or type "skip")\nExample: "100", "$250.50"',
    ConversationState.ASKING_INSURANCE: "Would you like to add insurance for this package? (yes/no)",
    ConversationState.ASKING_TRACKING_PREFS: """What tracking preferences would you like?

You can choose: email, SMS, signature required
Example: "email and SMS" or type "skip" for none.""",
}

FIELD_SUGGESTIONS = {
    ConversationState.ASKING_PACKAGE_TYPE: ["Box", "Envelope", "Crate", "Pallet", "Tube", "Other"],
    ConversationState.ASKING_FRAGILE: ["Yes", "No"],
    ConversationState.ASKING_PRIORITY: ["Standard", "Express", "Overnight", "Same Day"],
    ConversationState.ASKING_INSURANCE: ["Yes", "No"],
    ConversationState.ASKING_TRACKING_PREFS: ["Email", "SMS", "Signature required", "Skip"],
}

# Re-prompts after an extraction miss
MISS_MESSAGES = {
    ConversationState.ASKING_PACKAGE_TYPE: "I didn't catch the package type. Please choose: box, envelope, crate, pallet, tube, or other.",
    ConversationState.ASKING_DIMENSIONS: 'Please provide dimensions in format: "length x width x height unit" (e.g., "10 x 5 x 3 cm").',
    ConversationState.ASKING_WEIGHT: 'Please provide weight with unit (e.g., "5 kg", "10 lbs", "500 g").',
    ConversationState.ASKING_FRAGILE: "Please answer yes or no.",
    ConversationState.ASKING_PRIORITY: "Please choose: standard, express, overnight, or same_day.",
    ConversationState.ASKING_DESTINATION: """I couldn't read that address. Please use this format:

Street address
City, State
Postal code
Country

Or one line: street, city, state, postal code, country.""",
    ConversationState.ASKING_SENDER: 'Please provide sender name and optionally email/phone, or type "skip".',
    ConversationState.ASKING_SPECIAL_INSTRUCTIONS: 'Please type the handling instructions, or "skip".',
    ConversationState.ASKING_VALUE: 'Please enter a valid number (e.g., "100", "$250.50") or "skip".',
    ConversationState.ASKING_INSURANCE: "Please answer yes or no.",
    ConversationState.ASKING_TRACKING_PREFS: 'Please choose email, SMS and/or signature required, or type "skip".',
}

RETRY_HINT = 'You can also type "skip" to leave optional fields blank, "help" for assistance, or "cancel" to start over.'

SUMMARY_CONFIRM_PROMPT = "Is this information correct? (yes/no/edit)"
SUMMARY_SUGGESTIONS = ["Yes", "Edit", "Save as template"]
SUMMARY_REPROMPT = 'Please confirm if the package details are correct (yes/no), or say "edit" to make changes.'
NO_RECORD_MESSAGE = 'There is no package in progress. Say "add package" to start one.'

RECORD_SAVED_MESSAGE = "Package saved successfully! ✓\n\nWould you like to add another package?"
RECORD_SAVED_SUGGESTIONS = ["Yes", "No, I'm done", "View summary"]

EDIT_PROMPT = 'What would you like to edit? (e.g., "change weight", "edit destination")'

EDITABLE_FIELDS_MESSAGE = """I can help you edit the following fields:

📦 Package Type
📏 Dimensions
⚖️ Weight
⚠️ Fragile status
🚚 Priority/Shipping
📍 Destination
👤 Sender information
📝 Special instructions
💰 Value
🛡️ Insurance
🔔 Tracking

Please tell me which field you'd like to edit, or say "back" to return to the summary."""
EDITABLE_FIELDS_SUGGESTIONS = ["Weight", "Dimensions", "Destination", "Priority", "Back"]

# Prompts used when a field is re-opened from the editing sub-dialogue
EDIT_FIELD_PROMPTS = {
    ConversationState.ASKING_PACKAGE_TYPE: "What type of package is this?",
    ConversationState.ASKING_DIMENSIONS: 'What are the new dimensions?\n\nExample: "10 x 5 x 3 cm" or "12 x 8 x 6 inches"',
    ConversationState.ASKING_WEIGHT: 'What\'s the new weight of this package?\n\nExample: "5 kg", "10 lbs", "500 g"',
    ConversationState.ASKING_FRAGILE: "Is this package fragile? (yes/no)",
    ConversationState.ASKING_PRIORITY: "What's the shipping priority? (standard, express, overnight, same day)",
    ConversationState.ASKING_DESTINATION: "Where should this package be shipped to?\n\nStreet address\nCity, State ZIP\nCountry",
    ConversationState.ASKING_SENDER: 'Who is sending this package? (e.g. "Jane Smith, jane@email.com")',
    ConversationState.ASKING_SPECIAL_INSTRUCTIONS: "What are the special handling instructions?",
    ConversationState.ASKING_VALUE: 'What is the estimated value of the package contents?\nExample: "100", "$250.50"',
    ConversationState.ASKING_INSURANCE: "Would you like to add insurance for this package? (yes/no)",
    ConversationState.ASKING_TRACKING_PREFS: "Which tracking options would you like? (email, SMS, signature required)",
}

FIELD_LABELS = {
    RecordField.PACKAGE_TYPE: "package type",
    RecordField.DIMENSIONS: "dimensions",
    RecordField.WEIGHT: "weight",
    RecordField.IS_FRAGILE: "fragile status",
    RecordField.PRIORITY: "priority",
    RecordField.DESTINATION: "destination",
    RecordField.SENDER: "sender",
    RecordField.SPECIAL_INSTRUCTIONS: "special instructions",
    RecordField.ESTIMATED_VALUE: "value",
    RecordField.INSURANCE_REQUIRED: "insurance",
    RecordField.TRACKING_PREFERENCES: "tracking preferences",
}

HELP_MESSAGE = """📚 Help & Commands:

🔹 Navigation:
- "help" - Show this help message
- "summary" - View all packages
- "finish" - Complete the session
- "cancel" - Cancel current session
- "pause" - Save and resume later
- "export" - Request an export of your packages

🔹 Shortcuts:
- "same as last" - Copy value from previous package
- "skip" - Skip optional fields
- "edit" - Modify current package
- "save as template <name>" / "use template <name>"

🔹 Natural Language:
You can use natural descriptions like:
- "small box" for package type
- "10 x 5 x 3 cm" for dimensions
- "5 kg" for weight
- "express" for priority

Just answer questions naturally!"""

NO_RECORDS_MESSAGE = "No packages added yet. Would you like to add one?"

FINISH_EMPTY_MESSAGE = 'No packages to export. Session ended. Type "add package" to start adding packages!'
FINISH_EMPTY_SUGGESTIONS = ["Add package", "Help"]

FINISH_MESSAGE = """✓ Session completed!

Total packages collected: {count}

Your data has been saved. You can now export it using the "export" command.

Thank you for using the shipment intake assistant! 🎉"""

CANCEL_MESSAGE = "Session cancelled. All data cleared. Type anything to start fresh."

PAUSE_MESSAGE = """Session paused and saved!

Session ID: {session_id}

You can resume later by providing this ID."""

EXPORT_MESSAGE = "Export requested for {count} package(s). Your file will be prepared shortly."

UNHANDLED_STATE_MESSAGE = "I'm not sure what to do here. Type 'help' for assistance."

ERROR_MESSAGE = "Sorry, something went wrong while handling that message. Please try again."

TEMPLATE_SAVED_MESSAGE = 'Template "{name}" saved. ' + SUMMARY_CONFIRM_PROMPT
NO_TEMPLATES_MESSAGE = "You don't have any saved templates yet. What type of package is this?"
TEMPLATE_NOT_FOUND_MESSAGE = 'No template named "{name}". Saved templates: {names}'
TEMPLATE_APPLIED_MESSAGE = 'Template "{name}" applied.'

DELETE_WHICH_MESSAGE = 'Which package should I delete? Say e.g. "delete package 2". You have {count} package(s).'
DELETE_DONE_MESSAGE = "Package {number} deleted. {count} package(s) remaining.\n\nWould you like to add another package?"
DELETE_NOT_FOUND_MESSAGE = "There is no package {number}. You have {count} package(s)."

REQUIRED_FIELD_MESSAGE = "The {label} is required and can't be skipped."
COPIED_FROM_LAST_MESSAGE = "Using the same {label} as the last package."
EMPTY_INPUT_MESSAGE = "I didn't catch that."

Record = Union[InProgressRecord, ShipmentRecord]


def _num(value: float) -> str:
    return f"{value:g}"


def format_record_lines(record: Record) -> List[str]:
    """One "Label: value" line per field the record actually has."""
    lines = []
    if record.package_type is not None:
        lines.append(f"📦 Type: {record.package_type.value.title()}")
    if record.dimensions is not None:
        d = record.dimensions
        lines.append(f"📏 Dimensions: {_num(d.length)} x {_num(d.width)} x {_num(d.height)} {d.unit.value}")
    if record.weight is not None:
        lines.append(f"⚖️ Weight: {_num(record.weight.value)} {record.weight.unit.value}")
    if record.is_fragile is not None:
        lines.append(f"⚠️ Fragile: {'Yes' if record.is_fragile else 'No'}")
    if record.priority is not None:
        lines.append(f"🚚 Priority: {record.priority.value.replace('_', ' ').title()}")
    if record.destination is not None:
        a = record.destination
        lines.append(f"📍 Destination: {a.street}, {a.city}, {a.state} {a.postal_code}, {a.country}")
    if record.sender is not None:
        contact = ", ".join(c for c in (record.sender.email, record.sender.phone) if c)
        lines.append(f"👤 Sender: {record.sender.name}" + (f" ({contact})" if contact else ""))
    if record.special_instructions:
        lines.append(f"📝 Instructions: {record.special_instructions}")
    if record.estimated_value is not None:
        lines.append(f"💰 Value: {record.estimated_value.amount:.2f} {record.estimated_value.currency}")
    if record.insurance_required is not None:
        lines.append(f"🛡️ Insurance: {'Yes' if record.insurance_required else 'No'}")
    if record.tracking_preferences is not None:
        lines.append(f"🔔 Tracking: {record.tracking_preferences.describe()}")
    return lines


def format_record_summary(record: InProgressRecord, warnings: Optional[List[str]] = None) -> str:
    parts = ["📋 Package Summary:", "", *format_record_lines(record)]
    if warnings:
        parts.append("")
        parts.extend(f"⚠️ {w}" for w in warnings)
    parts.extend(["", SUMMARY_CONFIRM_PROMPT])
    return "\n".join(parts)


def format_records_list(records: List[ShipmentRecord]) -> str:
    if not records:
        return NO_RECORDS_MESSAGE

    lines = [f"📦 Your packages ({len(records)}):", ""]
    for number, record in enumerate(records, start=1):
        d, w = record.dimensions, record.weight
        lines.append(
            f"{number}. {record.package_type.value.title()} - "
            f"{_num(d.length)}x{_num(d.width)}x{_num(d.height)} {d.unit.value}, "
            f"{_num(w.value)} {w.unit.value}, "
            f"{record.priority.value.replace('_', ' ')} → {record.destination.short()}"
        )
    return "\n".join(lines)


def format_warnings(warnings: List[str]) -> str:
    return "\n".join(f"⚠️ {w}" for w in warnings)
