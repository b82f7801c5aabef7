from enum import Enum


class PackageType(str, Enum):
    BOX = "box"
    ENVELOPE = "envelope"
    CRATE = "crate"
    PALLET = "pallet"
    TUBE = "tube"
    OTHER = "other"


class PriorityLevel(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"
    SAME_DAY = "same_day"


class DimensionUnit(str, Enum):
    CM = "cm"
    INCH = "inch"
    M = "m"


class WeightUnit(str, Enum):
    KG = "kg"
    LBS = "lbs"
    G = "g"
    OZ = "oz"


class ConversationState(str, Enum):
    """Stages of the shipment intake conversation. Exactly one is active per session."""
    WELCOME = "welcome"
    ASKING_PACKAGE_TYPE = "asking_package_type"
    ASKING_DIMENSIONS = "asking_dimensions"
    ASKING_WEIGHT = "asking_weight"
    ASKING_FRAGILE = "asking_fragile"
    ASKING_PRIORITY = "asking_priority"
    ASKING_DESTINATION = "asking_destination"
    ASKING_SENDER = "asking_sender"
    ASKING_SPECIAL_INSTRUCTIONS = "asking_special_instructions"
    ASKING_VALUE = "asking_value"
    ASKING_INSURANCE = "asking_insurance"
    ASKING_TRACKING_PREFS = "asking_tracking_prefs"
    PACKAGE_SUMMARY = "package_summary"
    EDITING = "editing"
    ASKING_CONTINUE = "asking_continue"
    COMPLETED = "completed"


class Intent(str, Enum):
    CONFIRM = "confirm"
    DENY = "deny"
    HELP = "help"
    SKIP = "skip"
    SAME_AS_LAST = "same_as_last"
    FINISH = "finish"
    CANCEL = "cancel"
    PAUSE = "pause"
    EXPORT = "export"
    VIEW_SUMMARY = "view_summary"
    ADD_PACKAGE = "add_package"
    EDIT_PACKAGE = "edit_package"
    DELETE_PACKAGE = "delete_package"
    BULK_EDIT = "bulk_edit"
    USE_TEMPLATE = "use_template"
    SAVE_TEMPLATE = "save_template"


class EntityType(str, Enum):
    PACKAGE_TYPE = "package_type"
    DIMENSION = "dimension"
    WEIGHT = "weight"
    PRIORITY = "priority"
    BOOLEAN = "boolean"
    EMAIL = "email"
    PHONE = "phone"


class RecordField(str, Enum):
    """Closed set of writable shipment record fields."""
    PACKAGE_TYPE = "package_type"
    DIMENSIONS = "dimensions"
    WEIGHT = "weight"
    IS_FRAGILE = "is_fragile"
    PRIORITY = "priority"
    DESTINATION = "destination"
    SENDER = "sender"
    SPECIAL_INSTRUCTIONS = "special_instructions"
    ESTIMATED_VALUE = "estimated_value"
    INSURANCE_REQUIRED = "insurance_required"
    TRACKING_PREFERENCES = "tracking_preferences"


class SessionSignal(str, Enum):
    """Requests handed to external collaborators (exporter, persistence)."""
    EXPORT_REQUESTED = "export_requested"
    FINISH_REQUESTED = "finish_requested"
    PAUSE_REQUESTED = "pause_requested"
