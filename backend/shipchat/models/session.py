from datetime import datetime, timezone
from typing import Optional, List, Dict, Literal
import uuid

from pydantic import BaseModel, Field

from shipchat.models.enums import (
    ConversationState,
    RecordField,
    SessionSignal,
    DimensionUnit,
    WeightUnit,
)
from shipchat.models.records import (
    InProgressRecord,
    ShipmentRecord,
    Address,
    SenderInfo,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ConversationEntry(BaseModel):
    timestamp: datetime = Field(default_factory=_now)
    role: Literal["user", "bot"]
    message: str


class SessionMetadata(BaseModel):
    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    start_time: datetime = Field(default_factory=_now)
    last_activity: datetime = Field(default_factory=_now)
    total_records: int = 0
    completed_records: int = 0


class UserPreferences(BaseModel):
    """Preferences learned during the session"""
    default_sender: Optional[SenderInfo] = None
    common_addresses: List[Address] = Field(default_factory=list)
    default_currency: str = "USD"
    default_dimension_unit: DimensionUnit = DimensionUnit.CM
    default_weight_unit: WeightUnit = WeightUnit.KG


class SessionData(BaseModel):
    """Everything the dialogue controller is allowed to remember about a session."""
    metadata: SessionMetadata = Field(default_factory=SessionMetadata)
    state: ConversationState = ConversationState.WELCOME
    current_record: Optional[InProgressRecord] = None
    records: List[ShipmentRecord] = Field(default_factory=list)
    history: List[ConversationEntry] = Field(default_factory=list)
    retry_ledger: Dict[RecordField, int] = Field(default_factory=dict)
    templates: Dict[str, InProgressRecord] = Field(default_factory=dict)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    signals: List[SessionSignal] = Field(default_factory=list)
    # Set while a single field is being re-collected from the editing sub-dialogue
    editing: bool = False
