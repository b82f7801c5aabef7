"""
In-memory session storage.

``SessionStore`` is the only mutable memory a dialogue controller touches.
The module-level registry maps session ids to stores for the transport layer;
for production, replace it with Redis, PostgreSQL, or other persistent storage.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from shipchat.core.config import settings
from shipchat.models.enums import ConversationState, RecordField, SessionSignal
from shipchat.models.records import (
    Address,
    InProgressRecord,
    SenderInfo,
    ShipmentRecord,
)
from shipchat.models.session import ConversationEntry, SessionData, UserPreferences
from shipchat.utils.logger import get_logger

logger = get_logger(__name__)


def _fresh_session(session_id: Optional[str] = None) -> SessionData:
    data = SessionData(preferences=UserPreferences(
        default_currency=settings.DEFAULT_CURRENCY,
        default_dimension_unit=settings.DEFAULT_DIMENSION_UNIT,
        default_weight_unit=settings.DEFAULT_WEIGHT_UNIT,
    ))
    if session_id:
        data.metadata.session_id = session_id
    return data


class SessionStore:
    """State, records, history and retry counters for one session."""

    def __init__(self, session_id: Optional[str] = None, max_history: Optional[int] = None):
        self.data = _fresh_session(session_id)
        self.max_history = max_history or settings.HISTORY_MAX_TURNS

    @property
    def session_id(self) -> str:
        return self.data.metadata.session_id

    def _touch(self):
        self.data.metadata.last_activity = datetime.now(timezone.utc)

    # --- conversation state ---

    def get_current_state(self) -> ConversationState:
        return self.data.state

    def set_state(self, state: ConversationState):
        if state != self.data.state:
            logger.debug(f"🔄 MEMORY: {self.session_id} {self.data.state.value} → {state.value}")
        self.data.state = state
        self._touch()

    @property
    def editing(self) -> bool:
        return self.data.editing

    @editing.setter
    def editing(self, value: bool):
        self.data.editing = value

    # --- in-progress record ---

    def start_new_record(self) -> InProgressRecord:
        self.data.current_record = InProgressRecord()
        self.data.retry_ledger.clear()
        self.data.editing = False
        self._touch()
        return self.data.current_record

    def get_current_record(self) -> Optional[InProgressRecord]:
        return self.data.current_record

    def update_record_field(self, field: RecordField, value: Any):
        """Write one field of the in-progress record, starting a record if needed."""
        if self.data.current_record is None:
            self.start_new_record()
        setattr(self.data.current_record, RecordField(field).value, value)
        self.data.current_record.updated_at = datetime.now(timezone.utc)
        self._touch()

    def complete_record(self) -> Optional[ShipmentRecord]:
        """Move the in-progress record into the committed list."""
        record = self.data.current_record
        if record is None:
            logger.warning(f"⚠️ MEMORY: No record in progress for {self.session_id}")
            return None

        shipment = record.to_shipment()
        self.data.records.append(shipment)
        self.data.metadata.total_records += 1
        self.data.metadata.completed_records += 1
        self.data.current_record = None
        self.data.retry_ledger.clear()
        self.data.editing = False
        self._touch()
        logger.info(f"✅ MEMORY: Record {shipment.id} committed for {self.session_id}")
        return shipment

    # --- committed records ---

    def get_committed_records(self) -> List[ShipmentRecord]:
        return self.data.records

    def get_last_record(self) -> Optional[ShipmentRecord]:
        if not self.data.records:
            return None
        return self.data.records[-1]

    def delete_record(self, index: int) -> Optional[ShipmentRecord]:
        """Remove a committed record by zero-based position."""
        if index < 0 or index >= len(self.data.records):
            return None
        removed = self.data.records.pop(index)
        self.data.metadata.total_records -= 1
        self.data.metadata.completed_records -= 1
        self._touch()
        logger.info(f"🗑️ MEMORY: Record {removed.id} deleted from {self.session_id}")
        return removed

    # --- retry ledger ---

    def get_retry_count(self, field: RecordField) -> int:
        return self.data.retry_ledger.get(field, 0)

    def set_retry_count(self, field: RecordField, count: int):
        self.data.retry_ledger[field] = count

    def reset_retry_count(self, field: RecordField):
        self.data.retry_ledger.pop(field, None)

    # --- templates ---

    def save_template(self, name: str, record: InProgressRecord):
        self.data.templates[name] = record.model_copy(deep=True)
        self._touch()

    def get_template(self, name: str) -> Optional[InProgressRecord]:
        return self.data.templates.get(name)

    def get_template_names(self) -> List[str]:
        return list(self.data.templates.keys())

    # --- preferences ---

    def get_preferences(self) -> UserPreferences:
        return self.data.preferences

    def add_common_address(self, address: Address):
        exists = any(
            a.street == address.street and a.postal_code == address.postal_code
            for a in self.data.preferences.common_addresses
        )
        if not exists:
            self.data.preferences.common_addresses.append(address)

    def set_default_sender(self, sender: SenderInfo):
        self.data.preferences.default_sender = sender

    # --- history ---

    def add_history_entry(self, role: str, text: str):
        """
        Append a single turn to the conversation history.
        Caps the stored history at max_history messages (oldest dropped first).
        """
        self.data.history.append(ConversationEntry(role=role, message=text))
        if len(self.data.history) > self.max_history:
            self.data.history = self.data.history[-self.max_history:]
        self._touch()

    def get_history(self) -> List[ConversationEntry]:
        return self.data.history

    # --- signals for external collaborators ---

    def enqueue_signal(self, signal: SessionSignal):
        self.data.signals.append(signal)
        logger.info(f"📤 MEMORY: {signal.value} queued for {self.session_id}")

    def drain_signals(self) -> List[SessionSignal]:
        signals = list(self.data.signals)
        self.data.signals.clear()
        return signals

    def clear(self):
        """Start fresh under the same session id."""
        history = self.data.history
        self.data = _fresh_session(self.session_id)
        self.data.history = history
        logger.info(f"🧹 MEMORY: Session {self.session_id} cleared")


_SESSIONS: Dict[str, SessionStore] = {}


def get_or_create_session(session_id: Optional[str] = None) -> SessionStore:
    """
    Return the store for session_id, creating (and registering) it if missing.

    Args:
        session_id: Existing session id, or None for a brand new session

    Returns:
        SessionStore
    """
    if session_id and session_id in _SESSIONS:
        return _SESSIONS[session_id]
    store = SessionStore(session_id)
    _SESSIONS[store.session_id] = store
    logger.info(f"📝 MEMORY: New session {store.session_id}")
    return store


def load_session(session_id: str) -> Optional[SessionStore]:
    """
    Load a session from storage.

    Returns:
        SessionStore or None if not found
    """
    logger.debug(f"📂 MEMORY: Loading session {session_id}")
    store = _SESSIONS.get(session_id)
    if store is None:
        logger.info(f"ℹ️ MEMORY: No existing session {session_id}")
    return store


def save_session(store: SessionStore):
    _SESSIONS[store.session_id] = store
    logger.debug(f"💾 MEMORY: Session {store.session_id} saved")


def clear_session(session_id: str):
    """Remove a session from storage. Unknown ids are ignored."""
    if session_id in _SESSIONS:
        del _SESSIONS[session_id]
        logger.info(f"✅ MEMORY: Session {session_id} removed")
    else:
        logger.warning(f"⚠️ MEMORY: No session to remove for {session_id}")


def get_all_sessions() -> List[str]:
    """List all session ids (for debugging)."""
    return list(_SESSIONS.keys())
