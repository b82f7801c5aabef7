import asyncio
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from shipchat.models.dialogue import BotResponse
from shipchat.models.records import InProgressRecord, ShipmentRecord
from shipchat.orchestrator.controller import DialogueController
from shipchat.storage.memory import get_or_create_session, load_session, save_session
from shipchat.utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter()

# One controller and one lock per session id; turns of a session never interleave.
_controllers: Dict[str, DialogueController] = {}
_locks: Dict[str, asyncio.Lock] = {}


class SessionResponse(BaseModel):
    session_id: str
    reply: BotResponse


class MessageRequest(BaseModel):
    session_id: str
    message: str = Field(..., max_length=2000)


class MessageResponse(BaseModel):
    session_id: str
    reply: BotResponse
    signals: List[str] = Field(default_factory=list)


class RecordsResponse(BaseModel):
    session_id: str
    state: str
    records: List[ShipmentRecord]
    current_record: Optional[InProgressRecord] = None


def _get_lock(session_id: str) -> asyncio.Lock:
    if session_id not in _locks:
        _locks[session_id] = asyncio.Lock()
    return _locks[session_id]


def get_controller(session_id: str) -> Optional[DialogueController]:
    """Controller for a known session, or None."""
    controller = _controllers.get(session_id)
    if controller is not None:
        return controller

    store = load_session(session_id)
    if store is None:
        return None
    controller = DialogueController(store)
    _controllers[session_id] = controller
    return controller


def reset_controllers():
    """Forget every controller and lock (the stores themselves are untouched)."""
    _controllers.clear()
    _locks.clear()


@router.post("/v1/session", response_model=SessionResponse)
async def create_session():
    """Start a new intake session and return the welcome message."""
    store = get_or_create_session()
    controller = DialogueController(store)
    _controllers[store.session_id] = controller

    logger.info(f"🆕 API /v1/session: Created {store.session_id}")
    return SessionResponse(session_id=store.session_id, reply=controller.get_welcome_message())


@router.post("/v1/message", response_model=MessageResponse)
async def handle_message(req: MessageRequest):
    """
    Run one conversational turn for an existing session.

    Args:
        req: MessageRequest containing session_id and message

    Returns:
        MessageResponse with the bot reply and any signals raised this turn
    """
    logger.info(f"📨 API /v1/message: Received request | Session: {req.session_id}")
    logger.debug(f"Message: '{req.message[:100]}'")

    controller = get_controller(req.session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {req.session_id}")

    async with _get_lock(req.session_id):
        reply = controller.process_input(req.message)
        signals = controller.store.drain_signals()
        save_session(controller.store)

    if reply.error:
        logger.warning(f"⚠️ API /v1/message: Turn error for {req.session_id}: {reply.error}")

    return MessageResponse(
        session_id=req.session_id,
        reply=reply,
        signals=[signal.value for signal in signals],
    )


@router.get("/v1/session/{session_id}/records", response_model=RecordsResponse)
async def get_records(session_id: str):
    """Committed records plus the record in progress, if any."""
    store = load_session(session_id)
    if store is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")

    return RecordsResponse(
        session_id=session_id,
        state=store.get_current_state().value,
        records=store.get_committed_records(),
        current_record=store.get_current_record(),
    )


@router.get("/v1/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "shipment_intake"}
