import pytest
from fastapi.testclient import TestClient
import sys
import os

# Add backend to path so we can import shipchat modules
sys.path.append(os.path.join(os.path.dirname(__file__), "../backend"))

from shipchat.main import app
from shipchat.api.message import reset_controllers
from shipchat.storage.memory import _SESSIONS, SessionStore
from shipchat.orchestrator.controller import DialogueController

# --- FIXTURES ---

@pytest.fixture
def client():
    """FastAPI Test Client"""
    return TestClient(app)

@pytest.fixture(autouse=True)
def clear_memory():
    """Clear in-memory sessions and controllers before each test"""
    _SESSIONS.clear()
    reset_controllers()
    yield

@pytest.fixture
def store():
    """Fresh session store"""
    return SessionStore()

@pytest.fixture
def controller(store):
    """Dialogue controller over a fresh store with the default retry limit"""
    return DialogueController(store, max_retries=3)

@pytest.fixture
def valid_address_line():
    return "123 Main St, Springfield, IL, 62704, USA"

@pytest.fixture
def summary_controller(controller, valid_address_line):
    """Controller driven through a full record up to the package summary"""
    for message in [
        "yes", "box", "10 x 5 x 3 cm", "5 kg", "no", "express",
        valid_address_line, "skip", "skip", "skip", "skip", "skip",
    ]:
        controller.process_input(message)
    return controller
