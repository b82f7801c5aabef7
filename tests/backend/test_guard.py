from shipchat.models.dialogue import BotResponse
from shipchat.models.enums import ConversationState
from shipchat.orchestrator.guard import turn_guard
from shipchat.storage.memory import SessionStore

class _Holder:
    def __init__(self):
        self.store = SessionStore()
        self.store.set_state(ConversationState.ASKING_WEIGHT)

class TestTurnGuard:

    def test_guard_execution_success(self):
        """Guard passes the handler's response through untouched"""
        @turn_guard("test_handler")
        def handler(holder, text):
            return BotResponse(message=f"got {text}", state=holder.store.get_current_state())

        response = handler(_Holder(), "5 kg")

        assert response.message == "got 5 kg"
        assert response.error is None

    def test_guard_error_handling(self):
        """Guard turns an exception into an error response in the current state"""
        @turn_guard("test_handler")
        def handler(holder, text):
            raise ValueError("Test error")

        response = handler(_Holder(), "5 kg")

        assert response.state == ConversationState.ASKING_WEIGHT
        assert response.error == "test_handler error: Test error"
        assert response.needs_input is True

    def test_guard_keeps_function_name(self):
        @turn_guard("test_handler")
        def my_handler(holder, text):
            return None

        assert my_handler.__name__ == "my_handler"
