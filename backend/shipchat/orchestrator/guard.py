import functools

from shipchat.models.dialogue import BotResponse
from shipchat.orchestrator.prompts import ERROR_MESSAGE
from shipchat.utils.logger import get_logger

logger = get_logger(__name__)


def turn_guard(handler_name: str):
    """
    Decorator to guard a controller turn from unexpected errors.
    Any exception becomes an error BotResponse in the current state,
    so one bad message never takes the session down.
    """
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(controller, *args, **kwargs):
            try:
                return fn(controller, *args, **kwargs)
            except Exception as e:
                state = controller.store.get_current_state()
                logger.error(f"❌ {handler_name} error in {state.value}: {e}", exc_info=True)
                return BotResponse(
                    message=ERROR_MESSAGE,
                    state=state,
                    error=f"{handler_name} error: {str(e)}",
                )
        return wrapper
    return decorator
