"""
Dialogue controller for shipment intake.

One controller owns one session store. Each call to ``process_input`` is one
atomic turn: NLU, global intents, then the handler for the current state.
"""
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel

from shipchat.core.config import settings
from shipchat.models.dialogue import BotResponse, NLUResult, ValidationResult
from shipchat.models.enums import (
    ConversationState,
    EntityType,
    Intent,
    PackageType,
    PriorityLevel,
    RecordField,
    SessionSignal,
)
from shipchat.models.records import (
    Address,
    Dimensions,
    MonetaryValue,
    SenderInfo,
    TrackingPreferences,
    Weight,
)
from shipchat.models.session import UserPreferences
from shipchat.nlu.processor import process
from shipchat.orchestrator import prompts
from shipchat.orchestrator.guard import turn_guard
from shipchat.orchestrator.parsing import (
    DEFAULT_TEMPLATE_NAME,
    parse_address,
    parse_dimensions,
    parse_edit_target,
    parse_package_number,
    parse_package_type,
    parse_priority,
    parse_sender,
    parse_template_name,
    parse_tracking_preferences,
    parse_value,
    parse_weight,
    parse_yes_no,
    wants_to_leave_editing,
)
from shipchat.storage.memory import SessionStore
from shipchat.utils.logger import get_logger
from shipchat.validators.package_validator import PackageValidator, package_validator

logger = get_logger(__name__)

# (value or None, warnings to show with the next prompt)
Extracted = Tuple[Any, List[str]]
Extractor = Callable[[str, NLUResult, UserPreferences], Extracted]

NOT_AN_ANSWER = {Intent.SKIP, Intent.SAME_AS_LAST, Intent.DENY}


# --- per-field extraction ----------------------------------------------------

def _extract_package_type(text: str, nlu: NLUResult, prefs: UserPreferences) -> Extracted:
    return nlu.get(EntityType.PACKAGE_TYPE) or parse_package_type(text), []


def _extract_dimensions(text: str, nlu: NLUResult, prefs: UserPreferences) -> Extracted:
    dims = nlu.get(EntityType.DIMENSION)
    if dims:
        return dims, []
    return parse_dimensions(text, prefs.default_dimension_unit)


def _extract_weight(text: str, nlu: NLUResult, prefs: UserPreferences) -> Extracted:
    weight = nlu.get(EntityType.WEIGHT)
    if weight:
        return weight, []
    return parse_weight(text, prefs.default_weight_unit)


def _extract_fragile(text: str, nlu: NLUResult, prefs: UserPreferences) -> Extracted:
    return parse_yes_no(text, nlu, keyword="fragile"), []


def _extract_priority(text: str, nlu: NLUResult, prefs: UserPreferences) -> Extracted:
    return nlu.get(EntityType.PRIORITY) or parse_priority(text), []


def _extract_destination(text: str, nlu: NLUResult, prefs: UserPreferences) -> Extracted:
    return parse_address(text), []


def _extract_sender(text: str, nlu: NLUResult, prefs: UserPreferences) -> Extracted:
    if nlu.intent in NOT_AN_ANSWER:
        return None, []
    return parse_sender(text, nlu), []


def _extract_special_instructions(text: str, nlu: NLUResult, prefs: UserPreferences) -> Extracted:
    if nlu.intent in NOT_AN_ANSWER:
        return None, []
    return text.strip() or None, []


def _extract_value(text: str, nlu: NLUResult, prefs: UserPreferences) -> Extracted:
    return parse_value(text, prefs.default_currency), []


def _extract_insurance(text: str, nlu: NLUResult, prefs: UserPreferences) -> Extracted:
    return parse_yes_no(text, nlu, keyword="insur"), []


def _extract_tracking(text: str, nlu: NLUResult, prefs: UserPreferences) -> Extracted:
    chosen = parse_tracking_preferences(text)
    if any(chosen.values()) or nlu.get(EntityType.BOOLEAN) is False:
        return chosen, []
    return None, []


def _to_priority(value: Any) -> PriorityLevel:
    raw = value.value if isinstance(value, PriorityLevel) else str(value)
    return PriorityLevel(re.sub(r"[_\s-]+", "_", raw.lower().strip()))


def _to_package_type(value: Any) -> PackageType:
    raw = value.value if isinstance(value, PackageType) else str(value)
    return PackageType(raw.lower().strip())


@dataclass(frozen=True)
class FieldStep:
    """How one field state collects, checks and stores its value."""
    field: RecordField
    extract: Extractor
    # PackageValidator method name, or None when any extracted value is acceptable
    validator: Optional[str]
    convert: Callable[[Any], Any]
    optional: bool = False
    # Builds the value stored when the user skips an optional field
    skip_value: Optional[Callable[[], Any]] = None


FIELD_STEPS: Dict[ConversationState, FieldStep] = {
    ConversationState.ASKING_PACKAGE_TYPE: FieldStep(
        RecordField.PACKAGE_TYPE, _extract_package_type, "validate_package_type", _to_package_type,
    ),
    ConversationState.ASKING_DIMENSIONS: FieldStep(
        RecordField.DIMENSIONS, _extract_dimensions, "validate_dimensions", Dimensions.model_validate,
    ),
    ConversationState.ASKING_WEIGHT: FieldStep(
        RecordField.WEIGHT, _extract_weight, "validate_weight", Weight.model_validate,
    ),
    ConversationState.ASKING_FRAGILE: FieldStep(
        RecordField.IS_FRAGILE, _extract_fragile, None, bool,
    ),
    ConversationState.ASKING_PRIORITY: FieldStep(
        RecordField.PRIORITY, _extract_priority, "validate_priority", _to_priority,
    ),
    ConversationState.ASKING_DESTINATION: FieldStep(
        RecordField.DESTINATION, _extract_destination, "validate_address", Address.model_validate,
    ),
    ConversationState.ASKING_SENDER: FieldStep(
        RecordField.SENDER, _extract_sender, "validate_sender_info", SenderInfo.model_validate,
        optional=True,
    ),
    ConversationState.ASKING_SPECIAL_INSTRUCTIONS: FieldStep(
        RecordField.SPECIAL_INSTRUCTIONS, _extract_special_instructions,
        "validate_special_instructions", str.strip,
        optional=True,
    ),
    ConversationState.ASKING_VALUE: FieldStep(
        RecordField.ESTIMATED_VALUE, _extract_value, "validate_value", MonetaryValue.model_validate,
        optional=True,
    ),
    ConversationState.ASKING_INSURANCE: FieldStep(
        RecordField.INSURANCE_REQUIRED, _extract_insurance, None, bool,
        optional=True, skip_value=lambda: False,
    ),
    ConversationState.ASKING_TRACKING_PREFS: FieldStep(
        RecordField.TRACKING_PREFERENCES, _extract_tracking, None, TrackingPreferences.model_validate,
        optional=True, skip_value=TrackingPreferences,
    ),
}

# Linear collection order
FIELD_SEQUENCE: List[ConversationState] = list(FIELD_STEPS.keys())

FIELD_STATES: Dict[RecordField, ConversationState] = {
    step.field: state for state, step in FIELD_STEPS.items()
}


class DialogueController:
    """
    Finite-state shipment intake conversation over one SessionStore.

    Args:
        store: Session-scoped store; the controller keeps no other state
        validator: Field validator (defaults to the shared PackageValidator)
        max_retries: Failures per field before the escape hint is shown
    """

    def __init__(
        self,
        store: SessionStore,
        validator: Optional[PackageValidator] = None,
        max_retries: Optional[int] = None,
    ):
        self.store = store
        self.validator = validator or package_validator
        self.max_retries = max_retries or settings.MAX_RETRIES

        self._global_handlers: Dict[Intent, Callable[[NLUResult], BotResponse]] = {
            Intent.HELP: self._handle_help,
            Intent.VIEW_SUMMARY: self._handle_view_summary,
            Intent.FINISH: self._handle_finish,
            Intent.CANCEL: self._handle_cancel,
            Intent.PAUSE: self._handle_pause,
            Intent.EXPORT: self._handle_export,
        }
        self._state_handlers: Dict[ConversationState, Callable[[str, NLUResult], BotResponse]] = {
            ConversationState.WELCOME: self._handle_welcome,
            ConversationState.PACKAGE_SUMMARY: self._handle_summary,
            ConversationState.EDITING: self._handle_editing,
            ConversationState.ASKING_CONTINUE: self._handle_continue,
            ConversationState.COMPLETED: self._handle_completed,
        }
        for state in FIELD_STEPS:
            self._state_handlers[state] = self._handle_field

    # --- public API ---

    def get_welcome_message(self) -> BotResponse:
        self.store.add_history_entry("bot", prompts.WELCOME_MESSAGE)
        return BotResponse(
            message=prompts.WELCOME_MESSAGE,
            suggestions=prompts.WELCOME_SUGGESTIONS,
            state=self.store.get_current_state(),
        )

    def process_input(self, text: str) -> BotResponse:
        """
        Run one conversational turn.

        Args:
            text: Raw user utterance

        Returns:
            BotResponse for this turn; errors are reported on it, never raised
        """
        self.store.add_history_entry("user", text)
        response = self._handle_turn(text)
        self.store.add_history_entry("bot", response.message)
        return response

    @turn_guard("DialogueController")
    def _handle_turn(self, text: str) -> BotResponse:
        state = self.store.get_current_state()
        logger.info(f"💬 CONTROLLER: {self.store.session_id} in {state.value}")

        if not text.strip():
            return self._respond(f"{prompts.EMPTY_INPUT_MESSAGE} {self._current_prompt()}",
                                 self._current_suggestions())

        nlu = process(text)

        global_handler = self._global_handlers.get(nlu.intent)
        if global_handler:
            logger.info(f"🌐 CONTROLLER: Global intent {nlu.intent.value}")
            return global_handler(nlu)

        handler = self._state_handlers.get(state)
        if handler is None:
            logger.error(f"❌ CONTROLLER: No handler for state {state}")
            return self._respond(prompts.UNHANDLED_STATE_MESSAGE)
        return handler(text, nlu)

    # --- helpers ---

    def _respond(self, message: str, suggestions: Optional[List[str]] = None,
                 needs_input: bool = True) -> BotResponse:
        return BotResponse(
            message=message,
            suggestions=suggestions,
            needs_input=needs_input,
            state=self.store.get_current_state(),
        )

    def _set_state(self, state: ConversationState):
        """Change state; the retry counter of the field being left is reset."""
        current = self.store.get_current_state()
        if current != state and current in FIELD_STEPS:
            self.store.reset_retry_count(FIELD_STEPS[current].field)
        self.store.set_state(state)

    def _prompt_for(self, state: ConversationState) -> str:
        if state == ConversationState.PACKAGE_SUMMARY:
            record = self.store.get_current_record()
            if record is None:
                return prompts.NO_RECORD_MESSAGE
            return prompts.format_record_summary(record, self.validator.cross_validate(record).warnings)
        if state in FIELD_STEPS:
            table = prompts.EDIT_FIELD_PROMPTS if self.store.editing else prompts.FIELD_PROMPTS
            return table[state]
        if state == ConversationState.EDITING:
            return prompts.EDITABLE_FIELDS_MESSAGE
        if state == ConversationState.ASKING_CONTINUE:
            return "Would you like to add another package?"
        return "Would you like to add a package?"

    def _suggestions_for(self, state: ConversationState) -> Optional[List[str]]:
        if state == ConversationState.PACKAGE_SUMMARY:
            return prompts.SUMMARY_SUGGESTIONS
        if state == ConversationState.EDITING:
            return prompts.EDITABLE_FIELDS_SUGGESTIONS
        if state == ConversationState.ASKING_CONTINUE:
            return prompts.RECORD_SAVED_SUGGESTIONS
        if state in (ConversationState.WELCOME, ConversationState.COMPLETED):
            return prompts.WELCOME_SUGGESTIONS
        return prompts.FIELD_SUGGESTIONS.get(state)

    def _current_prompt(self) -> str:
        return self._prompt_for(self.store.get_current_state())

    def _current_suggestions(self) -> Optional[List[str]]:
        return self._suggestions_for(self.store.get_current_state())

    def _enter(self, state: ConversationState, prefix: str = "") -> BotResponse:
        """Move to state and answer with its prompt, optionally preceded by prefix."""
        self._set_state(state)
        message = self._prompt_for(state)
        if prefix:
            message = f"{prefix}\n\n{message}"
        return self._respond(message, self._suggestions_for(state))

    def _next_state_after(self, state: ConversationState) -> ConversationState:
        """Next field state in sequence whose field is still empty, else the summary."""
        record = self.store.get_current_record()
        position = FIELD_SEQUENCE.index(state) if state in FIELD_SEQUENCE else -1
        for candidate in FIELD_SEQUENCE[position + 1:]:
            if record is None or not record.has_field(FIELD_STEPS[candidate].field):
                return candidate
        return ConversationState.PACKAGE_SUMMARY

    def _start_record(self, message: str, suggestions: List[str]) -> BotResponse:
        self.store.start_new_record()
        self._set_state(ConversationState.ASKING_PACKAGE_TYPE)
        return self._respond(message, suggestions)

    # --- global intents ---

    def _handle_help(self, nlu: NLUResult) -> BotResponse:
        return self._respond(prompts.HELP_MESSAGE, self._current_suggestions())

    def _handle_view_summary(self, nlu: NLUResult) -> BotResponse:
        return self._respond(
            prompts.format_records_list(self.store.get_committed_records()),
            self._current_suggestions(),
        )

    def _finish(self) -> BotResponse:
        records = self.store.get_committed_records()
        if not records:
            self._set_state(ConversationState.WELCOME)
            return self._respond(prompts.FINISH_EMPTY_MESSAGE, prompts.FINISH_EMPTY_SUGGESTIONS)

        self._set_state(ConversationState.COMPLETED)
        self.store.enqueue_signal(SessionSignal.FINISH_REQUESTED)
        logger.info(f"🏁 CONTROLLER: Session {self.store.session_id} finished with {len(records)} record(s)")
        return self._respond(prompts.FINISH_MESSAGE.format(count=len(records)), needs_input=False)

    def _handle_finish(self, nlu: NLUResult) -> BotResponse:
        return self._finish()

    def _handle_cancel(self, nlu: NLUResult) -> BotResponse:
        self.store.clear()
        logger.info(f"🛑 CONTROLLER: Session {self.store.session_id} cancelled")
        return self._respond(prompts.CANCEL_MESSAGE, prompts.WELCOME_SUGGESTIONS)

    def _handle_pause(self, nlu: NLUResult) -> BotResponse:
        self.store.enqueue_signal(SessionSignal.PAUSE_REQUESTED)
        return self._respond(
            prompts.PAUSE_MESSAGE.format(session_id=self.store.session_id),
            needs_input=False,
        )

    def _handle_export(self, nlu: NLUResult) -> BotResponse:
        count = len(self.store.get_committed_records())
        if not count:
            return self._respond(prompts.NO_RECORDS_MESSAGE, self._current_suggestions())
        self.store.enqueue_signal(SessionSignal.EXPORT_REQUESTED)
        return self._respond(prompts.EXPORT_MESSAGE.format(count=count), self._current_suggestions())

    # --- field states ---

    def _handle_field(self, text: str, nlu: NLUResult) -> BotResponse:
        state = self.store.get_current_state()
        step = FIELD_STEPS[state]
        label = prompts.FIELD_LABELS[step.field]

        if nlu.intent == Intent.SAME_AS_LAST:
            last = self.store.get_last_record()
            previous = last.get_field(step.field) if last else None
            if previous is not None:
                if isinstance(previous, BaseModel):
                    previous = previous.model_copy(deep=True)
                self.store.update_record_field(step.field, previous)
                logger.info(f"📋 CONTROLLER: Copied {step.field.value} from last record")
                return self._advance(state, prompts.COPIED_FROM_LAST_MESSAGE.format(label=label))
            logger.debug(f"CONTROLLER: Nothing to copy for {step.field.value}, extracting instead")

        # "no" to an optional question is the same as skipping it
        if step.optional and nlu.intent in (Intent.SKIP, Intent.DENY):
            self.store.update_record_field(step.field, step.skip_value() if step.skip_value else None)
            logger.info(f"⏭️ CONTROLLER: {step.field.value} skipped")
            return self._advance(state)

        if state == ConversationState.ASKING_PACKAGE_TYPE and nlu.intent == Intent.USE_TEMPLATE:
            return self._apply_template(text)

        value, warnings = step.extract(text, nlu, self.store.get_preferences())
        if value is None:
            message = prompts.MISS_MESSAGES[state]
            if nlu.intent == Intent.SKIP and not step.optional:
                message = f"{prompts.REQUIRED_FIELD_MESSAGE.format(label=label)} {message}"
            return self._retry(step, message)

        result = self._validate(step, value)
        if not result.is_valid:
            parts = [f"❌ {error}" for error in result.errors]
            parts.extend(f"💡 {suggestion}" for suggestion in result.suggestions)
            if nlu.intent == Intent.SKIP and not step.optional:
                parts.insert(0, prompts.REQUIRED_FIELD_MESSAGE.format(label=label))
            return self._retry(step, "\n".join(parts))

        self.store.update_record_field(step.field, step.convert(value))
        self.store.reset_retry_count(step.field)
        logger.info(f"✅ CONTROLLER: {step.field.value} collected")
        return self._advance(state, prompts.format_warnings(warnings + result.warnings))

    def _validate(self, step: FieldStep, value: Any) -> ValidationResult:
        if step.validator is None:
            return ValidationResult()
        return getattr(self.validator, step.validator)(value)

    def _retry(self, step: FieldStep, message: str) -> BotResponse:
        """Count a failed attempt; at the threshold add the escape hint and start over."""
        failures = self.store.get_retry_count(step.field)
        if failures >= self.max_retries - 1:
            message = f"{message}\n\n{prompts.RETRY_HINT}"
            self.store.reset_retry_count(step.field)
            logger.info(f"🔁 CONTROLLER: Retry hint shown for {step.field.value}")
        else:
            self.store.set_retry_count(step.field, failures + 1)
        state = self.store.get_current_state()
        return self._respond(message, prompts.FIELD_SUGGESTIONS.get(state))

    def _advance(self, state: ConversationState, prefix: str = "") -> BotResponse:
        if self.store.editing:
            self.store.editing = False
            return self._enter(ConversationState.PACKAGE_SUMMARY, prefix)
        return self._enter(self._next_state_after(state), prefix)

    def _apply_template(self, text: str) -> BotResponse:
        names = self.store.get_template_names()
        if not names:
            return self._respond(prompts.NO_TEMPLATES_MESSAGE, prompts.PACKAGE_TYPE_SUGGESTIONS)

        name = parse_template_name(text) or (names[0] if len(names) == 1 else DEFAULT_TEMPLATE_NAME)
        template = self.store.get_template(name)
        if template is None:
            return self._respond(
                prompts.TEMPLATE_NOT_FOUND_MESSAGE.format(name=name, names=", ".join(names)),
                [f"Use template {n}" for n in names],
            )

        for field in RecordField:
            value = template.get_field(field)
            if value is not None:
                if isinstance(value, BaseModel):
                    value = value.model_copy(deep=True)
                self.store.update_record_field(field, value)
        logger.info(f"📋 CONTROLLER: Template '{name}' applied")

        record = self.store.get_current_record()
        for state in FIELD_SEQUENCE:
            if not record.has_field(FIELD_STEPS[state].field):
                return self._enter(state, prompts.TEMPLATE_APPLIED_MESSAGE.format(name=name))
        return self._enter(ConversationState.PACKAGE_SUMMARY, prompts.TEMPLATE_APPLIED_MESSAGE.format(name=name))

    # --- other states ---

    def _handle_welcome(self, text: str, nlu: NLUResult) -> BotResponse:
        if nlu.intent in (Intent.CONFIRM, Intent.ADD_PACKAGE):
            return self._start_record(prompts.PACKAGE_TYPE_MESSAGE, prompts.PACKAGE_TYPE_SUGGESTIONS)

        if nlu.intent == Intent.USE_TEMPLATE or nlu.has(EntityType.PACKAGE_TYPE):
            self.store.start_new_record()
            self._set_state(ConversationState.ASKING_PACKAGE_TYPE)
            return self._handle_field(text, nlu)

        return self._respond(prompts.WELCOME_IDLE_MESSAGE, prompts.WELCOME_SUGGESTIONS)

    def _handle_summary(self, text: str, nlu: NLUResult) -> BotResponse:
        record = self.store.get_current_record()
        if record is None:
            if nlu.intent in (Intent.CONFIRM, Intent.ADD_PACKAGE):
                return self._start_record(prompts.PACKAGE_TYPE_MESSAGE, prompts.PACKAGE_TYPE_SUGGESTIONS)
            return self._respond(prompts.NO_RECORD_MESSAGE, ["Add package"])

        if nlu.intent == Intent.CONFIRM:
            return self._commit_record()

        if nlu.intent == Intent.SAVE_TEMPLATE:
            name = parse_template_name(text) or DEFAULT_TEMPLATE_NAME
            self.store.save_template(name, record)
            logger.info(f"💾 CONTROLLER: Template '{name}' saved")
            return self._respond(prompts.TEMPLATE_SAVED_MESSAGE.format(name=name), prompts.SUMMARY_SUGGESTIONS)

        target = parse_edit_target(text)
        if target is not None:
            return self._edit_field(target)

        if nlu.intent in (Intent.DENY, Intent.EDIT_PACKAGE):
            return self._enter(ConversationState.EDITING)

        return self._respond(prompts.SUMMARY_REPROMPT, prompts.SUMMARY_SUGGESTIONS)

    def _commit_record(self) -> BotResponse:
        record = self.store.get_current_record()
        missing = record.missing_required_fields()
        if missing:
            labels = ", ".join(prompts.FIELD_LABELS[f] for f in missing)
            return self._enter(FIELD_STATES[missing[0]], f"Still missing: {labels}.")

        result = self.validator.validate_record(record)
        if not result.is_valid:
            errors = "\n".join(f"❌ {e}" for e in result.errors)
            return self._respond(f"{errors}\n\n{prompts.EDIT_PROMPT}", prompts.SUMMARY_SUGGESTIONS)

        shipment = self.store.complete_record()
        self.store.add_common_address(shipment.destination)
        if shipment.sender is not None:
            self.store.set_default_sender(shipment.sender)

        self._set_state(ConversationState.ASKING_CONTINUE)
        return self._respond(prompts.RECORD_SAVED_MESSAGE, prompts.RECORD_SAVED_SUGGESTIONS)

    def _edit_field(self, field: RecordField) -> BotResponse:
        self.store.editing = True
        logger.info(f"✏️ CONTROLLER: Editing {field.value}")
        return self._enter(FIELD_STATES[field])

    def _handle_editing(self, text: str, nlu: NLUResult) -> BotResponse:
        if self.store.get_current_record() is None:
            return self._handle_summary(text, nlu)

        target = parse_edit_target(text)
        if target is not None:
            return self._edit_field(target)

        if nlu.intent == Intent.CONFIRM or wants_to_leave_editing(text):
            return self._enter(ConversationState.PACKAGE_SUMMARY)

        return self._respond(prompts.EDITABLE_FIELDS_MESSAGE, prompts.EDITABLE_FIELDS_SUGGESTIONS)

    def _handle_continue(self, text: str, nlu: NLUResult) -> BotResponse:
        if nlu.intent in (Intent.CONFIRM, Intent.ADD_PACKAGE):
            return self._start_record(prompts.ANOTHER_PACKAGE_MESSAGE, prompts.ANOTHER_PACKAGE_SUGGESTIONS)

        if nlu.intent == Intent.DELETE_PACKAGE:
            return self._delete_record(text)

        return self._finish()

    def _delete_record(self, text: str) -> BotResponse:
        count = len(self.store.get_committed_records())
        number = parse_package_number(text)
        if number is None:
            return self._respond(prompts.DELETE_WHICH_MESSAGE.format(count=count))

        if self.store.delete_record(number - 1) is None:
            return self._respond(prompts.DELETE_NOT_FOUND_MESSAGE.format(number=number, count=count))

        return self._respond(
            prompts.DELETE_DONE_MESSAGE.format(number=number, count=count - 1),
            prompts.RECORD_SAVED_SUGGESTIONS,
        )

    def _handle_completed(self, text: str, nlu: NLUResult) -> BotResponse:
        self.store.clear()
        if nlu.intent in (Intent.CONFIRM, Intent.ADD_PACKAGE):
            return self._start_record(prompts.PACKAGE_TYPE_MESSAGE, prompts.PACKAGE_TYPE_SUGGESTIONS)
        return self._respond(prompts.WELCOME_MESSAGE, prompts.WELCOME_SUGGESTIONS)
