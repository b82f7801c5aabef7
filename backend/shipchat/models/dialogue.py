from typing import Optional, List, Any

from pydantic import BaseModel, Field

from shipchat.models.enums import ConversationState, Intent, EntityType


class ExtractedEntity(BaseModel):
    """Typed value pulled out of an utterance"""
    type: EntityType
    value: Any
    confidence: float
    raw_span: str


class NLUResult(BaseModel):
    """Intent plus entities for one utterance. Never persisted."""
    intent: Optional[Intent] = None
    entities: List[ExtractedEntity] = Field(default_factory=list)
    confidence: float
    normalized_text: str

    def get(self, entity_type: EntityType) -> Any:
        """Return the first extracted value of the given type, or None."""
        for entity in self.entities:
            if entity.type == entity_type:
                return entity.value
        return None

    def has(self, entity_type: EntityType) -> bool:
        return any(e.type == entity_type for e in self.entities)


class ValidationResult(BaseModel):
    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)

    def fail(self, error: str) -> "ValidationResult":
        self.is_valid = False
        self.errors.append(error)
        return self


class BotResponse(BaseModel):
    """What the controller hands back to the caller for a single turn."""
    message: str
    suggestions: Optional[List[str]] = None
    needs_input: bool = True
    state: ConversationState
    error: Optional[str] = None
