from shipchat.models.dialogue import ExtractedEntity, NLUResult
from shipchat.nlu.entities import run_extractors
from shipchat.nlu.intents import match_intent
from shipchat.utils.logger import get_logger

logger = get_logger(__name__)

INTENT_CONFIDENCE = 0.8
NO_INTENT_CONFIDENCE = 0.3


def process(text: str) -> NLUResult:
    """
    Turn one utterance into an intent plus every entity found in it.

    Stateless: the same text always yields an equal result.

    Args:
        text: Raw user utterance

    Returns:
        NLUResult
    """
    normalized_text = text.strip()

    intent = match_intent(normalized_text)
    entities = [ExtractedEntity(**hit) for hit in run_extractors(normalized_text)]

    logger.debug(
        f"🔍 NLU: intent={intent.value if intent else None}, "
        f"entities={[e.type.value for e in entities]} for '{normalized_text[:80]}'"
    )

    return NLUResult(
        intent=intent,
        entities=entities,
        confidence=INTENT_CONFIDENCE if intent else NO_INTENT_CONFIDENCE,
        normalized_text=normalized_text,
    )
