import re
from typing import List, Optional, Pattern, Tuple

from shipchat.models.enums import Intent


def _compile(*patterns: str) -> List[Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


# Evaluated top to bottom, first hit wins. Exact-token intents sit above the
# broad keyword ones so that "no" is DENY and never SKIP.
INTENT_RULES: List[Tuple[Intent, List[Pattern]]] = [
    (Intent.CONFIRM, _compile(
        r"^(yes|yep|yeah|yup|sure|ok|okay|correct|right|affirmative|y)[.!]*$",
        r"\bthat('s| is) (correct|right)\b",
        r"^(yes|yeah|sure|ok|okay)[,.!]? (please|thanks|thank you)[.!]*$",
        r"\bsounds good\b",
        r"\blooks (good|right|correct)\b",
    )),
    (Intent.DENY, _compile(
        r"^(no|nope|nah|not really|n)[.!]*$",
        r"^no[,.!]? thanks?( you)?[.!]*$",
        r"\bthat('s| is) (not |in)correct\b",
        r"\bthat('s| is) wrong\b",
    )),
    (Intent.HELP, _compile(
        r"\bhelp\b",
        r"\bwhat can (you|i) do\b",
        r"\bhow (does this|do i) work\b",
        r"\bcommands?\b",
        r"\boptions\b",
    )),
    (Intent.SKIP, _compile(
        r"\bskip\b",
        r"\bpass\b",
        r"\bnext\b",
        r"\bleave (it )?blank\b",
        r"\bnone\b",
        r"\bnot applicable\b",
        r"(^|\s)n/a($|\s)",
        r"^na$",
    )),
    (Intent.SAME_AS_LAST, _compile(
        r"\bsame as (the )?(last|previous|before)\b",
        r"\brepeat( last)?\b",
        r"\bditto\b",
        r"\bcopy (from )?(the )?(last|previous)\b",
    )),
    (Intent.FINISH, _compile(
        r"\bfinish(ed)?\b",
        r"\bdone\b",
        r"^complete$",
        r"^(the )?end$",
        r"\bend (the )?session\b",
        r"\bthat('s| is) (all|it)\b",
        r"\bno more\b",
    )),
    (Intent.CANCEL, _compile(
        r"\bcancel\b",
        r"\babort\b",
        r"\bquit\b",
        r"\bexit\b",
        r"^stop$",
    )),
    (Intent.PAUSE, _compile(
        r"\bpause\b",
        r"\bsave (for |and )?(later|now)\b",
        r"\bcome back later\b",
    )),
    (Intent.EXPORT, _compile(
        r"\bexport\b",
        r"\bdownload\b",
        r"\bsave (to )?(a )?file\b",
        r"\bget (the )?json\b",
    )),
    (Intent.VIEW_SUMMARY, _compile(
        r"\bview summary\b",
        r"\bshow (me )?(all )?(my )?packages\b",
        r"\blist (my )?packages\b",
        r"\bwhat('s| is) in my (cart|list)\b",
        r"\bsummary\b",
    )),
    (Intent.ADD_PACKAGE, _compile(
        r"\badd (a |another )?package\b",
        r"\bnew package\b",
        r"\bcreate package\b",
        r"\bstart (a )?new one\b",
    )),
    (Intent.EDIT_PACKAGE, _compile(
        r"\bedit\b",
        r"\bchange\b",
        r"\bmodify\b",
        r"\bupdate\b",
    )),
    (Intent.DELETE_PACKAGE, _compile(
        r"\bdelete\b",
        r"\bremove\b",
    )),
    (Intent.BULK_EDIT, _compile(
        r"\ball packages\b",
        r"\bmake all\b",
        r"\bset all( to)?\b",
    )),
    (Intent.USE_TEMPLATE, _compile(
        r"\buse (the )?template\b",
        r"\bload (the )?template\b",
        r"\bfrom (a |the )?template\b",
    )),
    (Intent.SAVE_TEMPLATE, _compile(
        r"\bsave (it |this )?(as )?(a )?template\b",
        r"\bcreate (a )?template\b",
        r"\bremember this\b",
    )),
]


def match_intent(text: str) -> Optional[Intent]:
    """
    Return the first intent whose patterns match the text, or None.

    Args:
        text: Raw user utterance

    Returns:
        Intent or None when nothing matched
    """
    normalized = text.strip()
    if not normalized:
        return None

    for intent, patterns in INTENT_RULES:
        for pattern in patterns:
            if pattern.search(normalized):
                return intent
    return None
