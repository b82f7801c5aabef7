import pytest
from shipchat.models.enums import Intent
from shipchat.nlu.intents import INTENT_RULES, match_intent

class TestIntentMatcher:

    @pytest.mark.parametrize("text, expected", [
        ("yes", Intent.CONFIRM),
        ("Yes!", Intent.CONFIRM),
        ("ok", Intent.CONFIRM),
        ("yes please", Intent.CONFIRM),
        ("looks good", Intent.CONFIRM),
        ("no", Intent.DENY),
        ("nope", Intent.DENY),
        ("no thanks", Intent.DENY),
        ("help", Intent.HELP),
        ("what are my options", Intent.HELP),
        ("skip", Intent.SKIP),
        ("n/a", Intent.SKIP),
        ("none", Intent.SKIP),
        ("same as last", Intent.SAME_AS_LAST),
        ("ditto", Intent.SAME_AS_LAST),
        ("I'm done", Intent.FINISH),
        ("that's all", Intent.FINISH),
        ("cancel", Intent.CANCEL),
        ("quit", Intent.CANCEL),
        ("pause", Intent.PAUSE),
        ("export", Intent.EXPORT),
        ("download my data", Intent.EXPORT),
        ("view summary", Intent.VIEW_SUMMARY),
        ("show my packages", Intent.VIEW_SUMMARY),
        ("add another package", Intent.ADD_PACKAGE),
        ("new package", Intent.ADD_PACKAGE),
        ("edit the weight", Intent.EDIT_PACKAGE),
        ("change destination", Intent.EDIT_PACKAGE),
        ("delete package 2", Intent.DELETE_PACKAGE),
        ("set all to express", Intent.BULK_EDIT),
        ("use template fragile", Intent.USE_TEMPLATE),
        ("save as template weekly", Intent.SAVE_TEMPLATE),
    ])
    def test_catalog(self, text, expected):
        assert match_intent(text) == expected

    @pytest.mark.parametrize("text", [
        "10 x 5 x 3 cm",
        "box",
        "Canada",
        "send it to Boston",
        "",
        "   ",
    ])
    def test_no_intent(self, text):
        """Broad keywords must not fire inside other words"""
        assert match_intent(text) is None

    @pytest.mark.parametrize("text, expected", [
        ("help me skip this", Intent.HELP),
        ("skip, I'm done", Intent.SKIP),
        ("cancel and export", Intent.CANCEL),
        ("yes, I'm done", Intent.FINISH),
    ])
    def test_first_match_wins(self, text, expected):
        assert match_intent(text) == expected

    def test_case_and_whitespace_insensitive(self):
        assert match_intent("  YES  ") == Intent.CONFIRM
        assert match_intent("\tCancel\n") == Intent.CANCEL

    def test_catalog_order(self):
        """The rule table is evaluated in a fixed order"""
        order = [intent for intent, _ in INTENT_RULES]
        assert order[:3] == [Intent.CONFIRM, Intent.DENY, Intent.HELP]
        assert order.index(Intent.SKIP) < order.index(Intent.FINISH)
        assert order[-1] == Intent.SAVE_TEMPLATE
        assert len(order) == len(set(order)) == len(Intent)

    def test_deterministic(self):
        assert match_intent("same as last") == match_intent("same as last")
