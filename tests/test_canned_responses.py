"""
Property-based tests for the canned response rules
"""
from hypothesis import given, strategies as st

from services.canned_responses import (
    CannedResponder, CannedResponseRule, GREETING_RESPONSE, THANKS_RESPONSE
)


TRIGGERS = ["hi", "hello", "thank you", "thanks"]

# Text that cannot contain any trigger: no letters from "hi", "hello", "thanks"
safe_text = st.text(alphabet="bcdfgjmpqrvwxz0123456789 ?!.,", max_size=40)


def random_case(draw_text: str, flags):
    return "".join(c.upper() if f else c for c, f in zip(draw_text, flags))


class TestCannedResponder:
    """Test canned response matching"""

    def setup_method(self):
        self.responder = CannedResponder()

    def test_greeting(self):
        assert self.responder.match("hello") == GREETING_RESPONSE
        assert self.responder.match("Hi there") == GREETING_RESPONSE

    def test_thanks(self):
        assert self.responder.match("Thanks a lot") == THANKS_RESPONSE
        assert self.responder.match("THANK YOU") == THANKS_RESPONSE

    def test_question_without_trigger(self):
        assert self.responder.match("What is the total?") is None

    def test_first_rule_wins(self):
        # "thanks" and "hello" both present; greeting is evaluated first
        assert self.responder.match("thanks, hello") == GREETING_RESPONSE

    def test_substring_semantics(self):
        # "this" contains "hi"
        assert self.responder.match("What is this?") == GREETING_RESPONSE

    def test_whole_word_mode(self):
        responder = CannedResponder(whole_word=True)
        assert responder.match("What is this?") is None
        assert responder.match("hi, what is this?") == GREETING_RESPONSE
        assert responder.match("thank you!") == THANKS_RESPONSE

    def test_custom_rules(self):
        rule = CannedResponseRule(name="bye", triggers=("goodbye",), response="Bye!")
        responder = CannedResponder(rules=[rule])
        assert responder.match_rule("Goodbye now") is rule
        assert responder.match("hello") is None

    @given(
        prefix=safe_text,
        suffix=safe_text,
        trigger=st.sampled_from(TRIGGERS),
        data=st.data()
    )
    def test_any_trigger_in_any_case_matches(self, prefix, suffix, trigger, data):
        flags = data.draw(st.lists(st.booleans(), min_size=len(trigger), max_size=len(trigger)))
        text = prefix + random_case(trigger, flags) + suffix

        expected = GREETING_RESPONSE if trigger in ("hi", "hello") else THANKS_RESPONSE
        assert self.responder.match(text) == expected

    @given(text=safe_text)
    def test_text_without_triggers_never_matches(self, text):
        assert self.responder.match(text) is None
