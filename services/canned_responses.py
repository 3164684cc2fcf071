"""
Canned replies that answer small talk without calling the model
"""
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


GREETING_RESPONSE = "Hello! I'm DocAI, your document assistant. How can I help you today?"
THANKS_RESPONSE = "You're welcome! Let me know if you need anything else."


@dataclass(frozen=True)
class CannedResponseRule:
    """A reply returned when any trigger phrase appears in the user's text"""
    name: str
    triggers: Tuple[str, ...]
    response: str

    def matches(self, text: str, whole_word: bool = False) -> bool:
        lowered = text.lower()
        if whole_word:
            return any(re.search(rf"\b{re.escape(trigger)}\b", lowered) for trigger in self.triggers)
        return any(trigger in lowered for trigger in self.triggers)


# Evaluated in order; the first match wins
DEFAULT_RULES: Tuple[CannedResponseRule, ...] = (
    CannedResponseRule(name="greeting", triggers=("hi", "hello"), response=GREETING_RESPONSE),
    CannedResponseRule(name="thanks", triggers=("thank you", "thanks"), response=THANKS_RESPONSE),
)


class CannedResponder:
    """Prioritized rule list checked before any question reaches the model"""

    def __init__(self, rules: Sequence[CannedResponseRule] = DEFAULT_RULES, whole_word: bool = False):
        self.rules = tuple(rules)
        self.whole_word = whole_word

    def match_rule(self, text: str) -> Optional[CannedResponseRule]:
        for rule in self.rules:
            if rule.matches(text, whole_word=self.whole_word):
                return rule
        return None

    def match(self, text: str) -> Optional[str]:
        """Return the canned reply for ``text``, or None when the model should answer"""
        rule = self.match_rule(text)
        return rule.response if rule else None
