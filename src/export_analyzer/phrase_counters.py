"""Optional literal-phrase counters run over message text."""

from dataclasses import dataclass, field
from typing import Any

import regex


@dataclass
class PhraseCounter:
    """Counts case-insensitive, word-bounded occurrences of a phrase."""
    name: str
    pattern: str
    compiled: Any = field(init=False, repr=False)

    def __post_init__(self):
        self.compiled = regex.compile(self.pattern, regex.IGNORECASE)

    def count(self, text: str) -> int:
        if not text:
            return 0
        return len(self.compiled.findall(text))


def phrase_counter(phrase: str) -> PhraseCounter:
    """Build a counter for a literal phrase, allowing any run of inner whitespace."""
    words = [regex.escape(w) for w in phrase.split()]
    return PhraseCounter(name=phrase, pattern=r'\b' + r'\s+'.join(words) + r'\b')


DEFAULT_PHRASE_COUNTERS = (phrase_counter("good boy"),)
