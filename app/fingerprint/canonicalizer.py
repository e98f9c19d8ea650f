"""Text canonicalization applied before shingling.

Reformatting-only edits (case, accents, punctuation, line wrapping, script
variants of the same name) must not move the near-duplicate fingerprint, so
every text is folded to lowercase Latin-ASCII words separated by single spaces.
"""

import re
import threading
import unicodedata
from typing import ClassVar

import icu  # type: ignore[import-untyped]


class TextCanonicalizer:
    """Folds text to lowercase ASCII words via ICU transliteration."""

    _ICU_TRANSFORM: ClassVar[str] = "Any-Latin; Latin-ASCII; Lower"
    _NON_WORD_RE: ClassVar[re.Pattern[str]] = re.compile(r"[\W_]+")

    def __init__(self) -> None:
        self._transliterator: icu.Transliterator = icu.Transliterator.createInstance(
            self._ICU_TRANSFORM
        )
        # ICU transliterator instances are not safe for concurrent use
        self._lock = threading.Lock()

    def canonicalize(self, text: str) -> str:
        normalized = unicodedata.normalize("NFC", text)
        with self._lock:
            folded = self._transliterator.transliterate(normalized)
        return self._NON_WORD_RE.sub(" ", folded).strip()

    def tokens(self, text: str) -> list[str]:
        return self.canonicalize(text).split()
