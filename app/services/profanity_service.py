# services/profanity_service.py
"""
Profanity screening.

Detection is a set of independent detectors: three libraries by default, plus
an optional deployment word list. A text is profane when at least one of them
flags it. Detectors are plain synchronous callables and are run
concurrently in worker threads.
"""
import asyncio
import re
from typing import Iterable, List, Optional, Protocol, Sequence

from better_profanity import profanity
from profanity_check import predict
from profanityfilter import ProfanityFilter

from core.config import settings
from core.logger import logger


class ProfanityDetector(Protocol):
    name: str

    def is_profane(self, text: str) -> bool:
        ...


class BetterProfanityDetector:
    """Bundled word list from the better_profanity package."""

    name = "better_profanity"

    def __init__(self):
        profanity.load_censor_words()

    def is_profane(self, text: str) -> bool:
        return profanity.contains_profanity(text)


class ProfanityCheckDetector:
    """Linear SVM trained on labelled text, from alt-profanity-check."""

    name = "profanity_check"

    def is_profane(self, text: str) -> bool:
        return int(predict([text])[0]) == 1


class ProfanityFilterDetector:
    """Word list from the profanityfilter package."""

    name = "profanityfilter"

    def __init__(self):
        self._filter = ProfanityFilter()

    def is_profane(self, text: str) -> bool:
        return self._filter.is_profane(text)


class WordListDetector:
    """Case-insensitive whole-word match against a deployment word list."""

    name = "word_list"

    def __init__(self, words: Iterable[str]):
        cleaned = sorted({w.strip().lower() for w in words if w and w.strip()})
        self.words = cleaned
        self._pattern = (
            re.compile(r"\b(?:" + "|".join(re.escape(w) for w in cleaned) + r")\b", re.IGNORECASE)
            if cleaned
            else None
        )

    def is_profane(self, text: str) -> bool:
        if self._pattern is None:
            return False
        return self._pattern.search(text) is not None


class ProfanityService:
    def __init__(self, detectors: Sequence[ProfanityDetector]):
        self.detectors = list(detectors)

    async def is_profane(self, text: str) -> bool:
        if not self.detectors:
            return False

        verdicts = await asyncio.gather(
            *(asyncio.to_thread(detector.is_profane, text) for detector in self.detectors)
        )
        flagged = [d.name for d, verdict in zip(self.detectors, verdicts) if verdict]
        if flagged:
            logger.info(f"Profanity detected by {flagged}")
        return bool(flagged)


def build_default_detectors(extra_words: Optional[List[str]] = None) -> List[ProfanityDetector]:
    extra_words = settings.PROFANITY_EXTRA_WORDS if extra_words is None else extra_words
    detectors: List[ProfanityDetector] = [
        BetterProfanityDetector(),
        ProfanityCheckDetector(),
        ProfanityFilterDetector(),
    ]
    if extra_words:
        detectors.append(WordListDetector(extra_words))
    return detectors
