"""
TimeIndex Builder

Groups a flat list of word timestamps (TTS or alignment output) into
timed sentences. Words are matched greedily in order; words the
timestamps do not cover are reported rather than guessed.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from audiosync.readalong.timing_map import Sentence, TimeIndex, Word
from audiosync.utils import logger

_SENTENCE_WORD_SPLIT = re.compile(r"[\s—–]+")
_NON_WORD = re.compile(r"[^\w]")
_PUNCTUATION = re.compile(r"[.!?,;:'\"“”()\[\]{}…]+")


@dataclass
class AlignmentProblem:
    """A sentence whose words were not all found in the timestamps."""

    sentence_index: int
    sentence: str
    expected_words: List[str]
    missing_words: List[str] = field(default_factory=list)
    words_found: int = 0
    dropped: bool = False  # No words found, sentence left out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sentenceIndex": self.sentence_index,
            "sentence": self.sentence,
            "expectedWords": self.expected_words,
            "missingWords": self.missing_words,
            "wordsFound": self.words_found,
            "dropped": self.dropped,
        }


def normalize_word(word: str) -> str:
    """Lowercase word characters only, used for matching."""
    return _NON_WORD.sub("", word).lower()


def sentence_words(sentence: str) -> List[str]:
    """Split a sentence into normalized words, skipping empty tokens."""
    words = (normalize_word(w) for w in _SENTENCE_WORD_SPLIT.split(sentence.strip()))
    return [w for w in words if w]


def build_time_index(
    word_timestamps: Sequence[Dict[str, Any]],
    sentences: Sequence[str],
    translations: Optional[Sequence[Any]] = None,
) -> Tuple[TimeIndex, List[AlignmentProblem]]:
    """
    Build a TimeIndex from word timestamps and the passage's sentences.

    Args:
        word_timestamps: Dicts with "word", "start" and "end"
        sentences: Sentence texts in reading order
        translations: Optional per-sentence payloads passed through

    Returns:
        (TimeIndex, problems)
    """
    timed: List[Sentence] = []
    problems: List[AlignmentProblem] = []
    cursor = 0

    for sentence_index, raw_sentence in enumerate(sentences):
        text = raw_sentence.strip()
        expected = sentence_words(text)
        words: List[Word] = []
        missing: List[str] = []

        for expected_word in expected:
            search = cursor
            while search < len(word_timestamps):
                stamp = word_timestamps[search]
                if normalize_word(stamp["word"]) == expected_word:
                    words.append(Word(
                        text=_PUNCTUATION.sub("", stamp["word"]),
                        start=float(stamp["start"]),
                        end=float(stamp["end"]),
                    ))
                    cursor = search + 1
                    break
                search += 1
            else:
                missing.append(expected_word)

        if not words:
            problems.append(AlignmentProblem(
                sentence_index=sentence_index,
                sentence=text,
                expected_words=expected,
                missing_words=missing,
                dropped=True,
            ))
            continue

        if missing:
            problems.append(AlignmentProblem(
                sentence_index=sentence_index,
                sentence=text,
                expected_words=expected,
                missing_words=missing,
                words_found=len(words),
            ))

        translation = None
        if translations is not None and sentence_index < len(translations):
            translation = translations[sentence_index]

        timed.append(Sentence(
            text=text,
            start_time=words[0].start,
            end_time=words[-1].end,
            words=tuple(words),
            translation=translation,
        ))

    for problem in problems:
        if problem.dropped:
            logger.warning(f"Sentence {problem.sentence_index} dropped, no words found: {problem.sentence[:50]!r}")
        else:
            logger.warning(
                f"Sentence {problem.sentence_index}: {problem.words_found}/{len(problem.expected_words)} words timed, "
                f"missing {', '.join(problem.missing_words)}"
            )

    return TimeIndex(sentences=tuple(timed)), problems
