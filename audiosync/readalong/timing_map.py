"""
Timing Map Module

Sentence and word timestamps that link audio time to text positions.
Loads and saves the JSON produced by the content pipeline and checks
the ordering invariants the resolver relies on.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from audiosync.utils import logger
from audiosync.utils.config import config

VALIDATION_MODES = ("off", "warn", "strict")


class TimeIndexError(ValueError):
    """Raised when timing data breaks the TimeIndex invariants."""


@dataclass(frozen=True)
class Word:
    """Single timed word inside a sentence."""

    text: str
    start: float  # Start time in seconds
    end: float  # End time in seconds (exclusive)

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        return {
            "word": self.text,
            "start": round(self.start, 3),
            "end": round(self.end, 3),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Word":
        return cls(
            text=data.get("word", data.get("text", "")),
            start=float(data["start"]),
            end=float(data["end"]),
        )


@dataclass(frozen=True)
class Sentence:
    """Timed sentence with its words in playback order."""

    text: str
    start_time: float
    end_time: float
    words: Tuple[Word, ...] = ()
    translation: Optional[Any] = None  # Passed through, never interpreted

    def contains(self, time: float) -> bool:
        return self.start_time <= time <= self.end_time

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        data = {
            "sentence": self.text,
            "startTime": round(self.start_time, 3),
            "endTime": round(self.end_time, 3),
            "words": [w.to_dict() for w in self.words],
        }
        if self.translation is not None:
            data["translation"] = self.translation
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sentence":
        return cls(
            text=data.get("sentence", data.get("text", "")),
            start_time=float(data["startTime"]),
            end_time=float(data["endTime"]),
            words=tuple(Word.from_dict(w) for w in data.get("words", [])),
            translation=data.get("translation"),
        )


@dataclass(frozen=True)
class TimeIndex:
    """Ordered sentences driving read-along synchronization."""

    sentences: Tuple[Sentence, ...] = field(default_factory=tuple)
    version: str = "1.0"

    def __len__(self) -> int:
        return len(self.sentences)

    def __iter__(self) -> Iterator[Sentence]:
        return iter(self.sentences)

    def __getitem__(self, index: int) -> Sentence:
        return self.sentences[index]

    @property
    def is_empty(self) -> bool:
        return not self.sentences

    @property
    def end_time(self) -> float:
        """Latest sentence end, 0.0 when empty."""
        return max((s.end_time for s in self.sentences), default=0.0)

    def word_at(self, sentence_index: int, word_index: int) -> Optional[Word]:
        """Return the word at the given indices, or None if out of range."""
        if not 0 <= sentence_index < len(self.sentences):
            return None
        words = self.sentences[sentence_index].words
        if not 0 <= word_index < len(words):
            return None
        return words[word_index]

    def validate(self) -> List[str]:
        """
        Check ordering invariants.

        Returns:
            Human-readable problems, empty when the index is well formed
        """
        problems = []
        previous: Optional[Sentence] = None

        for i, sentence in enumerate(self.sentences):
            if sentence.start_time > sentence.end_time:
                problems.append(
                    f"sentence {i}: startTime {sentence.start_time} is after endTime {sentence.end_time}"
                )
            if previous is not None:
                if sentence.start_time < previous.start_time:
                    problems.append(f"sentence {i}: starts before sentence {i - 1}")
                elif sentence.start_time < previous.end_time:
                    problems.append(f"sentence {i}: overlaps sentence {i - 1}")
            previous = sentence

            prev_word: Optional[Word] = None
            for j, word in enumerate(sentence.words):
                if word.start >= word.end:
                    problems.append(
                        f"sentence {i} word {j} ({word.text!r}): start {word.start} is not before end {word.end}"
                    )
                if prev_word is not None:
                    if word.start < prev_word.start:
                        problems.append(f"sentence {i} word {j}: starts before word {j - 1}")
                    elif word.start < prev_word.end:
                        problems.append(f"sentence {i} word {j}: overlaps word {j - 1}")
                prev_word = word

        return problems

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        return {
            "version": self.version,
            "sentenceCount": len(self.sentences),
            "sentences": [s.to_dict() for s in self.sentences],
        }

    @classmethod
    def from_dict(cls, data: Union[Dict[str, Any], List[Dict[str, Any]]]) -> "TimeIndex":
        """Build from a timing document or a bare list of sentences."""
        if isinstance(data, list):
            return cls(sentences=tuple(Sentence.from_dict(s) for s in data))

        return cls(
            sentences=tuple(Sentence.from_dict(s) for s in data.get("sentences", [])),
            version=data.get("version", "1.0"),
        )

    def save(self, output_path: Path) -> Path:
        """Save timing map to JSON file."""
        output_path = Path(output_path).with_suffix(".json")
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

        logger.success(f"Saved timing map: {output_path}")
        return output_path

    @classmethod
    def load(cls, path: Path, validation: Optional[str] = None) -> "TimeIndex":
        """
        Load timing map from JSON file.

        Args:
            path: Timing JSON file
            validation: off, warn or strict (default from config)

        Returns:
            Loaded TimeIndex
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        index = cls.from_dict(data)
        check_time_index(index, validation)
        logger.debug(f"Loaded {len(index)} sentences from {path}")
        return index


def check_time_index(index: TimeIndex, mode: Optional[str] = None) -> List[str]:
    """
    Validate a TimeIndex according to the configured policy.

    ``warn`` logs every problem and keeps the data, ``strict`` raises
    TimeIndexError on the first report, ``off`` skips the checks.
    """
    mode = (mode or config.validation).lower()
    if mode not in VALIDATION_MODES:
        raise ValueError(f"Unknown validation mode: {mode}")
    if mode == "off":
        return []

    problems = index.validate()
    if problems and mode == "strict":
        raise TimeIndexError(
            f"{len(problems)} timing problem(s): " + "; ".join(problems)
        )
    for problem in problems:
        logger.warning(f"Timing data: {problem}")
    return problems
