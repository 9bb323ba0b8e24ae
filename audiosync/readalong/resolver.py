"""
Position Resolver

Maps a playback time to a (sentence, word) position in a TimeIndex.
Pure and stateless; safe to call with any time value.
"""

from typing import NamedTuple, Optional

from audiosync.readalong.timing_map import TimeIndex

NO_INDEX = -1
DEFAULT_SNAP_THRESHOLD = 0.3

# Float tolerance for the snap comparison (1.3 - 1.0 is not exactly 0.3)
_EPSILON = 1e-9


class Position(NamedTuple):
    """Resolved read-along position; -1 means none."""

    sentence_index: int
    word_index: int


NOWHERE = Position(NO_INDEX, NO_INDEX)


def resolve(
    time_index: TimeIndex,
    time: float,
    snap_threshold: Optional[float] = None,
) -> Position:
    """
    Find the sentence and word playing at ``time``.

    The first sentence whose closed interval contains ``time`` wins. Inside
    it, the first word with ``start <= time < end`` wins. In a gap between
    words the nearest word boundary is used if it lies within
    ``snap_threshold`` seconds; otherwise the word index is -1, meaning the
    caller should keep whatever word it already shows.

    Args:
        time_index: Sentence/word timestamps
        time: Playback time in seconds
        snap_threshold: Max gap distance to snap (default 0.3)

    Returns:
        Position, NOWHERE when no sentence contains ``time``
    """
    if snap_threshold is None:
        snap_threshold = DEFAULT_SNAP_THRESHOLD

    for i, sentence in enumerate(time_index.sentences):
        if not sentence.contains(time):
            continue

        for j, word in enumerate(sentence.words):
            if word.start <= time < word.end:
                return Position(i, j)

        closest = _closest_word(sentence.words, time, snap_threshold)
        return Position(i, closest)

    return NOWHERE


def _closest_word(words, time: float, snap_threshold: float) -> int:
    closest = NO_INDEX
    min_distance = float("inf")

    for j, word in enumerate(words):
        if time < word.start:
            distance = word.start - time
        elif time >= word.end:
            distance = time - word.end
        else:
            continue
        # Strict comparison keeps the earlier word on ties
        if distance < min_distance:
            min_distance = distance
            closest = j

    if closest != NO_INDEX and min_distance <= snap_threshold + _EPSILON:
        return closest
    return NO_INDEX
