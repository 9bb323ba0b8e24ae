"""
Read-Along Module

Keeps text highlighting in step with audio playback: maps the audio clock
to the current sentence and word, and drives seeking by sentence or word.
"""

from audiosync.readalong.audio_source import (
    AudioLoadError,
    AudioPlaybackError,
    AudioSource,
    ClockAudioSource,
)
from audiosync.readalong.index_builder import AlignmentProblem, build_time_index
from audiosync.readalong.player import ErrorKind, PlaybackController, PlaybackState
from audiosync.readalong.resolver import NO_INDEX, NOWHERE, Position, resolve
from audiosync.readalong.scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from audiosync.readalong.session import close_session, open_session, playback_session
from audiosync.readalong.timing_map import (
    Sentence,
    TimeIndex,
    TimeIndexError,
    Word,
    check_time_index,
)

__all__ = [
    "AlignmentProblem",
    "AsyncioScheduler",
    "AudioLoadError",
    "AudioPlaybackError",
    "AudioSource",
    "ClockAudioSource",
    "ErrorKind",
    "ManualScheduler",
    "NO_INDEX",
    "NOWHERE",
    "PlaybackController",
    "PlaybackState",
    "Position",
    "Scheduler",
    "Sentence",
    "TimeIndex",
    "TimeIndexError",
    "Word",
    "build_time_index",
    "check_time_index",
    "close_session",
    "open_session",
    "playback_session",
    "resolve",
]
