"""
Audio Sources

The playable resource behind a playback session. The engine never decodes
audio; a source only reports metadata, keeps a playback clock and signals
when the media ends.
"""

import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Union

import soundfile as sf

from audiosync.utils import logger

DoneCallback = Callable[[Optional[Exception]], None]


class AudioLoadError(Exception):
    """Audio could not be opened or its metadata could not be read."""


class AudioPlaybackError(Exception):
    """The source refused to start playback."""


class AudioSource(ABC):
    """
    Interface for a playable audio resource.

    ``open`` and ``play`` are requests: they report their outcome through
    ``done(error)``, which may run before they return or later.
    """

    on_ended: Optional[Callable[[], None]] = None

    @abstractmethod
    def open(self, done: DoneCallback) -> None:
        """Resolve metadata. ``duration`` is valid once done(None) ran."""

    @abstractmethod
    def play(self, done: DoneCallback) -> None:
        """Request playback start."""

    @abstractmethod
    def pause(self) -> None:
        """Stop the playback clock."""

    @abstractmethod
    def seek(self, time: float) -> None:
        """Move the playback clock."""

    @abstractmethod
    def set_rate(self, rate: float) -> None:
        """Change the playback speed multiplier."""

    @property
    @abstractmethod
    def current_time(self) -> float:
        """Current playback clock in seconds."""

    @property
    @abstractmethod
    def duration(self) -> float:
        """Media duration in seconds, 0.0 until opened."""

    def _signal_ended(self) -> None:
        if self.on_ended is not None:
            self.on_ended()


class ClockAudioSource(AudioSource):
    """
    Audio source driven by a wall clock.

    Duration comes from the audio file's header via soundfile, or from an
    explicit value for silent timelines. Position advances with the
    injected clock scaled by the playback rate. Reading ``current_time``
    past the end stops the clock and fires ``on_ended``.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        duration: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the clock source.

        Args:
            path: Audio file to read metadata from
            duration: Explicit duration when no file is given
            clock: Monotonic time function in seconds
        """
        self.path = Path(path) if path else None
        self._explicit_duration = duration
        self._clock = clock

        self._duration = 0.0
        self._loaded = False
        self._playing = False
        self._position = 0.0
        self._anchor = 0.0
        self._rate = 1.0

    def __repr__(self) -> str:
        target = self.path or f"{self._explicit_duration}s timeline"
        return f"ClockAudioSource({target})"

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def rate(self) -> float:
        return self._rate

    def open(self, done: DoneCallback) -> None:
        try:
            self._duration = self._read_duration()
        except AudioLoadError as e:
            self._loaded = False
            done(e)
            return

        self._loaded = True
        self._playing = False
        self._position = 0.0
        done(None)

    def _read_duration(self) -> float:
        if self.path is None:
            if self._explicit_duration is None or self._explicit_duration < 0:
                raise AudioLoadError("No audio file or duration given")
            return float(self._explicit_duration)

        try:
            info = sf.info(str(self.path))
        except (RuntimeError, OSError) as e:
            # soundfile reports unreadable files as LibsndfileError (a RuntimeError)
            raise AudioLoadError(f"Cannot read {self.path}: {e}") from e

        logger.debug(f"{self.path.name}: {info.samplerate} Hz, {info.channels} ch, {info.duration:.2f}s")
        return float(info.duration)

    def play(self, done: DoneCallback) -> None:
        if not self._loaded:
            done(AudioPlaybackError("Audio is not loaded"))
            return

        if not self._playing:
            if self._position >= self._duration:
                self._position = 0.0
            self._anchor = self._clock()
            self._playing = True
        done(None)

    def pause(self) -> None:
        if self._playing:
            self._position = self._elapsed_position()
            self._playing = False

    def seek(self, time: float) -> None:
        self._position = min(max(time, 0.0), self._duration)
        self._anchor = self._clock()

    def set_rate(self, rate: float) -> None:
        if self._playing:
            self._position = self._elapsed_position()
            self._anchor = self._clock()
        self._rate = rate

    def _elapsed_position(self) -> float:
        position = self._position + (self._clock() - self._anchor) * self._rate
        return min(position, self._duration)

    @property
    def current_time(self) -> float:
        if not self._playing:
            return self._position

        position = self._elapsed_position()
        if position >= self._duration:
            self._position = self._duration
            self._playing = False
            self._signal_ended()
        return position
