"""
Playback Controller

Owns one audio source, the playback state and the tick loop that keeps
the highlighted sentence and word in step with the audio clock.

All faults are captured in ``PlaybackState.error``; nothing raised by the
source or by caller callbacks escapes the public methods.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, List, Optional

from audiosync.readalong.audio_source import AudioSource
from audiosync.readalong.resolver import NO_INDEX, Position, resolve
from audiosync.readalong.scheduler import Scheduler
from audiosync.readalong.timing_map import TimeIndex
from audiosync.utils import logger
from audiosync.utils.config import config


class ErrorKind(str, Enum):
    """Recoverable faults surfaced through PlaybackState.error."""

    LOAD_FAILURE = "load_failure"
    PLAYBACK_REJECTED = "playback_rejected"


@dataclass
class PlaybackState:
    """Snapshot of a playback session."""

    is_playing: bool = False
    current_time: float = 0.0
    duration: float = 0.0
    current_sentence_index: int = NO_INDEX
    current_word_index: int = NO_INDEX
    playback_rate: float = 1.0
    is_loaded: bool = False
    error: Optional[ErrorKind] = None


StateListener = Callable[[PlaybackState], None]


class PlaybackController:
    """
    Read-along playback controller.

    Usage:
        scheduler = ManualScheduler()
        player = PlaybackController(scheduler, on_word_change=highlight)
        player.load(ClockAudioSource("ch01.wav"), time_index)
        player.play()
    """

    def __init__(
        self,
        scheduler: Scheduler,
        snap_threshold: Optional[float] = None,
        seek_lead_in: Optional[float] = None,
        on_sentence_change: Optional[Callable[[int], None]] = None,
        on_word_change: Optional[Callable[[int], None]] = None,
        on_ended: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize the controller.

        Args:
            scheduler: Frame clock driving the tick loop
            snap_threshold: Gap snapping distance (default from config)
            seek_lead_in: Seconds to start before a word (default from config)
            on_sentence_change: Called with the new sentence index
            on_word_change: Called with the new word index
            on_ended: Called when the audio finishes on its own
        """
        self.scheduler = scheduler
        self.snap_threshold = config.snap_threshold if snap_threshold is None else snap_threshold
        self.seek_lead_in = config.seek_lead_in if seek_lead_in is None else seek_lead_in
        self.on_sentence_change = on_sentence_change
        self.on_word_change = on_word_change
        self.on_ended = on_ended

        self._state = PlaybackState()
        self._source: Optional[AudioSource] = None
        self._time_index = TimeIndex()
        self._listeners: List[StateListener] = []
        self._tick_handle: Any = None
        # Bumped to invalidate open/play requests that have not settled yet
        self._load_request = 0
        self._play_request = 0
        self._play_pending = False
        self._closed = False

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def state(self) -> PlaybackState:
        """Copy of the current playback state."""
        return replace(self._state)

    @property
    def time_index(self) -> TimeIndex:
        return self._time_index

    @property
    def source(self) -> Optional[AudioSource]:
        return self._source

    @property
    def is_looping(self) -> bool:
        """True while a tick is scheduled."""
        return self._tick_handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Receive a state snapshot after every change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Session

    def load(self, source: AudioSource, time_index: TimeIndex) -> None:
        """
        Bind a new audio source and TimeIndex.

        The previous source is stopped and released. State returns to its
        initial values until the source's metadata resolves.
        """
        if self._closed:
            return

        self._release_source()
        self._load_request += 1
        request = self._load_request

        self._source = source
        self._time_index = time_index
        self._state = PlaybackState(playback_rate=self._state.playback_rate)
        source.on_ended = self._handle_ended
        self._notify()

        def opened(error: Optional[Exception]) -> None:
            if request != self._load_request or self._closed:
                return
            if error is not None:
                logger.error(f"Failed to load audio: {error}")
                self._update(is_loaded=False, error=ErrorKind.LOAD_FAILURE)
                return

            source.set_rate(self._state.playback_rate)
            logger.debug(f"Loaded {source!r} ({source.duration:.2f}s, {len(time_index)} sentences)")
            self._update(duration=source.duration, is_loaded=True, error=None)

        try:
            source.open(opened)
        except Exception as e:
            opened(e)

    def close(self) -> None:
        """Stop the loop, release the source and ignore all later calls."""
        if self._closed:
            return
        self._release_source()
        self._state = replace(self._state, is_playing=False)
        self._listeners.clear()
        self._closed = True

    def _release_source(self) -> None:
        self._halt()
        if self._source is not None:
            self._source.pause()
            self._source.on_ended = None
        self._source = None

    # ------------------------------------------------------------------
    # Transport

    def play(self) -> None:
        """
        Request playback. The outcome lands in the state when the source
        settles: playing with the loop running, or PLAYBACK_REJECTED.
        """
        source = self._source
        if self._closed or source is None:
            return
        if self._state.is_playing or self._play_pending:
            return
        if self._state.error is ErrorKind.LOAD_FAILURE:
            logger.warning("Cannot play: audio failed to load")
            return

        self._play_pending = True
        self._play_request += 1
        request = self._play_request

        def started(error: Optional[Exception]) -> None:
            if request != self._play_request or self._closed:
                # Paused, reset or reloaded before the source answered
                if error is None:
                    source.pause()
                return

            self._play_pending = False
            if error is not None:
                logger.warning(f"Playback rejected: {error}")
                self._update(is_playing=False, error=ErrorKind.PLAYBACK_REJECTED)
                return

            self._update(is_playing=True, error=None)
            self._start_loop()

        try:
            source.play(started)
        except Exception as e:
            started(e)

    def pause(self) -> None:
        """Stop playback and the tick loop."""
        if self._closed or self._source is None:
            return

        self._halt()
        self._source.pause()
        if self._state.is_playing:
            self._update(is_playing=False)

    def toggle_play(self) -> None:
        if self._state.is_playing:
            self.pause()
        else:
            self.play()

    def reset(self) -> None:
        """
        Stop and rewind to the start, clearing the position tracking.
        The source and TimeIndex stay bound.
        """
        if self._closed or self._source is None:
            return

        self._halt()
        self._source.pause()
        self._source.seek(0.0)

        error = self._state.error
        if error is ErrorKind.PLAYBACK_REJECTED:
            error = None
        self._update(
            is_playing=False,
            current_time=0.0,
            current_sentence_index=NO_INDEX,
            current_word_index=NO_INDEX,
            error=error,
        )

    # ------------------------------------------------------------------
    # Seeking

    def seek_to(self, time: float) -> None:
        """
        Jump to ``time`` (clamped to the media) and re-resolve the position
        from scratch; a word kept through a gap before the seek is dropped.
        """
        if self._closed or self._source is None:
            return

        time = min(max(time, 0.0), self._state.duration)
        self._source.seek(time)
        position = self._resolve(time)
        self._update(
            current_time=time,
            current_sentence_index=position.sentence_index,
            current_word_index=position.word_index,
        )

    def seek_to_word(self, sentence_index: int, word_index: int) -> None:
        """Seek slightly before the start of a word."""
        word = self._time_index.word_at(sentence_index, word_index)
        if word is None:
            logger.warning(f"Invalid seek target: sentence {sentence_index}, word {word_index}")
            return
        self.seek_to(word.start - self.seek_lead_in)

    def seek_to_sentence(self, sentence_index: int) -> None:
        """Seek to the start of a sentence."""
        if not 0 <= sentence_index < len(self._time_index):
            logger.warning(f"Invalid seek target: sentence {sentence_index}")
            return
        self.seek_to(self._time_index[sentence_index].start_time)

    def set_playback_rate(self, rate: float) -> None:
        if self._closed:
            return
        if rate <= 0:
            logger.warning(f"Ignoring playback rate {rate}: must be positive")
            return

        if self._source is not None:
            self._source.set_rate(rate)
        self._update(playback_rate=rate)

    # ------------------------------------------------------------------
    # Tick loop

    def _start_loop(self) -> None:
        if self._tick_handle is None:
            self._tick_handle = self.scheduler.request_tick(self._tick)

    def _stop_loop(self) -> None:
        if self._tick_handle is not None:
            self.scheduler.cancel_tick(self._tick_handle)
            self._tick_handle = None

    def _halt(self) -> None:
        """Cancel the tick loop and any play request still in flight."""
        self._stop_loop()
        self._play_request += 1
        self._play_pending = False

    def _tick(self) -> None:
        self._tick_handle = None
        source = self._source
        if self._closed or source is None or not self._state.is_playing:
            return

        current_time = source.current_time
        # Reading the clock may have ended the media
        if not self._state.is_playing or source is not self._source:
            return

        previous = self._state
        position = self._resolve(current_time)
        sentence_index = position.sentence_index
        word_index = position.word_index

        # Keep the highlighted word through gaps; "no sentence" clears it
        if word_index == NO_INDEX and sentence_index != NO_INDEX:
            word_index = previous.current_word_index

        sentence_changed = sentence_index != previous.current_sentence_index
        word_changed = word_index != previous.current_word_index

        if sentence_changed or word_changed or current_time != previous.current_time:
            self._update(
                current_time=current_time,
                current_sentence_index=sentence_index,
                current_word_index=word_index,
            )
            if sentence_changed and sentence_index != NO_INDEX:
                self._emit(self.on_sentence_change, sentence_index)
            if word_changed and word_index != NO_INDEX:
                self._emit(self.on_word_change, word_index)

        if self._state.is_playing and not self._closed:
            self._start_loop()

    def _handle_ended(self) -> None:
        if self._closed:
            return

        self._halt()
        if self._source is not None:
            self._source.seek(0.0)

        self._update(
            is_playing=False,
            current_time=0.0,
            current_sentence_index=NO_INDEX,
            current_word_index=NO_INDEX,
        )
        logger.debug("Playback finished")
        self._emit(self.on_ended)

    # ------------------------------------------------------------------
    # Helpers

    def _resolve(self, time: float) -> Position:
        return resolve(self._time_index, time, self.snap_threshold)

    def _update(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            self._emit(listener, replace(self._state))

    def _emit(self, callback: Optional[Callable[..., None]], *args: Any) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Playback callback {getattr(callback, '__name__', callback)!r} failed: {e}")
