from typing import List, Optional

import pytest

from audiosync.readalong.audio_source import (
    AudioLoadError,
    AudioPlaybackError,
    AudioSource,
    DoneCallback,
)
from audiosync.readalong.player import PlaybackController
from audiosync.readalong.scheduler import ManualScheduler
from audiosync.readalong.timing_map import Sentence, TimeIndex, Word


class FakeAudioSource(AudioSource):
    """Scriptable source: the test sets the clock and decides outcomes."""

    def __init__(self, duration: float = 10.0):
        self._duration = duration
        self.position = 0.0
        self.rate = 1.0
        self.playing = False
        self.fail_open = False
        self.reject_play = False
        self.defer_play = False
        self._deferred: List[DoneCallback] = []
        self.play_requests = 0
        self.seeks: List[float] = []

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def current_time(self) -> float:
        return self.position

    def open(self, done: DoneCallback) -> None:
        if self.fail_open:
            done(AudioLoadError("broken file"))
        else:
            done(None)

    def play(self, done: DoneCallback) -> None:
        self.play_requests += 1
        if self.defer_play:
            self._deferred.append(done)
            return
        self._settle(done)

    def settle_play(self, error: Optional[Exception] = None) -> None:
        for done in self._deferred:
            if error is None:
                self.playing = True
            done(error)
        self._deferred.clear()

    def _settle(self, done: DoneCallback) -> None:
        if self.reject_play:
            done(AudioPlaybackError("autoplay blocked"))
        else:
            self.playing = True
            done(None)

    def pause(self) -> None:
        self.playing = False

    def seek(self, time: float) -> None:
        self.seeks.append(time)
        self.position = time

    def set_rate(self, rate: float) -> None:
        self.rate = rate

    def finish(self) -> None:
        self.playing = False
        self.position = self._duration
        self._signal_ended()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def source():
    return FakeAudioSource(duration=10.0)


@pytest.fixture
def hello_world():
    """One sentence [0, 10]; 'world' starts 0.8s after 'Hello' ends."""
    return TimeIndex(sentences=(
        Sentence(
            text="Hello world",
            start_time=0.0,
            end_time=10.0,
            words=(Word("Hello", 0.0, 1.0), Word("world", 1.8, 2.5)),
        ),
    ))


@pytest.fixture
def gap_index():
    """Word 1 ends at 5.0, word 2 starts at 5.7 (a 0.7s gap)."""
    return TimeIndex(sentences=(
        Sentence(
            text="one two three",
            start_time=0.0,
            end_time=10.0,
            words=(
                Word("one", 3.0, 4.0),
                Word("two", 4.0, 5.0),
                Word("three", 5.7, 6.5),
            ),
        ),
    ))


@pytest.fixture
def story_index():
    return TimeIndex(sentences=(
        Sentence(
            text="The cat sat.",
            start_time=0.0,
            end_time=2.0,
            words=(Word("The", 0.0, 0.4), Word("cat", 0.5, 1.0), Word("sat", 1.2, 2.0)),
            translation={"th": "แมวนั่ง"},
        ),
        Sentence(
            text="It purred.",
            start_time=3.0,
            end_time=5.0,
            words=(Word("It", 3.0, 3.5), Word("purred", 3.6, 5.0)),
        ),
    ))


@pytest.fixture
def make_player(scheduler):
    def _make(source, index, **options):
        player = PlaybackController(scheduler, snap_threshold=0.3, seek_lead_in=0.05, **options)
        player.load(source, index)
        return player

    return _make


@pytest.fixture
def make_source():
    return FakeAudioSource
