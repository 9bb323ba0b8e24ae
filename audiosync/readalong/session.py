"""
Playback sessions with guaranteed teardown.
"""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from audiosync.readalong.audio_source import AudioSource
from audiosync.readalong.player import PlaybackController
from audiosync.readalong.scheduler import Scheduler
from audiosync.readalong.timing_map import TimeIndex


def open_session(
    source: AudioSource,
    time_index: TimeIndex,
    scheduler: Scheduler,
    **options,
) -> PlaybackController:
    """
    Create a controller and load ``source`` with ``time_index``.

    Keyword options are passed to PlaybackController. Pair with
    close_session, or use ``playback_session`` as a context manager.
    """
    controller = PlaybackController(scheduler, **options)
    controller.load(source, time_index)
    return controller


def close_session(controller: PlaybackController) -> None:
    """Stop the tick loop and release the audio source."""
    controller.close()


@contextmanager
def playback_session(
    source: AudioSource,
    time_index: TimeIndex,
    scheduler: Scheduler,
    on_sentence_change: Optional[Callable[[int], None]] = None,
    on_word_change: Optional[Callable[[int], None]] = None,
    on_ended: Optional[Callable[[], None]] = None,
    **options,
) -> Iterator[PlaybackController]:
    """
    Context manager around open_session/close_session.

    Example:
        with playback_session(source, index, scheduler) as player:
            player.play()
    """
    controller = open_session(
        source,
        time_index,
        scheduler,
        on_sentence_change=on_sentence_change,
        on_word_change=on_word_change,
        on_ended=on_ended,
        **options,
    )
    try:
        yield controller
    finally:
        close_session(controller)
