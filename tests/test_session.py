import pytest

from audiosync.readalong.session import close_session, open_session, playback_session


def test_open_and_close_session(source, scheduler, story_index):
    player = open_session(source, story_index, scheduler, snap_threshold=0.2)

    assert player.snap_threshold == 0.2
    assert player.state.is_loaded
    player.play()
    assert scheduler.pending == 1

    close_session(player)
    assert scheduler.pending == 0
    assert player.closed


def test_context_manager_tears_down_on_error(source, scheduler, story_index):
    with pytest.raises(RuntimeError):
        with playback_session(source, story_index, scheduler) as player:
            player.play()
            raise RuntimeError("host crashed")

    assert player.closed
    assert scheduler.pending == 0
    assert not source.playing
