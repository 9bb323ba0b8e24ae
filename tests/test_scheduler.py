import asyncio

from audiosync.readalong.player import PlaybackController
from audiosync.readalong.scheduler import AsyncioScheduler, ManualScheduler
from audiosync.readalong.session import playback_session


def test_manual_scheduler_runs_each_callback_once_per_frame():
    scheduler = ManualScheduler()
    calls = []

    def again():
        calls.append("again")
        scheduler.request_tick(again)

    scheduler.request_tick(again)
    scheduler.request_tick(lambda: calls.append("once"))

    assert scheduler.frame() == 2
    assert calls == ["again", "once"]
    assert scheduler.pending == 1
    assert scheduler.run(3) == 3
    assert scheduler.ticks == 5


def test_manual_scheduler_cancel():
    scheduler = ManualScheduler()
    handle = scheduler.request_tick(lambda: None)
    scheduler.cancel_tick(handle)
    scheduler.cancel_tick(handle)

    assert scheduler.frame() == 0


def test_asyncio_scheduler_ticks_until_cancelled():
    async def scenario():
        scheduler = AsyncioScheduler(interval=0.001)
        ticks = []

        def tick():
            ticks.append(1)
            if len(ticks) < 3:
                scheduler.request_tick(tick)

        scheduler.request_tick(tick)
        handle = scheduler.request_tick(lambda: ticks.append("cancelled"))
        scheduler.cancel_tick(handle)
        await asyncio.sleep(0.05)
        return ticks

    assert asyncio.run(scenario()) == [1, 1, 1]


def test_asyncio_session_plays_to_the_end(story_index, make_source):
    async def scenario():
        source = make_source(duration=5.0)
        finished = asyncio.Event()
        words = []

        with playback_session(
            source,
            story_index,
            AsyncioScheduler(interval=0.001),
            on_word_change=words.append,
            on_ended=finished.set,
        ) as player:
            player.play()
            for time in (0.1, 0.7, 3.2):
                source.position = time
                await asyncio.sleep(0.01)
            source.finish()
            await asyncio.wait_for(finished.wait(), timeout=1.0)
            assert isinstance(player, PlaybackController)
            assert not player.is_looping
        return words, player

    words, player = asyncio.run(scenario())
    assert words == [0, 1, 0]
    assert player.closed
