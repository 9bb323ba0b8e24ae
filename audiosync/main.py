#!/usr/bin/env python3
"""
Read-Along Sync - Main CLI

Inspect and build sentence/word timing files, locate the text playing
at a given time, and preview read-along highlighting on the terminal.
"""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import click
from rich.live import Live
from rich.table import Table
from rich.text import Text

from audiosync import __version__
from audiosync.readalong.audio_source import ClockAudioSource
from audiosync.readalong.index_builder import build_time_index
from audiosync.readalong.player import PlaybackState
from audiosync.readalong.resolver import NO_INDEX, resolve
from audiosync.readalong.scheduler import AsyncioScheduler
from audiosync.readalong.session import playback_session
from audiosync.readalong.timing_map import TimeIndex, TimeIndexError
from audiosync.utils import logger
from audiosync.utils.config import config


def _load_index(timing_file: str, validation: Optional[str] = None) -> TimeIndex:
    try:
        return TimeIndex.load(Path(timing_file), validation=validation)
    except TimeIndexError as e:
        raise click.ClickException(str(e))
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise click.ClickException(f"Invalid timing file {timing_file}: {e}")


def _render_position(index: TimeIndex, sentence_index: int, word_index: int) -> Text:
    if sentence_index == NO_INDEX:
        return Text("(no sentence)", style="muted")
    sentence = index[sentence_index]
    return logger.render_words([w.text for w in sentence.words], word_index)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", is_flag=True, help="Show debug output")
def cli(verbose: bool):
    """
    Read-Along Sync

    Keep text highlighting in step with narrated audio.
    """
    if verbose:
        logger.set_verbose(True)


@cli.command()
@click.argument("timing_file", type=click.Path(exists=True))
def inspect(timing_file: str):
    """Show the sentences of a timing file and any timing problems."""
    index = _load_index(timing_file, validation="off")
    logger.header(f"Timing map: {Path(timing_file).name}")

    table = Table(show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Sentence")

    for i, sentence in enumerate(index):
        table.add_row(
            str(i),
            f"{sentence.start_time:.2f}",
            f"{sentence.end_time:.2f}",
            str(len(sentence.words)),
            sentence.text,
        )
    logger.console.print(table)

    logger.info(f"{len(index)} sentences, ends at {index.end_time:.2f}s")
    problems = index.validate()
    if problems:
        for problem in problems:
            logger.warning(problem)
    else:
        logger.success("Timing data is well formed")


@cli.command()
@click.argument("timing_file", type=click.Path(exists=True))
@click.argument("time", type=float)
@click.option(
    "--snap",
    type=float,
    default=None,
    help=f"Gap snap threshold in seconds (default: {config.snap_threshold})",
)
def locate(timing_file: str, time: float, snap: Optional[float]):
    """Show the sentence and word playing at TIME seconds."""
    index = _load_index(timing_file)
    position = resolve(index, time, config.snap_threshold if snap is None else snap)

    logger.info(
        f"t={time:.3f}s -> sentence {position.sentence_index}, word {position.word_index}"
    )
    logger.console.print(_render_position(index, position.sentence_index, position.word_index))


@cli.command()
@click.argument("words_file", type=click.Path(exists=True))
@click.argument("sentences_file", type=click.Path(exists=True))
@click.option(
    "-o", "--output",
    type=click.Path(),
    required=True,
    help="Output timing JSON path",
)
def build(words_file: str, sentences_file: str, output: str):
    """
    Build a timing file from word timestamps and sentence texts.

    WORDS_FILE is a JSON list of {"word", "start", "end"} objects.
    SENTENCES_FILE is a JSON list of strings or one sentence per line.
    """
    logger.step("Reading word timestamps", 1, 3)
    with open(words_file, "r", encoding="utf-8") as f:
        word_timestamps = json.load(f)
    if isinstance(word_timestamps, dict):
        word_timestamps = word_timestamps.get("word_timestamps", [])
    logger.info(f"{len(word_timestamps)} word timestamps")

    logger.step("Reading sentences", 2, 3)
    sentences = _read_sentences(Path(sentences_file))
    logger.info(f"{len(sentences)} sentences")

    logger.step("Aligning", 3, 3)
    index, problems = build_time_index(word_timestamps, sentences)
    index.save(Path(output))

    if problems:
        logger.warning(f"{len(problems)} sentence(s) with missing words")
    else:
        logger.success("All words timed")


def _read_sentences(path: Path) -> List[str]:
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return [str(s) for s in json.loads(raw)]
    return [line.strip() for line in raw.splitlines() if line.strip()]


@cli.command()
@click.argument("timing_file", type=click.Path(exists=True))
@click.argument("audio_file", type=click.Path(exists=True), required=False)
@click.option(
    "-d", "--duration",
    type=float,
    default=None,
    help="Timeline length when no audio file is given (default: end of last sentence)",
)
@click.option("-r", "--rate", type=float, default=1.0, help="Playback speed multiplier")
@click.option("-s", "--sentence", type=int, default=None, help="Start at this sentence")
def follow(
    timing_file: str,
    audio_file: Optional[str],
    duration: Optional[float],
    rate: float,
    sentence: Optional[int],
):
    """
    Preview read-along highlighting against the audio timeline.

    The audio is not played; its clock is followed in real time.
    """
    index = _load_index(timing_file)
    if audio_file:
        source = ClockAudioSource(path=audio_file)
    else:
        source = ClockAudioSource(duration=duration if duration is not None else index.end_time)

    logger.header(f"Following: {Path(audio_file or timing_file).name}")
    try:
        state = asyncio.run(_follow(index, source, rate, sentence))
    except KeyboardInterrupt:
        logger.warning("Stopped")
        return

    if state.error is not None:
        raise click.ClickException(f"Playback failed: {state.error.value}")
    logger.success("Finished")


async def _follow(
    index: TimeIndex,
    source: ClockAudioSource,
    rate: float,
    start_sentence: Optional[int],
) -> PlaybackState:
    done = asyncio.Event()

    with Live(Text(""), console=logger.console, auto_refresh=False) as live:

        def render(state: PlaybackState) -> None:
            line = Text(f"[{state.current_time:6.2f}s] ", style="muted")
            line.append_text(_render_position(index, state.current_sentence_index, state.current_word_index))
            live.update(line, refresh=True)

        with playback_session(
            source,
            index,
            AsyncioScheduler(),
            on_ended=done.set,
        ) as player:
            player.subscribe(render)
            if player.state.error is not None:
                return player.state

            player.set_playback_rate(rate)
            if start_sentence is not None:
                player.seek_to_sentence(start_sentence)
            player.play()

            if player.state.error is None:
                await done.wait()
            return player.state


if __name__ == "__main__":
    cli()
