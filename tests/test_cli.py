import json

from click.testing import CliRunner

from audiosync.main import cli
from audiosync.readalong.timing_map import TimeIndex


def write_index(tmp_path, index):
    return index.save(tmp_path / "timing")


def test_inspect(tmp_path, story_index):
    path = write_index(tmp_path, story_index)
    result = CliRunner().invoke(cli, ["inspect", str(path)])

    assert result.exit_code == 0, result.output
    assert "It purred." in result.output
    assert "well formed" in result.output


def test_locate(tmp_path, story_index):
    path = write_index(tmp_path, story_index)
    result = CliRunner().invoke(cli, ["locate", str(path), "0.7"])

    assert result.exit_code == 0, result.output
    assert "sentence 0, word 1" in result.output


def test_locate_in_gap(tmp_path, story_index):
    path = write_index(tmp_path, story_index)
    result = CliRunner().invoke(cli, ["locate", str(path), "2.5"])

    assert result.exit_code == 0, result.output
    assert "no sentence" in result.output


def test_locate_rejects_malformed_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps([{"sentence": "x"}]), encoding="utf-8")
    result = CliRunner().invoke(cli, ["locate", str(path), "1"])

    assert result.exit_code != 0
    assert "Invalid timing file" in result.output


def test_build(tmp_path):
    words = tmp_path / "words.json"
    words.write_text(json.dumps({"word_timestamps": [
        {"word": "Hello", "start": 0.0, "end": 0.5},
        {"word": "there.", "start": 0.6, "end": 1.0},
    ]}), encoding="utf-8")
    sentences = tmp_path / "sentences.txt"
    sentences.write_text("Hello there.\n\n", encoding="utf-8")
    output = tmp_path / "out.json"

    result = CliRunner().invoke(cli, ["build", str(words), str(sentences), "-o", str(output)])

    assert result.exit_code == 0, result.output
    index = TimeIndex.load(output)
    assert [w.text for w in index[0].words] == ["Hello", "there"]


def test_follow_silent_timeline(tmp_path):
    index = TimeIndex.from_dict([{
        "sentence": "Hi.",
        "startTime": 0.0,
        "endTime": 0.05,
        "words": [{"word": "Hi", "start": 0.0, "end": 0.05}],
    }])
    path = write_index(tmp_path, index)

    result = CliRunner().invoke(cli, ["follow", str(path), "--rate", "2"])

    assert result.exit_code == 0, result.output
    assert "Finished" in result.output


def test_follow_unreadable_audio(tmp_path, story_index):
    path = write_index(tmp_path, story_index)
    audio = tmp_path / "bad.wav"
    audio.write_bytes(b"nope")

    result = CliRunner().invoke(cli, ["follow", str(path), str(audio)])

    assert result.exit_code != 0
    assert "load_failure" in result.output
