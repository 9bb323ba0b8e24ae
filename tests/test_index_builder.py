from audiosync.readalong.index_builder import build_time_index, normalize_word, sentence_words
from audiosync.readalong.timing_map import Word

STAMPS = [
    {"word": "Hello,", "start": 0.0, "end": 0.4},
    {"word": "world!", "start": 0.5, "end": 1.0},
    {"word": "It's", "start": 1.5, "end": 1.8},
    {"word": "a", "start": 1.8, "end": 1.9},
    {"word": "test.", "start": 1.9, "end": 2.4},
]


def test_normalization():
    assert normalize_word("It's") == "its"
    assert normalize_word("“Hello,”") == "hello"
    assert sentence_words("Wait—what? Yes – no.") == ["wait", "what", "yes", "no"]


def test_builds_sentences_from_word_stamps():
    index, problems = build_time_index(STAMPS, ["Hello, world!", "It's a test."])

    assert problems == []
    assert len(index) == 2
    first, second = index
    assert first.words == (Word("Hello", 0.0, 0.4), Word("world", 0.5, 1.0))
    assert (first.start_time, first.end_time) == (0.0, 1.0)
    assert second.text == "It's a test."
    assert [w.text for w in second.words] == ["Its", "a", "test"]
    assert (second.start_time, second.end_time) == (1.5, 2.4)


def test_missing_word_is_reported_and_does_not_advance():
    index, problems = build_time_index(STAMPS, ["Hello there world!", "It's a test."])

    assert [w.text for w in index[0].words] == ["Hello", "world"]
    assert len(problems) == 1
    assert problems[0].sentence_index == 0
    assert problems[0].missing_words == ["there"]
    assert problems[0].words_found == 2
    assert not problems[0].dropped


def test_sentence_without_stamps_is_dropped():
    index, problems = build_time_index(STAMPS, ["Hello, world!", "Nothing matches", "It's a test."])

    assert [s.text for s in index] == ["Hello, world!", "It's a test."]
    assert problems[0].dropped
    assert problems[0].to_dict()["missingWords"] == ["nothing", "matches"]


def test_translations_pass_through():
    index, _ = build_time_index(STAMPS, ["Hello, world!", "It's a test."], translations=[{"th": "สวัสดี"}])

    assert index[0].translation == {"th": "สวัสดี"}
    assert index[1].translation is None
