import pytest

from chunkscribe.text.stitcher import TAIL_LIMIT, TranscriptStitcher, dedupe_consecutive_words


def test_dedupe_keeps_first_repeats_only():
    assert dedupe_consecutive_words("go go go go", max_repeats=2) == "go go"
    assert dedupe_consecutive_words("go go go go", max_repeats=3) == "go go go"


def test_dedupe_compares_normalized_words_but_emits_originals():
    assert dedupe_consecutive_words("Go go! GO, go", max_repeats=2) == "Go go!"
    assert dedupe_consecutive_words("café Café cafe", max_repeats=1) == "café cafe"


def test_dedupe_run_broken_by_other_word_or_punctuation():
    assert dedupe_consecutive_words("no no no yes no no no", max_repeats=2) == "no no yes no no"
    assert dedupe_consecutive_words("go , go go go", max_repeats=2) == "go , go go"


def test_dedupe_collapses_whitespace():
    assert dedupe_consecutive_words("  hello \n\t world  ", max_repeats=2) == "hello world"
    assert dedupe_consecutive_words("", max_repeats=2) == ""


@pytest.mark.parametrize("bad", [0, -3])
def test_dedupe_clamps_repeat_bound_to_one(bad):
    assert dedupe_consecutive_words("yes yes yes", max_repeats=bad) == "yes"


def test_merge_drops_single_word_overlap():
    stitcher = TranscriptStitcher()
    stitcher.tail = "...said hello"
    assert stitcher.merge_with_tail("hello world") == "world"


def test_merge_prefers_largest_overlap():
    stitcher = TranscriptStitcher()
    stitcher.tail = "the cat sat"
    assert stitcher.merge_with_tail("cat sat on the mat") == "on the mat"


def test_merge_is_case_insensitive():
    stitcher = TranscriptStitcher()
    stitcher.tail = "We Went Home"
    assert stitcher.merge_with_tail("went home early") == "early"


def test_merge_without_overlap_returns_trimmed_fragment():
    stitcher = TranscriptStitcher()
    stitcher.tail = "foo bar"
    assert stitcher.merge_with_tail("   baz  qux ") == "baz qux"


def test_merge_with_empty_tail_only_dedupes():
    stitcher = TranscriptStitcher(max_repeats=2)
    assert stitcher.merge_with_tail("  hello hello hello there") == "hello hello there"


def test_merge_full_overlap_yields_nothing():
    stitcher = TranscriptStitcher()
    stitcher.tail = "hello world"
    assert stitcher.merge_with_tail("hello world") == ""
    assert stitcher.merge_with_tail("") == ""


def test_merge_respects_overlap_window():
    stitcher = TranscriptStitcher()
    stitcher.tail = "one two three"
    assert stitcher.merge_with_tail("two three four", max_overlap_words=1) == "two three four"
    assert stitcher.merge_with_tail("two three four", max_overlap_words=2) == "four"


def test_overlap_window_caps_at_six_words():
    words = "a b c d e f g"
    stitcher = TranscriptStitcher()
    stitcher.tail = words
    # Seven shared words exceed the window, so only a shorter suffix/prefix match counts.
    assert stitcher.merge_with_tail(words + " h") == words + " h"


def test_advance_tail_is_bounded():
    stitcher = TranscriptStitcher()
    for idx in range(100):
        stitcher.advance_tail(f" word{idx}")
    assert len(stitcher.tail) == TAIL_LIMIT
    assert stitcher.tail.endswith(" word99")
    stitcher.reset()
    assert stitcher.tail == ""
