from __future__ import annotations

from translation_styles.segmenter import (
    MAX_PHRASES,
    MAX_SENTENCES,
    MAX_WORDS,
    extract_phrases,
    extract_sentences,
    extract_words,
    segment_text,
)


def test_sentences_split_on_terminal_punctuation_runs() -> None:
    text = "This is a sentence!   Another one here?! Yes."
    assert extract_sentences(text) == ["This is a sentence", "Another one here"]


def test_sentences_drop_short_fragments_but_keep_ten_characters() -> None:
    assert extract_sentences("Hello. World.") == []
    assert extract_sentences("abcdefghij. short") == ["abcdefghij"]


def test_sentences_are_capped() -> None:
    text = "Sentence number one is here. " * (MAX_SENTENCES + 200)
    assert len(extract_sentences(text)) == MAX_SENTENCES


def test_phrases_split_on_delimiters_and_filter_by_length() -> None:
    text = "First part here, second part here; third (inner bit) end."
    assert extract_phrases(text) == ["First part here", "second part here", "third", "inner bit"]


def test_phrases_drop_overlong_fragments() -> None:
    long_fragment = "x" * 201
    assert extract_phrases(f"{long_fragment}, tiny but fine.") == ["tiny but fine"]


def test_phrases_are_capped() -> None:
    text = "alpha beta, gamma delta, epsilon zeta. " * MAX_PHRASES
    assert len(extract_phrases(text)) == MAX_PHRASES


def test_words_are_lowercased_and_filtered() -> None:
    assert extract_words("The cat, the DOG and an ox!") == ["the", "cat", "the", "dog", "and"]


def test_words_keep_accented_letters() -> None:
    assert extract_words("Él comió café") == ["comió", "café"]


def test_words_are_capped() -> None:
    assert len(extract_words("word " * (MAX_WORDS + 10))) == MAX_WORDS


def test_empty_input_yields_empty_sequences() -> None:
    result = segment_text("empty.txt", "", "en")
    assert result.success is True
    assert result.sentences == []
    assert result.phrases == []
    assert result.words == []
    assert result.file_name == "empty.txt"
    assert result.language == "en"
