from textsmith.engine.analysis import (
    analyze,
    count_syllables,
    extract_keywords,
    readability_score,
    summarize,
)


def test_repeated_words_rank_above_single_occurrences():
    keywords = extract_keywords("the quick brown fox jumps over the lazy dog quick fox")
    assert keywords[0] == "quick"
    assert keywords == ["quick", "brown", "jumps", "over", "lazy"]
    # Tokens of three characters or fewer never qualify.
    assert "fox" not in keywords and "dog" not in keywords


def test_keywords_drop_stopwords_and_punctuation():
    keywords = extract_keywords("There! Their cat's whiskers, whiskers; would THERE be whiskers?")
    assert keywords == ["whiskers", "cats"]


def test_keyword_ties_keep_first_occurrence_order():
    keywords = extract_keywords("zebra apple mango apple zebra mango kiwi")
    assert keywords == ["zebra", "apple", "mango", "kiwi"]


def test_keyword_limit():
    text = " ".join(f"word{index}" for index in range(20))
    assert len(extract_keywords(text)) == 10
    assert extract_keywords(text, 3) == ["word0", "word1", "word2"]


def test_summary_takes_leading_sentences():
    text = "First point here. Second point! Third point? Fourth."
    assert summarize(text) == "First point here. Second point!"
    assert summarize(text, 1) == "First point here."
    assert summarize(text, 10) == text
    assert summarize("  no terminal punctuation  ") == "no terminal punctuation"


def test_syllable_heuristic():
    assert count_syllables("table") == 2
    assert count_syllables("cake") == 1
    assert count_syllables("the") == 1
    assert count_syllables("rhythm") == 1
    assert count_syllables("123") == 1
    assert count_syllables("Happy,") == 2


def test_readability_score_midrange():
    assert readability_score("Happy people enjoy music.") == 34


def test_readability_score_is_clamped():
    assert readability_score("The cat sat on the mat.") == 100
    assert readability_score("Readability scoring considers syllables.") == 0
    assert readability_score("") == 0
    assert readability_score("   ") == 0


def test_analyze_bundles_all_three():
    result = analyze("Happy people enjoy music. Music makes people happy. Really.")
    assert result.keywords[:3] == ["happy", "people", "music"]
    assert result.summary == "Happy people enjoy music. Music makes people happy."
    assert 0 <= result.score <= 100
