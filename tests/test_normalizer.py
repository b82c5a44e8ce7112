"""Tests for text normalization, synonym folding and derived keyword fields."""

import pytest

from gyansathi.normalizer import (
    SynonymTable,
    calculate_importance,
    extract_keywords,
    extract_related_topics,
    extract_tags,
    nfc,
    normalize,
    tokenize,
)


class TestBasicCleaning:
    def test_punctuation_and_whitespace(self):
        assert normalize("  তোমার   নাম কি?  ") == "তোমার নাম কি"

    def test_danda_is_stripped(self):
        assert normalize("আমি ভালো আছি।") == "আমি ভালো আছি"

    def test_lowercase(self):
        assert normalize("Hello, WORLD!") == "hello world"

    def test_empty(self):
        assert normalize("") == ""
        assert normalize("।?!") == ""
        assert tokenize("") == []

    def test_composed_and_decomposed_ya_match(self):
        composed = "\u0995\u09cb\u09a5\u09be\u09df"
        decomposed = "\u0995\u09cb\u09a5\u09be\u09af\u09bc"
        assert normalize(composed) == normalize(decomposed)


class TestSynonymFolding:
    def test_single_token_variant(self):
        assert normalize("কী") == "কি"
        assert normalize("পিতা") == "বাবা"

    def test_multi_word_variant(self):
        assert normalize("তিনি কোন জায়গায় থাকেন") == nfc("তিনি কোথায় থাকেন")

    def test_phrase_tokens_are_folded_first(self):
        assert normalize("কোনো জায়গায়") == nfc("কোথায়")

    def test_longest_phrase_wins_over_canonical_token(self):
        assert normalize("কি কারণে") == "কেন"
        assert normalize("কি পরিমাণ") == "কত"

    def test_whole_tokens_only(self):
        # 'কী' inside a longer word is left alone
        assert normalize("কীর্তন") == nfc("কীর্তন")

    def test_first_declared_canonical_wins(self):
        table = SynonymTable([("ক", ["খ"]), ("গ", ["খ"])])
        assert table.apply(["খ"]) == ["ক"]

    def test_canonical_is_fixed_point(self):
        table = SynonymTable([("ক", ["খ"]), ("খ", ["গ"])])
        assert table.apply(["খ"]) == ["খ"]
        assert table.apply(["গ"]) == ["খ"]

    def test_single_pass_no_cascade(self):
        table = SynonymTable([("ক", ["খ ঘ"]), ("চ", ["ছ জ"])])
        assert table.apply(["খ", "ঘ", "ছ", "জ"]) == ["ক", "চ"]


class TestSynonymTableValidation:
    def test_collapsed_canonical_inside_phrase_rejected(self):
        with pytest.raises(ValueError):
            SynonymTable([("ক", ["ক খ"])])

    def test_canonical_must_be_clean_token(self):
        with pytest.raises(ValueError):
            SynonymTable([("কি?", ["কী"])])
        with pytest.raises(ValueError):
            SynonymTable([("কি কি", ["কী"])])

    def test_default_table_builds(self):
        assert nfc("কোথায়") in SynonymTable().canonicals


@pytest.mark.parametrize("text", [
    "তোমার নাম কী?",
    "কোনো কোন জায়গায়",
    "কি কি কারণে",
    "তিনি জন্ম নেওয়া",
    "পিতা মাতা জননী",
    "কোথাকার মানুষ, কেমনে এলেন?",
    "Hello   World!!",
    "",
])
def test_normalize_is_idempotent(text):
    once = normalize(text)
    assert normalize(once) == once


class TestDerivedFields:
    def test_keywords_drop_short_and_stop_words(self):
        keywords = extract_keywords("এবং বাংলাদেশ একটি সুন্দর দেশ বাংলাদেশ")
        assert keywords == [nfc("বাংলাদেশ"), nfc("সুন্দর"), nfc("দেশ")]

    def test_keywords_are_unique(self):
        keywords = extract_keywords("ঢাকা ঢাকা ঢাকা শহর")
        assert len(keywords) == len(set(keywords))

    def test_tags_by_frequency(self):
        tags = extract_tags("নদী পাহাড় নদী সাগর নদী পাহাড়")
        assert tags[0] == nfc("নদী")
        assert tags[1] == nfc("পাহাড়")

    def test_related_topics_are_long_keywords(self):
        topics = extract_related_topics("ঢাকা বাংলাদেশের রাজধানী শহর")
        assert all(len(t) > 4 for t in topics)
        assert nfc("বাংলাদেশের") in topics

    def test_importance(self):
        assert calculate_importance("ছোট লেখা") == pytest.approx(1.0)
        assert calculate_importance("১৯৫২ সালে") == pytest.approx(1.3)
        assert calculate_importance("তার নাম রহিম, ১৯৫২ সালে") == pytest.approx(1.5)
        assert calculate_importance("ক" * 1200) == pytest.approx(2.0)
