import pytest

from gyansathi.knowledge import KnowledgeItem, QuestionAnswerPair
from gyansathi.search import FuzzyIndex, SearchStore
from gyansathi.similarity import SimilarityEngine


@pytest.fixture
def store():
    return SearchStore()


@pytest.fixture
def tagore():
    return KnowledgeItem("রবীন্দ্রনাথ ঠাকুর", "রবীন্দ্রনাথ ঠাকুর ১৮৬১ সালে জন্মগ্রহণ করেন।")


@pytest.fixture
def dhaka():
    return KnowledgeItem("ঢাকা", "ঢাকা বাংলাদেশের রাজধানী এবং বৃহত্তম শহর।")


# ── FuzzyIndex ────────────────────────────────────────────────────────────────

class TestFuzzyIndex:
    def test_weights_are_normalized(self, tagore):
        index = FuzzyIndex([tagore], {"title": 2.0, "content": 2.0}, 0.4)
        assert index.fields == {"title": 0.5, "content": 0.5}

    def test_zero_weights_rejected(self):
        with pytest.raises(ValueError):
            FuzzyIndex([], {"title": 0.0}, 0.4)

    def test_matching_record_scores_low(self, tagore, dhaka):
        index = FuzzyIndex([tagore, dhaka], {"title": 1.0}, 0.4)
        results = index.search("রবীন্দ্রনাথ ঠাকুর", 0.5)
        assert [r for r, _ in results] == [tagore]
        assert 0.0 <= results[0][1] < 0.5

    def test_unmatched_record_has_no_score(self, dhaka):
        index = FuzzyIndex([dhaka], {"title": 1.0}, 0.4)
        assert index.score("সম্পূর্ণ আলাদা প্রশ্ন", index.entries[0][1]) is None

    def test_empty_query(self, tagore):
        index = FuzzyIndex([tagore], {"title": 1.0}, 0.4)
        assert index.search("", 0.5) == []

    def test_list_fields_are_joined(self, tagore):
        index = FuzzyIndex([tagore], {"keywords": 1.0}, 0.4)
        assert index.entries[0][1]["keywords"] == " ".join(tagore.keywords)


# ── Mutations ────────────────────────────────────────────────────────────────

class TestMutations:
    def test_add_and_get(self, store, tagore):
        store.add_knowledge(tagore)
        assert store.get_knowledge(tagore.id) is tagore
        assert store.get_knowledge("missing") is None

    def test_duplicate_ids_rejected(self, store, tagore):
        store.add_knowledge(tagore)
        with pytest.raises(ValueError):
            store.add_knowledge(KnowledgeItem("অন্য", "অন্য লেখা", id=tagore.id))

        pair = QuestionAnswerPair("ক?", "খ")
        store.add_question_answer(pair)
        with pytest.raises(ValueError):
            store.add_question_answer(QuestionAnswerPair("গ?", "ঘ", id=pair.id))

    def test_delete_reports_removal(self, store, tagore):
        store.add_knowledge(tagore)
        assert store.delete_knowledge(tagore.id) is True
        assert store.delete_knowledge(tagore.id) is False
        assert store.search_knowledge("রবীন্দ্রনাথ ঠাকুর") == []

    def test_new_items_are_searchable_immediately(self, store, tagore):
        assert store.search_knowledge("রবীন্দ্রনাথ ঠাকুর") == []
        store.add_knowledge(tagore)
        assert store.search_knowledge("রবীন্দ্রনাথ ঠাকুর")[0].item is tagore

    def test_replace_and_clear(self, store, tagore, dhaka):
        pair = QuestionAnswerPair("ক?", "খ")
        store.replace_all([tagore, dhaka], [pair])
        assert len(store.knowledge_items()) == 2
        assert store.question_answer_pairs() == [pair]

        store.clear_knowledge()
        store.clear_question_answers()
        assert store.knowledge_items() == []
        assert store.match_question_answer("ক?") is None

    def test_read_access_returns_copies(self, store, tagore):
        store.add_knowledge(tagore)
        store.knowledge_items().clear()
        assert len(store.knowledge_items()) == 1


# ── Knowledge search ─────────────────────────────────────────────────────────

class TestSearchKnowledge:
    def test_blank_query(self, store, tagore):
        store.add_knowledge(tagore)
        assert store.search_knowledge(" ? ") == []

    def test_index_hit(self, store, tagore, dhaka):
        store.replace_all([tagore, dhaka], [])
        results = store.search_knowledge("রবীন্দ্রনাথ ঠাকুর কত সালে জন্মগ্রহণ করেন?")
        assert results[0].item is tagore
        assert results[0].method == "index"

    def test_limit(self, store):
        items = [KnowledgeItem("নদী", f"নদী নম্বর {i}") for i in range(5)]
        store.replace_all(items, [])
        assert len(store.search_knowledge("নদী", limit=2)) == 2
        assert len(store.search_knowledge("নদী")) == 3

    def test_topic_narrows_hits(self, store, tagore, dhaka, monkeypatch):
        other = KnowledgeItem("নজরুল", "কাজী নজরুল ইসলাম বিদ্রোহী কবি।")
        store.replace_all([tagore, dhaka, other], [])
        fake_hits = [(dhaka, 0.1), (other, 0.3), (tagore, 0.45)]
        monkeypatch.setattr(store._knowledge_index, "search", lambda query, threshold: fake_hits)

        results = store.search_knowledge("কবি", current_topic="রবীন্দ্রনাথ ঠাকুর")
        assert [r.item for r in results] == [dhaka, tagore]

    def test_topic_without_survivors_keeps_all_hits(self, store, tagore, dhaka, monkeypatch):
        store.replace_all([tagore, dhaka], [])
        fake_hits = [(dhaka, 0.3), (tagore, 0.45)]
        monkeypatch.setattr(store._knowledge_index, "search", lambda query, threshold: fake_hits)

        results = store.search_knowledge("শহর", current_topic="অজানা বিষয়")
        assert [r.item for r in results] == [dhaka, tagore]

    def test_keyword_scan_fallback(self, store, tagore, dhaka, monkeypatch):
        store.replace_all([tagore, dhaka], [])
        monkeypatch.setattr(store._knowledge_index, "search", lambda query, threshold: [])

        results = store.search_knowledge("রাজধানী")
        assert [r.item for r in results] == [dhaka]
        assert results[0].method == "keyword"
        assert results[0].score == 1.0

    def test_keyword_scan_ignores_short_words(self, store, dhaka, monkeypatch):
        store.replace_all([dhaka], [])
        monkeypatch.setattr(store._knowledge_index, "search", lambda query, threshold: [])
        assert store.search_knowledge("ও কি") == []


# ── Q&A matching ─────────────────────────────────────────────────────────────

class TestMatchQuestionAnswer:
    def test_empty_store(self, store):
        assert store.match_question_answer("তোমার নাম কি?") is None

    def test_exact_after_normalization(self, store):
        pair = QuestionAnswerPair("তোমার নাম কী?", "আমার নাম সোফিয়া।")
        store.add_question_answer(pair)
        match = store.match_question_answer("তোমার   নাম কি")
        assert match.pair is pair
        assert match.method == "exact"
        assert match.score == 1.0

    def test_similarity_match(self, store):
        pair = QuestionAnswerPair("বাংলাদেশের রাজধানী কোথায়?", "ঢাকা")
        store.add_question_answer(pair)
        match = store.match_question_answer("বাংলাদেশের রাজধানী কোথায় অবস্থিত")
        assert match.pair is pair
        assert match.method == "similarity"
        assert match.score > 0.5

    def test_best_similarity_wins(self, store):
        capital = QuestionAnswerPair("বাংলাদেশের রাজধানী কোথায়?", "ঢাকা")
        river = QuestionAnswerPair("বাংলাদেশের বৃহত্তম নদী কোনটি?", "পদ্মা")
        store.replace_all([], [river, capital])
        match = store.match_question_answer("বাংলাদেশের রাজধানী কোথায় অবস্থিত")
        assert match.pair is capital

    def test_index_match(self):
        store = SearchStore(SimilarityEngine(threshold=1.0))
        pair = QuestionAnswerPair("ঢাকা শহরের জনসংখ্যা কত", "দুই কোটির বেশি")
        store.add_question_answer(pair)
        match = store.match_question_answer("ঢাকা শহরের জনসংখ্যা কত জানো")
        assert match.pair is pair
        assert match.method == "index"

    def test_keyword_overlap_match(self, monkeypatch):
        store = SearchStore(SimilarityEngine(threshold=1.0))
        pair = QuestionAnswerPair("ঢাকা শহরের জনসংখ্যা কত", "দুই কোটির বেশি")
        store.add_question_answer(pair)
        monkeypatch.setattr(store._qa_index, "search", lambda query, threshold: [])

        match = store.match_question_answer("ঢাকা জনসংখ্যা জানাও")
        assert match.pair is pair
        assert match.method == "keyword"
        assert match.score == pytest.approx(2 / 3)

    def test_keyword_overlap_below_ratio(self, monkeypatch):
        store = SearchStore(SimilarityEngine(threshold=1.0))
        store.add_question_answer(QuestionAnswerPair("ঢাকা শহরের জনসংখ্যা কত", "দুই কোটির বেশি"))
        monkeypatch.setattr(store._qa_index, "search", lambda query, threshold: [])
        assert store.match_question_answer("ঢাকা থেকে চট্টগ্রাম কত দূর") is None

    def test_unrelated_question(self, store):
        store.add_question_answer(QuestionAnswerPair("তোমার নাম কি?", "সোফিয়া"))
        assert store.match_question_answer("আকাশ কেন নীল") is None
