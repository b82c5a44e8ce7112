"""Fuzzy indexed search over stored knowledge items and Q&A pairs"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from rapidfuzz import fuzz

from . import config
from .knowledge import KnowledgeItem, QuestionAnswerPair
from .normalizer import normalize
from .similarity import SimilarityEngine

logger = logging.getLogger(__name__)

_EPSILON = 1e-3


@dataclass
class SearchResult:
    item: KnowledgeItem
    score: float
    method: str  # 'index' or 'keyword'


@dataclass
class QAMatch:
    pair: QuestionAnswerPair
    method: str  # 'exact', 'similarity', 'index' or 'keyword'
    score: float


class FuzzyIndex:
    """
    Weighted multi-field fuzzy index.

    Every field of every record is normalized once at build time. A query is
    compared to each field with a token-set ratio; fields whose distance
    (1 - ratio) is within ``field_threshold`` take part in the record score,
    which is the product of ``distance ** weight`` over those fields. Scores
    lie in [0, 1] and lower is better.
    """

    def __init__(self, records: list, fields: Dict[str, float], field_threshold: float):
        total = sum(fields.values())
        if total <= 0:
            raise ValueError("Index field weights must sum above zero")
        self.fields = {name: weight / total for name, weight in fields.items()}
        self.field_threshold = field_threshold
        self.entries: List[Tuple[object, Dict[str, str]]] = [
            (record, self._field_texts(record)) for record in records
        ]

    def _field_texts(self, record) -> Dict[str, str]:
        texts = {}
        for name in self.fields:
            value = getattr(record, name, '') or ''
            if isinstance(value, (list, tuple, set)):
                value = ' '.join(value)
            texts[name] = normalize(value)
        return texts

    def __len__(self):
        return len(self.entries)

    def score(self, query: str, texts: Dict[str, str]) -> Optional[float]:
        """Combined score for one record, or None when no field matches."""
        total = 1.0
        matched = False
        for name, weight in self.fields.items():
            text = texts[name]
            if not text:
                continue
            distance = 1.0 - fuzz.token_set_ratio(query, text) / 100.0
            if distance <= self.field_threshold:
                matched = True
                total *= max(distance, _EPSILON) ** weight
        return total if matched else None

    def search(self, query: str, threshold: float) -> List[Tuple[object, float]]:
        """Records scoring below ``threshold``, best first (stable on ties)."""
        if not query:
            return []
        results = []
        for record, texts in self.entries:
            score = self.score(query, texts)
            if score is not None and score < threshold:
                results.append((record, score))
        results.sort(key=lambda r: r[1])
        return results


class SearchStore:
    """
    Owns the knowledge and Q&A collections and keeps one fuzzy index per
    collection. Every mutation rebuilds its index before returning; the new
    index is built aside and swapped in under a lock so searches never see
    a half-built index.
    """

    def __init__(self, similarity: SimilarityEngine = None):
        self.similarity = similarity or SimilarityEngine()
        self._lock = threading.RLock()
        self._knowledge: List[KnowledgeItem] = []
        self._qa_pairs: List[QuestionAnswerPair] = []
        self._knowledge_index = self._build_knowledge_index([])
        self._qa_index = self._build_qa_index([])

    # ── Index rebuild ─────────────────────────────────────────────────────────

    @staticmethod
    def _build_knowledge_index(items: List[KnowledgeItem]) -> FuzzyIndex:
        return FuzzyIndex(list(items), config.KNOWLEDGE_FIELDS, config.KNOWLEDGE_FIELD_THRESHOLD)

    @staticmethod
    def _build_qa_index(pairs: List[QuestionAnswerPair]) -> FuzzyIndex:
        return FuzzyIndex(list(pairs), config.QA_FIELDS, config.QA_FIELD_THRESHOLD)

    def _rebuild_knowledge(self):
        self._knowledge_index = self._build_knowledge_index(self._knowledge)
        logger.debug(f"Knowledge index rebuilt with {len(self._knowledge)} items")

    def _rebuild_qa(self):
        self._qa_index = self._build_qa_index(self._qa_pairs)
        logger.debug(f"Q&A index rebuilt with {len(self._qa_pairs)} pairs")

    # ── Mutations ─────────────────────────────────────────────────────────────

    def replace_all(self, items: List[KnowledgeItem], pairs: List[QuestionAnswerPair]):
        with self._lock:
            self._knowledge = list(items)
            self._qa_pairs = list(pairs)
            self._rebuild_knowledge()
            self._rebuild_qa()

    def add_knowledge(self, item: KnowledgeItem):
        with self._lock:
            if any(existing.id == item.id for existing in self._knowledge):
                raise ValueError(f"Duplicate knowledge id: {item.id}")
            self._knowledge.append(item)
            self._rebuild_knowledge()

    def add_question_answer(self, pair: QuestionAnswerPair):
        with self._lock:
            if any(existing.id == pair.id for existing in self._qa_pairs):
                raise ValueError(f"Duplicate Q&A id: {pair.id}")
            self._qa_pairs.append(pair)
            self._rebuild_qa()

    def delete_knowledge(self, item_id: str) -> bool:
        with self._lock:
            remaining = [item for item in self._knowledge if item.id != item_id]
            removed = len(remaining) != len(self._knowledge)
            self._knowledge = remaining
            self._rebuild_knowledge()
            return removed

    def delete_question_answer(self, pair_id: str) -> bool:
        with self._lock:
            remaining = [pair for pair in self._qa_pairs if pair.id != pair_id]
            removed = len(remaining) != len(self._qa_pairs)
            self._qa_pairs = remaining
            self._rebuild_qa()
            return removed

    def clear_knowledge(self):
        with self._lock:
            self._knowledge = []
            self._rebuild_knowledge()

    def clear_question_answers(self):
        with self._lock:
            self._qa_pairs = []
            self._rebuild_qa()

    # ── Read access ───────────────────────────────────────────────────────────

    def knowledge_items(self) -> List[KnowledgeItem]:
        return list(self._knowledge)

    def question_answer_pairs(self) -> List[QuestionAnswerPair]:
        return list(self._qa_pairs)

    def get_knowledge(self, item_id: str) -> Optional[KnowledgeItem]:
        for item in self._knowledge:
            if item.id == item_id:
                return item
        return None

    # ── Knowledge search ──────────────────────────────────────────────────────

    def search_knowledge(self, query: str, current_topic: str = None,
                         limit: int = None) -> List[SearchResult]:
        """
        Ranked knowledge matches for a query.
        Index hits come first, narrowed to the current topic when one is set;
        a plain keyword-containment scan is the last resort.
        """
        limit = limit or config.MAX_KNOWLEDGE_MATCHES
        normalized = normalize(query)
        if not normalized:
            return []

        index = self._knowledge_index
        hits = index.search(normalized, config.KNOWLEDGE_INDEX_THRESHOLD)

        if hits:
            if current_topic:
                narrowed = [
                    (item, score) for item, score in hits
                    if current_topic in item.title or score < config.TOPIC_TIGHT_THRESHOLD
                ]
                if narrowed:
                    hits = narrowed
            logger.debug(f"Knowledge index returned {len(hits)} hits for {normalized!r}")
            return [SearchResult(item, score, 'index') for item, score in hits[:limit]]

        words = [w for w in normalized.split() if len(w) > 2]
        if not words:
            return []
        results = []
        for item, texts in index.entries:
            haystack = ' '.join((texts['title'], texts['content'], texts['keywords']))
            if any(word in haystack for word in words):
                results.append(SearchResult(item, 1.0, 'keyword'))
                if len(results) >= limit:
                    break
        if results:
            logger.debug(f"Keyword scan matched {len(results)} items for {normalized!r}")
        return results

    # ── Q&A matching ──────────────────────────────────────────────────────────

    def match_question_answer(self, question: str) -> Optional[QAMatch]:
        """
        Find a stored answer: exact normalized match, then fused similarity,
        then the fuzzy index, then keyword overlap.
        """
        normalized = normalize(question)
        index = self._qa_index
        if not normalized or not index.entries:
            return None

        for pair, texts in index.entries:
            if texts['question'] == normalized:
                logger.debug(f"Exact Q&A match: {pair.question!r}")
                return QAMatch(pair, 'exact', 1.0)

        corpus = [texts['question'] for _, texts in index.entries]
        best, best_score = None, 0.0
        for pair, texts in index.entries:
            score = self.similarity.score(normalized, texts['question'], corpus)
            if logger.isEnabledFor(logging.DEBUG):
                parts = self.similarity.breakdown(normalized, texts['question'], corpus)
                logger.debug(f"Similarity for {pair.question!r}: {score:.3f} {parts}")
            if score > best_score:
                best, best_score = pair, score
        if best is not None and self.similarity.is_match(best_score):
            return QAMatch(best, 'similarity', best_score)

        hits = index.search(normalized, config.QA_INDEX_THRESHOLD)
        if hits:
            pair, score = hits[0]
            logger.debug(f"Fuzzy index Q&A match: {pair.question!r} ({score:.3f})")
            return QAMatch(pair, 'index', score)

        words = [w for w in normalized.split() if len(w) > 2]
        if words:
            for pair, texts in index.entries:
                stored = set(texts['question'].split())
                overlap = sum(1 for w in words if w in stored)
                if overlap > 0 and overlap >= len(words) * config.KEYWORD_OVERLAP_RATIO:
                    logger.debug(f"Keyword Q&A match: {pair.question!r} ({overlap}/{len(words)})")
                    return QAMatch(pair, 'keyword', overlap / len(words))
        return None
