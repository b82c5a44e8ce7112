"""Pairwise text similarity measures and their weighted fusion"""

import math
import logging
from collections import Counter
from typing import Dict, List, Optional, Sequence

import numpy as np
from rapidfuzz.distance import Levenshtein

from . import config

logger = logging.getLogger(__name__)


def _tokens(text: str) -> List[str]:
    return text.lower().split()


def cosine_similarity(text1: str, text2: str) -> float:
    """Cosine of the term-count vectors over the combined vocabulary."""
    words1, words2 = _tokens(text1), _tokens(text2)
    vocab = list(dict.fromkeys(words1 + words2))
    if not vocab:
        return 0.0
    counts1, counts2 = Counter(words1), Counter(words2)
    v1 = np.array([counts1[w] for w in vocab], dtype=float)
    v2 = np.array([counts2[w] for w in vocab], dtype=float)
    mag1, mag2 = np.linalg.norm(v1), np.linalg.norm(v2)
    if mag1 == 0 or mag2 == 0:
        return 0.0
    return float(min(1.0, np.dot(v1, v2) / (mag1 * mag2)))


def levenshtein_distance(str1: str, str2: str) -> int:
    """Character-level edit distance."""
    return Levenshtein.distance(str1, str2)


def levenshtein_similarity(str1: str, str2: str) -> float:
    """1 - distance / max length; two empty strings are identical."""
    max_len = max(len(str1), len(str2))
    if max_len == 0:
        return 1.0
    return 1.0 - levenshtein_distance(str1, str2) / max_len


def jaccard_similarity(text1: str, text2: str) -> float:
    set1, set2 = set(_tokens(text1)), set(_tokens(text2))
    union = set1 | set2
    if not union:
        return 0.0
    return len(set1 & set2) / len(union)


def partial_match_similarity(query: str, text: str) -> float:
    """
    Length-weighted share of query tokens found in the text.
    A verbatim token earns its full length; failing that, any 3-character
    substring of the token found in the text earns a fixed partial credit.
    """
    words = _tokens(query)
    text_lower = text.lower()
    matches = 0.0
    total = 0
    for word in words:
        weight = len(word)
        total += weight
        if word in text_lower:
            matches += weight
        elif len(word) >= 3:
            for i in range(len(word) - 2):
                if word[i:i + 3] in text_lower:
                    matches += weight * config.PARTIAL_MATCH_CREDIT
                    break
    if total == 0:
        return 0.0
    return matches / total


def tfidf_score(query: str, document: str, corpus: Sequence[str]) -> float:
    """Unbounded TF-IDF relevance of the document to the query tokens."""
    words = _tokens(query)
    doc_words = _tokens(document)
    if not words or not doc_words or not corpus:
        return 0.0
    doc_counts = Counter(doc_words)
    corpus_sets = [set(_tokens(doc)) for doc in corpus]
    total_docs = len(corpus_sets)
    score = 0.0
    for word in words:
        tf = doc_counts[word] / len(doc_words)
        df = sum(1 for s in corpus_sets if word in s)
        score += tf * math.log(total_docs / (df + 1))
    return score


def normalize_tfidf(score: float) -> float:
    """Squash a raw TF-IDF score into [0, 1]."""
    return max(0.0, min(1.0, score / 2))


class SimilarityEngine:
    """
    Fuses cosine, Levenshtein, Jaccard, partial and TF-IDF scores
    into one value in [0, 1] using fixed weights.
    """

    MEASURES = ("cosine", "levenshtein", "jaccard", "partial", "tfidf")

    def __init__(self, weights: Dict[str, float] = None, threshold: float = None):
        weights = dict(config.SIMILARITY_WEIGHTS if weights is None else weights)
        missing = [m for m in self.MEASURES if m not in weights]
        if missing:
            raise ValueError(f"Missing similarity weights: {missing}")
        if any(w < 0 for w in weights.values()) or sum(weights.values()) <= 0:
            raise ValueError("Similarity weights must be non-negative and sum above zero")
        total = sum(weights[m] for m in self.MEASURES)
        # Keep the fused score inside [0, 1] even for custom weights
        self.weights = {m: weights[m] / total if total > 1 else weights[m] for m in self.MEASURES}
        self.threshold = config.QA_SIMILARITY_THRESHOLD if threshold is None else threshold

    def breakdown(self, query: str, text: str, corpus: Optional[Sequence[str]] = None) -> Dict[str, float]:
        """Individual measure scores, TF-IDF already normalized."""
        tfidf = normalize_tfidf(tfidf_score(query, text, corpus)) if corpus else 0.0
        return {
            "cosine": cosine_similarity(query, text),
            "levenshtein": levenshtein_similarity(query, text),
            "jaccard": jaccard_similarity(query, text),
            "partial": partial_match_similarity(query, text),
            "tfidf": tfidf,
        }

    def score(self, query: str, text: str, corpus: Optional[Sequence[str]] = None) -> float:
        parts = self.breakdown(query, text, corpus)
        fused = sum(parts[m] * self.weights[m] for m in self.MEASURES)
        return max(0.0, min(1.0, fused))

    def is_match(self, score: float) -> bool:
        return score > self.threshold
