"""Text normalization and keyword derivation for Bengali questions and passages"""

import re
import logging
import unicodedata
from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# ── Punctuation stripped before comparison ───────────────────────────────────
_PUNCT_RE = re.compile(r'[।॥,;:!?.\-–—()\[\]"\'‘’“”]')
_SPACE_RE = re.compile(r'\s+')

# ── Synonym table: canonical lexeme → surface variants (declaration order) ───
DEFAULT_SYNONYMS: List[Tuple[str, List[str]]] = [
    ('কি', ['কী', 'কিরকম']),
    ('কে', ['কার', 'কাকে', 'কাহার', 'কোন ব্যক্তি']),
    ('কেন', ['কিসের জন্য', 'কোন কারণে', 'কি কারণে']),
    ('কিভাবে', ['কীভাবে', 'কেমনে', 'কিরূপে', 'কোন উপায়ে', 'কোন পদ্ধতিতে']),
    ('কোথায়', ['কোন জায়গায়', 'কোন স্থানে', 'কোথাকার']),
    ('কখন', ['কোন সময়', 'কোন কালে']),
    ('কত', ['কতটা', 'কি পরিমাণ']),
    ('কোন', ['কোনটা', 'কোনো']),
    ('কেমন', ['কিরূপ', 'কি অবস্থা']),
    ('জন্মগ্রহণ', ['জন্ম নেওয়া', 'জন্মায়', 'জন্মেছিলেন', 'ভূমিষ্ঠ']),
    ('মৃত্যুবরণ', ['মারা যাওয়া', 'মরে যান', 'ইন্তেকাল', 'পরলোকগমন']),
    ('বাবা', ['পিতা', 'জনক']),
    ('মা', ['মাতা', 'জননী']),
    ('ভালো', ['ভাল', 'চমৎকার', 'দারুণ']),
    ('খারাপ', ['মন্দ', 'বাজে']),
    ('হয়', ['হওয়া', 'হইয়া']),
    ('আছে', ['রয়েছে']),
    ('ছিল', ['ছিলো']),
    ('আছো', ['আছেন', 'আছ']),
]

STOP_WORDS = frozenset(unicodedata.normalize('NFC', w) for w in (
    'এবং', 'বা', 'কিন্তু', 'তবে', 'যদি', 'তাহলে', 'এই', 'সেই', 'যে', 'যা',
    'যার', 'তার', 'এর', 'সে', 'তা', 'এটা', 'ওটা', 'একটি', 'একটা', 'কোনো',
    'কোন', 'সব', 'সকল', 'আর', 'ও',
))


def nfc(text: str) -> str:
    return unicodedata.normalize('NFC', text)


def _basic_clean(text: str) -> str:
    """NFC, lower-case, punctuation to spaces, collapsed whitespace."""
    text = nfc(text).lower()
    text = _PUNCT_RE.sub(' ', text)
    return _SPACE_RE.sub(' ', text).strip()


class SynonymTable:
    """
    Single-pass, longest-match synonym folder.

    Tokens are rewritten left to right. At each position the longest variant
    (by token count, then by character length) that matches the upcoming tokens
    wins and its tokens are consumed; rewritten output is never re-scanned.
    Each token of a multi-word variant is compared after single-token folding,
    so spelling variants inside a phrase still match. A surface form listed
    under several canonicals belongs to the first one declared, and canonical
    lexemes are fixed points.
    """

    def __init__(self, entries: Sequence[Tuple[str, Sequence[str]]] = None):
        if entries is None:
            entries = DEFAULT_SYNONYMS
        self.entries = [(nfc(k), [nfc(v) for v in vs]) for k, vs in entries]
        self._canonicals = []
        self._single: Dict[str, str] = {}
        self._phrases: List[Tuple[Tuple[str, ...], str]] = []
        self._compile()

    def _compile(self):
        for canonical, _ in self.entries:
            cleaned = _basic_clean(canonical)
            if not cleaned or cleaned != canonical or ' ' in cleaned:
                raise ValueError(f"Canonical lexeme must be a single clean token: {canonical!r}")
            if canonical not in self._canonicals:
                self._canonicals.append(canonical)
        canon_set = set(self._canonicals)

        # Single-token folding first: phrase tokens are compared in folded form
        for canonical, variants in self.entries:
            for variant in variants:
                cleaned = _basic_clean(variant)
                if cleaned and ' ' not in cleaned and cleaned not in canon_set:
                    self._single.setdefault(cleaned, canonical)

        seen = set()
        collapse_targets = set()
        for canonical, variants in self.entries:
            for variant in variants:
                tokens = tuple(self._fold(t) for t in _basic_clean(variant).split())
                if len(tokens) < 2 or tokens in seen:
                    continue
                seen.add(tokens)
                self._phrases.append((tokens, canonical))
                collapse_targets.add(canonical)

        for tokens, _ in self._phrases:
            clash = collapse_targets.intersection(tokens)
            if clash:
                raise ValueError(
                    f"Phrase variant {' '.join(tokens)!r} contains collapsed lexeme(s) {sorted(clash)}"
                )

        # Longest first; sort is stable so declaration order breaks ties
        self._phrases.sort(key=lambda p: (len(p[0]), len(' '.join(p[0]))), reverse=True)
        self._max_len = max((len(t) for t, _ in self._phrases), default=1)

    def _fold(self, token: str) -> str:
        return self._single.get(token, token)

    @property
    def canonicals(self) -> List[str]:
        return list(self._canonicals)

    def apply(self, tokens: List[str]) -> List[str]:
        """Fold a list of already-cleaned tokens."""
        folded = [self._fold(t) for t in tokens]
        out = []
        i = 0
        while i < len(folded):
            for phrase, canonical in self._phrases:
                n = len(phrase)
                if tuple(folded[i:i + n]) == phrase:
                    out.append(canonical)
                    i += n
                    break
            else:
                out.append(folded[i])
                i += 1
        return out


_default_table: Optional[SynonymTable] = None


def default_table() -> SynonymTable:
    global _default_table
    if _default_table is None:
        _default_table = SynonymTable()
    return _default_table


def normalize(text: str, table: SynonymTable = None) -> str:
    """Canonicalize text for comparison. Pure and idempotent."""
    if not text:
        return ''
    table = table or default_table()
    cleaned = _basic_clean(text)
    if not cleaned:
        return ''
    return ' '.join(table.apply(cleaned.split(' ')))


def tokenize(text: str) -> List[str]:
    normalized = normalize(text)
    return normalized.split(' ') if normalized else []


# ── Derived fields ────────────────────────────────────────────────────────────

def extract_keywords(text: str) -> List[str]:
    """Content words (longer than 2 chars, no stop words), unique, in order."""
    keywords = []
    seen = set()
    for word in tokenize(text):
        if len(word) > 2 and word not in STOP_WORDS and word not in seen:
            seen.add(word)
            keywords.append(word)
    return keywords


def extract_tags(text: str, limit: int = 5) -> List[str]:
    """Most frequent keywords; ties keep first-appearance order."""
    words = [w for w in tokenize(text) if len(w) > 2 and w not in STOP_WORDS]
    return [w for w, _ in Counter(words).most_common(limit)]


def extract_related_topics(text: str, limit: int = 5) -> List[str]:
    return [w for w in extract_keywords(text) if len(w) > 4][:limit]


_YEAR_RE = re.compile(r'\d{4}')


def calculate_importance(text: str) -> float:
    """Heuristic weight from length, dates and names; range [1, 3]."""
    importance = 1.0
    if len(text) > 500:
        importance += 0.5
    if len(text) > 1000:
        importance += 0.5
    if _YEAR_RE.search(text):
        importance += 0.3
    if nfc('নাম') in nfc(text):
        importance += 0.2
    return min(importance, 3.0)
