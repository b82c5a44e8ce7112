"""Question intent classification and sentiment detection"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Sequence, Tuple

from .facts import BIRTH_EVENTS, DEATH_EVENTS, FactType
from .normalizer import normalize

logger = logging.getLogger(__name__)

PHRASE_SCORE = 10
WORD_SCORE = 2


class IntentType(str, Enum):
    BIRTH_LOCATION = "birth_location"
    DEATH_LOCATION = "death_location"
    BIRTH_TIME = "birth_time"
    DEATH_TIME = "death_time"
    RELATIONSHIP = "relationship"
    NAME = "name"
    AGE = "age"
    ADDRESS = "address"
    OCCUPATION = "occupation"
    EDUCATION = "education"
    COMPARISON = "comparison"
    EXPLANATION = "explanation"
    LOCATION = "location"
    TIME = "time"
    PERSON = "person"
    METHOD = "method"
    REASON = "reason"
    STATE = "state"
    DEFINITION = "definition"
    GENERAL = "general"

    @property
    def category(self) -> Tuple[FactType, ...]:
        """Fact types that answer this kind of question, best first."""
        return _PREFERRED_FACTS.get(self, ())

    @property
    def events(self) -> Tuple[str, ...]:
        """Birth or death words that mark a fact as the answer, if the question asks about one."""
        return _EVENTS.get(self, ())


_PREFERRED_FACTS: Dict[IntentType, Tuple[FactType, ...]] = {
    IntentType.BIRTH_LOCATION: (FactType.LOCATION,),
    IntentType.DEATH_LOCATION: (FactType.LOCATION,),
    IntentType.LOCATION: (FactType.LOCATION, FactType.ADDRESS),
    IntentType.ADDRESS: (FactType.ADDRESS, FactType.LOCATION),
    IntentType.BIRTH_TIME: (FactType.TIME,),
    IntentType.DEATH_TIME: (FactType.TIME,),
    IntentType.TIME: (FactType.TIME,),
    IntentType.RELATIONSHIP: (FactType.RELATIONSHIP,),
    IntentType.NAME: (FactType.NAME, FactType.RELATIONSHIP),
    IntentType.PERSON: (FactType.NAME, FactType.RELATIONSHIP),
    IntentType.AGE: (FactType.GENERAL,),
    IntentType.OCCUPATION: (FactType.OCCUPATION,),
    IntentType.EDUCATION: (FactType.EDUCATION,),
    IntentType.EXPLANATION: (FactType.CAUSE, FactType.EFFECT),
    IntentType.REASON: (FactType.CAUSE, FactType.EFFECT),
}

_EVENTS: Dict[IntentType, Tuple[str, ...]] = {
    IntentType.BIRTH_LOCATION: BIRTH_EVENTS,
    IntentType.BIRTH_TIME: BIRTH_EVENTS,
    IntentType.DEATH_LOCATION: DEATH_EVENTS,
    IntentType.DEATH_TIME: DEATH_EVENTS,
}

# ── Trigger phrases, in priority order (earlier intents win ties) ────────────
DEFAULT_INTENTS: List[Tuple[IntentType, List[str]]] = [
    (IntentType.BIRTH_LOCATION, ['কোথায় জন্মগ্রহণ', 'কোথায় জন্ম', 'জন্মস্থান', 'কোন গ্রামে জন্ম', 'জন্মভূমি']),
    (IntentType.DEATH_LOCATION, ['কোথায় মৃত্যু', 'কোথায় মারা', 'মৃত্যুস্থান', 'শেষ নিঃশ্বাস কোথায়']),
    (IntentType.BIRTH_TIME, ['কখন জন্মগ্রহণ', 'কত সালে জন্ম', 'কোন বছর জন্ম', 'জন্ম সাল', 'জন্মতারিখ']),
    (IntentType.DEATH_TIME, ['কখন মৃত্যুবরণ', 'কখন মারা', 'কত সালে মৃত্যু', 'মৃত্যু সাল']),
    (IntentType.RELATIONSHIP, ['সম্পর্ক কি', 'কি সম্পর্ক', 'কিভাবে সম্পর্কিত', 'সংযোগ কি']),
    (IntentType.NAME, ['নাম', 'কি নাম', 'নামটি', 'নামক']),
    (IntentType.AGE, ['বয়স', 'বয়স কত', 'কত বছর বয়স']),
    (IntentType.ADDRESS, ['ঠিকানা', 'কোথায় থাকেন', 'কোথায় থাকো', 'কোথায় থাকে']),
    (IntentType.OCCUPATION, ['পেশা', 'কি কাজ করেন', 'কি কাজ করো', 'কি করেন', 'চাকরি']),
    (IntentType.EDUCATION, ['পড়াশোনা', 'শিক্ষাগত যোগ্যতা', 'কোথায় পড়েন', 'ডিগ্রি']),
    (IntentType.COMPARISON, ['তুলনা', 'পার্থক্য কি', 'কোনটা ভালো', 'কোনটা বেশি']),
    (IntentType.EXPLANATION, ['ব্যাখ্যা', 'কেন এমন', 'কিভাবে সম্ভব']),
    (IntentType.LOCATION, ['কোথায়', 'কোন দেশে', 'কোন এলাকায়', 'কোন গ্রামে', 'কোন শহরে']),
    (IntentType.TIME, ['কখন', 'কত সালে', 'কোন বছর', 'কোন তারিখে']),
    # 'কে' is a substring of 'কেন' and 'কেমন', so those come first
    (IntentType.METHOD, ['কিভাবে']),
    (IntentType.REASON, ['কেন']),
    (IntentType.STATE, ['কেমন', 'কেমন আছো']),
    (IntentType.PERSON, ['কে']),
    (IntentType.DEFINITION, ['কি', 'কোন জিনিস']),
    (IntentType.GENERAL, []),
]


@dataclass
class QuestionIntent:
    intent_type: IntentType
    confidence: float
    matched_phrases: List[str] = field(default_factory=list)
    normalized_query: str = ''


class IntentClassifier:
    """
    Keyword-pattern intent classifier.

    Each intent earns 10 points per trigger phrase that is a substring of the
    normalized query. Words of the remaining phrases earn 2 points each when
    they contain, or are contained in, some query token. Confidence is
    min(score / 10, 1); the best confidence wins and ties go to the intent
    declared first.
    """

    def __init__(self, intents: Sequence[Tuple[IntentType, Sequence[str]]] = None):
        if intents is None:
            intents = DEFAULT_INTENTS
        self.intents: List[Tuple[IntentType, List[str]]] = []
        for intent_type, phrases in intents:
            normalized = [normalize(p) for p in phrases]
            self.intents.append((IntentType(intent_type),
                                 [p for p in dict.fromkeys(normalized) if p]))

    @staticmethod
    def _score(phrases: List[str], query: str, tokens: List[str]) -> Tuple[int, List[str]]:
        score = 0
        matched = []
        partial_words = set()
        for phrase in phrases:
            if phrase in query:
                score += PHRASE_SCORE
                matched.append(phrase)
                continue
            hits = {
                word for word in phrase.split()
                if any(word in token or token in word for token in tokens)
            }
            if hits:
                matched.append(phrase)
                partial_words |= hits
        # Each trigger word counts once, however many phrases repeat it
        score += WORD_SCORE * len(partial_words)
        return score, matched

    def classify(self, question: str) -> QuestionIntent:
        normalized = normalize(question)
        tokens = normalized.split()
        best = QuestionIntent(IntentType.GENERAL, 0.0, [], normalized)
        if not tokens:
            return best

        for intent_type, phrases in self.intents:
            if not phrases:
                continue
            score, matched = self._score(phrases, normalized, tokens)
            confidence = min(score / PHRASE_SCORE, 1.0)
            if confidence > best.confidence:
                best = QuestionIntent(intent_type, confidence, matched, normalized)

        logger.debug(f"Intent for {normalized!r}: {best.intent_type.value} ({best.confidence:.2f})")
        return best


# ── Sentiment ─────────────────────────────────────────────────────────────────

@dataclass
class EmotionalContext:
    sentiment: str  # frustrated, curious, positive, negative or neutral
    confidence: float
    tone: str


# Checked in order; the first list with a hit decides
_SENTIMENT_RULES = [
    ('frustrated', 0.8, 'encouraging', ['কেন বুঝতে পারছ না', 'আবার বল', 'ঠিকমতো বল']),
    ('curious', 0.9, 'informative', ['কিভাবে', 'কেন', 'কি', 'আরও জানতে চাই']),
    ('positive', 0.8, 'friendly', ['ধন্যবাদ', 'ভালো', 'দারুণ']),
    ('negative', 0.7, 'helpful', ['খারাপ', 'সমস্যা', 'ভুল']),
]
_NEUTRAL = ('neutral', 0.6, 'friendly')

_sentiment_table = None


def _sentiment_rules():
    global _sentiment_table
    if _sentiment_table is None:
        _sentiment_table = [
            (sentiment, confidence, tone, [k for k in dict.fromkeys(normalize(w) for w in words) if k])
            for sentiment, confidence, tone, words in _SENTIMENT_RULES
        ]
    return _sentiment_table


def analyze_sentiment(question: str) -> EmotionalContext:
    """Rough emotional reading of a question from fixed keyword lists."""
    normalized = normalize(question)
    for sentiment, confidence, tone, keywords in _sentiment_rules():
        if any(keyword in normalized for keyword in keywords):
            return EmotionalContext(sentiment, confidence, tone)
    return EmotionalContext(*_NEUTRAL)
