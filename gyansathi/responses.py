"""Answer synthesis: fact templates, excerpts and canned replies"""

import random
import logging
import re
from typing import Dict, List, Optional, Sequence

from . import config
from .conversation import ConversationContext
from .facts import ExtractedFact, FactType, relation_of
from .intent import EmotionalContext, IntentType, QuestionIntent
from .normalizer import nfc, normalize
from .search import QAMatch, SearchResult

logger = logging.getLogger(__name__)

_SENTENCE_RE = re.compile(r'[।॥!?\n]')

# ── Canned replies ────────────────────────────────────────────────────────────
CANNED_RESPONSES: Dict[str, str] = {
    "greeting": "নমস্কার! আমি জ্ঞানসাথী। আপনি আমাকে যেকোনো প্রশ্ন করতে পারেন অথবা নতুন কিছু শেখাতে পারেন।",
    "thanks": "আপনাকেও ধন্যবাদ! আমি সব সময় আপনাকে সাহায্য করার জন্য এখানে আছি।",
    "frustrated": ("আমি বুঝতে পারছি আপনি হয়তো হতাশ। আপনার প্রশ্নটি আরেকবার ভিন্নভাবে জিজ্ঞেস করুন, "
                   "অথবা আমাকে এই বিষয়ে কিছু শেখান।"),
    "curious": ("চমৎকার প্রশ্ন! আমার কাছে এই মুহূর্তে এই বিষয়ে পর্যাপ্ত তথ্য নেই, "
                "কিন্তু আপনি চাইলে আমাকে শেখাতে পারেন।"),
    "fallback": "দুঃখিত, আমার কাছে এই বিষয়ে এখনো পর্যাপ্ত তথ্য নেই। আপনি চাইলে আমাকে এই বিষয়ে কিছু শেখাতে পারেন।",
}

GREETING_WORDS = ('হ্যালো', 'নমস্কার', 'সালাম', 'হাই', 'hello', 'hi')
THANKS_WORDS = ('ধন্যবাদ', 'থ্যাংক', 'thanks', 'thank you')

# ── Lead-in phrases ───────────────────────────────────────────────────────────
FRUSTRATED_LEAD_IN = 'আমি বুঝতে পারছি আপনি হয়তো কিছুটা বিরক্ত। আসুন আমি আরও স্পষ্ট করে বলি: '
LEAD_IN_POOLS: Dict[str, List[str]] = {
    "curious": ['আসুন দেখি...', 'চলুন জানি...', 'আবিষ্কার করা যাক...'],
    "positive": ['খুব ভালো প্রশ্ন!', 'চমৎকার!', 'দারুণ!'],
}
FOLLOW_UP_PREFIX = '{topic} সম্পর্কে আরও তথ্য: '
EXCERPT_PREFIX = '"{title}" সম্পর্কে আমি জানি যে: '

_PLACE_OR_TIME = {
    IntentType.BIRTH_LOCATION, IntentType.DEATH_LOCATION, IntentType.LOCATION, IntentType.ADDRESS,
    IntentType.BIRTH_TIME, IntentType.DEATH_TIME, IntentType.TIME,
}
_NAMING = {IntentType.NAME, IntentType.PERSON, IntentType.RELATIONSHIP}


# ── Phrase selection strategies ───────────────────────────────────────────────

class RandomSelector:
    """Uniform random choice. Not reproducible across runs unless seeded."""

    def __init__(self, seed: int = None):
        self._random = random.Random(seed)

    def choose(self, options: Sequence[str]) -> str:
        return self._random.choice(list(options))


class RoundRobinSelector:
    """Cycles through each pool in order."""

    def __init__(self):
        self._positions: Dict[tuple, int] = {}

    def choose(self, options: Sequence[str]) -> str:
        key = tuple(options)
        position = self._positions.get(key, 0)
        self._positions[key] = position + 1
        return key[position % len(key)]


class FirstSelector:
    def choose(self, options: Sequence[str]) -> str:
        return options[0]


def _contains_any(text: str, words: Sequence[str]) -> bool:
    padded = f' {text} '
    return any(f' {normalize(w)} ' in padded for w in words)


def _narrow(pool: List[ExtractedFact], keep) -> List[ExtractedFact]:
    kept = [f for f in pool if keep(f)]
    return kept or pool


class AnswerSynthesizer:
    """
    Builds the reply for one query. In priority order:
      1. a matched Q&A pair's answer, verbatim
      2. the best extracted fact through an intent template
      3. an excerpt of the top matched item
      4. a canned reply
    """

    def __init__(self, selector=None):
        self.selector = selector or RandomSelector()

    def synthesize(
        self,
        question: str,
        intent: QuestionIntent,
        facts: List[ExtractedFact],
        matched_items: List[SearchResult],
        qa_match: Optional[QAMatch] = None,
        context: ConversationContext = None,
        sentiment: EmotionalContext = None,
    ) -> str:
        if qa_match is not None:
            logger.debug(f"Answering from Q&A pair via {qa_match.method}")
            return qa_match.pair.answer

        if facts:
            fact = self.best_fact(facts, intent, question)
            logger.debug(f"Answering from {fact.fact_type.value} fact ({fact.confidence:.2f})")
            return self._lead_in(question, context, sentiment) + self.render_fact(fact, intent)

        if matched_items:
            logger.debug(f"Answering with an excerpt of {matched_items[0].item.title!r}")
            return self.excerpt(question, matched_items[0].item)

        return self.canned_response(question, sentiment)

    # ── Facts ─────────────────────────────────────────────────────────────────

    @staticmethod
    def best_fact(facts: List[ExtractedFact], intent: QuestionIntent = None,
                  question: str = '') -> ExtractedFact:
        """
        Highest confidence wins, earliest on ties. The pool is narrowed first
        to the intent's preferred fact types, then to facts about the birth or
        death the intent asks for, then to the relative the question names.
        A step that would empty the pool is skipped.
        """
        pool = facts
        if intent is not None:
            intent_type = intent.intent_type
            pool = _narrow(pool, lambda f: f.fact_type in intent_type.category)
            pool = _narrow(pool, lambda f: f.is_about(intent_type.events))
        relation = relation_of(normalize(question)) if question else None
        if relation:
            pool = _narrow(pool, lambda f: f.fact_type is FactType.RELATIONSHIP
                           and relation_of(f.predicate) == relation)
        best = pool[0]
        for fact in pool[1:]:
            if fact.confidence > best.confidence:
                best = fact
        return best

    @staticmethod
    def render_fact(fact: ExtractedFact, intent: QuestionIntent = None) -> str:
        intent_type = intent.intent_type if intent is not None else IntentType.GENERAL
        if intent_type in _PLACE_OR_TIME:
            return f"{fact.subject} {fact.object}।"
        if intent_type in _NAMING:
            return f"{fact.predicate or fact.subject}: {fact.object}।"
        return f"{fact.subject} সম্পর্কে: {fact.object}।"

    def _lead_in(self, question: str, context: ConversationContext = None,
                 sentiment: EmotionalContext = None) -> str:
        prefix = ''
        if sentiment is not None:
            if sentiment.sentiment == 'frustrated':
                prefix = FRUSTRATED_LEAD_IN
            elif sentiment.sentiment in LEAD_IN_POOLS:
                prefix = self.selector.choose(LEAD_IN_POOLS[sentiment.sentiment]) + ' '
        if context is not None and context.current_topic and context.is_follow_up(question):
            prefix += FOLLOW_UP_PREFIX.format(topic=context.current_topic)
        return prefix

    # ── Excerpt ───────────────────────────────────────────────────────────────

    @staticmethod
    def excerpt(question: str, item) -> str:
        """Sentences of the item that mention a query word, or the whole content."""
        words = [w for w in normalize(question).split() if len(w) > 2]
        sentences = [s.strip() for s in _SENTENCE_RE.split(nfc(item.content)) if s.strip()]
        relevant = [s for s in sentences if any(w in normalize(s) for w in words)]
        body = '। '.join(relevant) + '।' if relevant else nfc(item.content).strip()
        if len(body) > config.MAX_EXCERPT_LENGTH:
            body = body[:config.MAX_EXCERPT_LENGTH].rstrip() + '...'
        return EXCERPT_PREFIX.format(title=item.title) + body

    # ── Canned replies ────────────────────────────────────────────────────────

    @staticmethod
    def canned_response(question: str, sentiment: EmotionalContext = None) -> str:
        normalized = normalize(question)
        if _contains_any(normalized, GREETING_WORDS):
            return CANNED_RESPONSES["greeting"]
        if _contains_any(normalized, THANKS_WORDS):
            return CANNED_RESPONSES["thanks"]
        if sentiment is not None and sentiment.sentiment in ("frustrated", "curious"):
            return CANNED_RESPONSES[sentiment.sentiment]
        return CANNED_RESPONSES["fallback"]


def format_stats(stats: Dict, insights: Dict = None) -> str:
    lines = ["📊 জ্ঞানসাথী পরিসংখ্যান\n" + "─" * 40]
    lines.append(f"  জ্ঞান      : {stats.get('total', 0)}")
    lines.append(f"  প্রশ্নোত্তর  : {stats.get('qa_pairs', 0)}")
    topics = stats.get('topics') or []
    if topics:
        shown = ', '.join(topics[:5])
        lines.append(f"  বিষয়       : {shown}{' ...' if len(topics) > 5 else ''}")

    if insights:
        lines.append("\nকথোপকথন")
        lines.append(f"  প্রশ্ন      : {insights.get('total_questions', 0)}")
        topic = insights.get('current_topic')
        if topic:
            lines.append(f"  বর্তমান বিষয় : {topic}")

    return "\n".join(lines)
