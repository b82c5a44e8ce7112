"""Pattern-based fact extraction from learned passages"""

import re
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .normalizer import nfc

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = 'তিনি'

_SENTENCE_SPLIT_RE = re.compile(r'[।॥!?\n]')
_SPACE_RE = re.compile(r'\s+')
_TRIM = ' \t,;:-'

# Words that mark a fact as being about a birth or a death
BIRTH_EVENTS = tuple(nfc(w) for w in ('জন্ম', 'জন্মগ্রহণ'))
DEATH_EVENTS = tuple(nfc(w) for w in ('মৃত্যু', 'মৃত্যুবরণ', 'মারা', 'ইন্তেকাল', 'পরলোকগমন'))

# Canonical relative -> the forms a question or a fact may use for it
RELATIONSHIP_MAPPING: Dict[str, List[str]] = {
    'বাবা': ['বাবা', 'বাবার', 'পিতা', 'পিতার'],
    'মা': ['মা', 'মায়ের', 'মাতা', 'মাতার'],
    'ছেলে': ['ছেলে', 'ছেলের', 'পুত্র', 'পুত্রের'],
    'মেয়ে': ['মেয়ে', 'মেয়ের', 'কন্যা', 'কন্যার'],
    'স্ত্রী': ['স্ত্রী', 'স্ত্রীর'],
    'স্বামী': ['স্বামী', 'স্বামীর'],
    'ভাই': ['ভাই', 'ভাইয়ের'],
    'বোন': ['বোন', 'বোনের'],
}
_RELATION_FORMS = {
    nfc(form): nfc(relation)
    for relation, forms in RELATIONSHIP_MAPPING.items()
    for form in forms
}


def relation_of(text: str) -> Optional[str]:
    """The first relative named in ``text``, matched word by word."""
    for word in nfc(text or '').split():
        relation = _RELATION_FORMS.get(word.strip(_TRIM + '?।'))
        if relation:
            return relation
    return None


class FactType(str, Enum):
    LOCATION = "location"
    TIME = "time"
    NAME = "name"
    RELATIONSHIP = "relationship"
    GENERAL = "general"
    ADDRESS = "address"
    OCCUPATION = "occupation"
    EDUCATION = "education"
    CAUSE = "cause"
    EFFECT = "effect"


@dataclass
class ExtractedFact:
    fact_type: FactType
    subject: str
    predicate: str
    object: str
    confidence: float
    context: str = ''

    def is_about(self, events: Sequence[str]) -> bool:
        """True when the fact's context or predicate is one of the event words."""
        return self.context in events or self.predicate in events


@dataclass
class FactRule:
    """
    One extraction rule: a regex plus ``str.format`` templates over its named
    groups. Groups that did not take part in the match render as ''.
    """
    name: str
    fact_type: FactType
    pattern: str
    object: str
    predicate: str = ''
    subject: str = '{subject}'
    confidence: float = 0.5
    context: str = ''
    regex: re.Pattern = field(init=False, repr=False)

    def __post_init__(self):
        self.fact_type = FactType(self.fact_type)
        try:
            self.regex = re.compile(nfc(self.pattern))
        except re.error as e:
            raise ValueError(f"Bad pattern for fact rule {self.name!r}: {e}")

    def apply(self, sentence: str) -> Optional[ExtractedFact]:
        match = self.regex.search(sentence)
        if not match:
            return None
        groups = defaultdict(str, {k: v for k, v in match.groupdict().items() if v})
        obj = _clean(self.object.format_map(groups))
        if not obj:
            return None
        return ExtractedFact(
            fact_type=self.fact_type,
            subject=_clean(self.subject.format_map(groups)) or DEFAULT_SUBJECT,
            predicate=_clean(self.predicate.format_map(groups)),
            object=obj,
            confidence=max(0.0, min(1.0, self.confidence)),
            context=self.context,
        )


def _clean(text: str) -> str:
    return _SPACE_RE.sub(' ', text).strip(_TRIM)


# ── Shared pattern fragments ──────────────────────────────────────────────────
_BIRTH = r'(?:জন্মগ্রহণ|জন্ম)'
_DEATH = r'(?:মৃত্যুবরণ|মৃত্যু|মারা|ইন্তেকাল|পরলোকগমন)'
_RELATION = r'(?P<relation>বাবার|পিতার|মায়ের|মাতার|ছেলের|পুত্রের|মেয়ের|কন্যার|স্ত্রীর|স্বামীর|ভাইয়ের|বোনের)'
_NAME_TAIL = r'\s+নাম\s+(?:(?:ছিল|ছিলো|হল|হলো)\s+)?(?P<name>.+?)(?:\s+(?:ছিল|ছিলো|হয়))?\s*$'
_YEAR = r'(?<!\d)(?P<year>\d{4})(?!\d)'
_MONTH = (r'(?P<month>জানুয়ারি|ফেব্রুয়ারি|মার্চ|এপ্রিল|মে|জুন|জুলাই|আগস্ট|সেপ্টেম্বর|অক্টোবর|'
          r'নভেম্বর|ডিসেম্বর|বৈশাখ|জ্যৈষ্ঠ|আষাঢ়|শ্রাবণ|ভাদ্র|আশ্বিন|কার্তিক|অগ্রহায়ণ|পৌষ|মাঘ|ফাল্গুন|চৈত্র)')
# Locative words that name a time or a settlement kind rather than a place
_NOT_PLACE = r'(?!(?:সালে|সনে|বছরে|তারিখে|দিনে|মাসে|গ্রামে|শহরে|জেলায়)(?:\s|$))'
# Optional subject of up to three words at the very start of the sentence
_LEAD = r'(?:^(?P<subject>[^\s\d]+(?:\s+[^\s\d]+){0,2}?)\s+|(?<!\S))'

# ── Default rule registry, most specific first within each family ───────────
DEFAULT_RULES: List[FactRule] = [
    # Location / birth
    FactRule(
        'birth_region_district_village', FactType.LOCATION,
        r'^(?P<subject>.+?)\s+(?P<region>পশ্চিমবঙ্গ|বাংলাদেশ|ভারত)(?:ের|ে|র)?\s*(?P<district>\S+?)\s*'
        r'(?:জেলার|জেলা|বিভাগের|বিভাগ)\s*(?P<village>\S+?)\s*(?P<kind>গ্রামে|গ্রাম|শহরে|শহর)\s*' + _BIRTH,
        subject='{subject}', predicate='জন্মস্থান',
        object='{region} {district} জেলার {village} {kind}', confidence=0.9, context='জন্ম',
    ),
    FactRule(
        'birth_settlement', FactType.LOCATION,
        _LEAD + r'(?P<place>\S+)\s*(?P<kind>গ্রামে|শহরে|জেলায়|জেলাতে)\s*' + _BIRTH,
        predicate='জন্মস্থান', object='{place} {kind}', confidence=0.8, context='জন্ম',
    ),
    FactRule(
        'birth_locative', FactType.LOCATION,
        _LEAD + _NOT_PLACE + r'(?P<place>\S+(?:তে|য়|ে))\s+' + _BIRTH,
        predicate='জন্মস্থান', object='{place}', confidence=0.7, context='জন্ম',
    ),
    FactRule(
        'death_locative', FactType.LOCATION,
        _LEAD + _NOT_PLACE + r'(?P<place>\S+(?:তে|য়|ে))\s+' + _DEATH,
        predicate='মৃত্যুস্থান', object='{place}', confidence=0.7, context='মৃত্যু',
    ),

    # Relationships
    FactRule(
        'relative_of_pronoun', FactType.RELATIONSHIP,
        r'(?<!\S)(?P<subject>তার|তাঁর|তিনি|এর|আমার)\s+' + _RELATION + _NAME_TAIL,
        predicate='{relation} নাম', object='{name}', confidence=0.85, context='পরিবার',
    ),
    FactRule(
        'relative_of_named', FactType.RELATIONSHIP,
        r'^(?!(?:তার|তাঁর|তিনি|এর|আমার)\s)(?P<subject>.+?)(?:ের|র)\s+' + _RELATION + _NAME_TAIL,
        predicate='{relation} নাম', object='{name}', confidence=0.85, context='পরিবার',
    ),
    FactRule(
        'spouse', FactType.RELATIONSHIP,
        r'^(?P<subject>\S+)\s+(?P<name>.+?)কে\s+(?:বিবাহ|বিয়ে)',
        predicate='জীবনসঙ্গী', object='{name}', confidence=0.85, context='পরিবার',
    ),
    FactRule(
        'marital_status', FactType.RELATIONSHIP,
        r'(?<!\S)আমি\s+(?P<status>অবিবাহিত|বিবাহিত|তালাকপ্রাপ্ত|বিধবা|বিপত্নীক)',
        subject='আমি', predicate='বৈবাহিক অবস্থা', object='{status}', confidence=0.85, context='ব্যক্তিগত',
    ),

    # Time
    FactRule(
        'year_event', FactType.TIME,
        r'^(?:(?P<subject>.+?)\s+)?' + _YEAR + r'\s*(?:সালের|সালে|সাল|সনে|খ্রিস্টাব্দে)?'
        r'(?:\s+\S+){0,3}?\s*(?P<event>জন্মগ্রহণ|জন্ম|মৃত্যুবরণ|মৃত্যু|মারা|ইন্তেকাল|পরলোকগমন)',
        predicate='{event}', object='{year} সালে', confidence=0.9, context='সময়',
    ),
    FactRule(
        'day_month_year', FactType.TIME,
        r'^(?:(?P<subject>.+?)\s+)?(?<!\d)(?P<day>\d{1,2})\s*(?:ই|শে|লা|রা|ঠা)?\s+' + _MONTH +
        r'\s*,?\s*' + _YEAR + r'(?:.*?(?P<event>জন্মগ্রহণ|জন্ম|মৃত্যুবরণ|মৃত্যু|মারা|ইন্তেকাল))?',
        predicate='{event}', object='{day} {month} {year}', confidence=0.9, context='সময়',
    ),

    # First-person and personal attributes
    FactRule(
        'own_name', FactType.NAME,
        r'(?<!\S)আমার\s+নাম\s+(?P<name>.+?)(?:\s+(?:এবং|আর)\s.*)?$',
        subject='আমি', predicate='নাম', object='{name}', confidence=0.9, context='ব্যক্তিগত',
    ),
    FactRule(
        'third_person_name', FactType.NAME,
        r'(?<!\S)(?P<subject>তার|তাঁর|এর|ওর)' + _NAME_TAIL,
        predicate='নাম', object='{name}', confidence=0.8,
    ),
    FactRule(
        'own_age', FactType.GENERAL,
        r'(?<!\S)আমার\s+বয়স\s+(?P<age>\d+)',
        subject='আমি', predicate='বয়স', object='{age} বছর', confidence=0.85, context='ব্যক্তিগত',
    ),
    FactRule(
        'own_address', FactType.ADDRESS,
        r'(?<!\S)আমার\s+ঠিকানা\s+(?P<place>.+)',
        subject='আমি', predicate='ঠিকানা', object='{place}', confidence=0.8, context='ব্যক্তিগত',
    ),
    FactRule(
        'lives_in', FactType.ADDRESS,
        r'(?<!\S)আমি\s+(?P<place>.+?)\s+থাকি',
        subject='আমি', predicate='ঠিকানা', object='{place}', confidence=0.8, context='ব্যক্তিগত',
    ),
    FactRule(
        'own_occupation', FactType.OCCUPATION,
        r'(?<!\S)আমার\s+পেশা\s+(?P<job>.+)',
        subject='আমি', predicate='পেশা', object='{job}', confidence=0.85, context='ব্যক্তিগত',
    ),
    FactRule(
        'works_as', FactType.OCCUPATION,
        r'(?<!\S)আমি\s+(?:একজন\s+)?(?P<job>.+?)\s+হিসেবে\s+কাজ\s+করি',
        subject='আমি', predicate='পেশা', object='{job}', confidence=0.8, context='ব্যক্তিগত',
    ),
    FactRule(
        'own_education', FactType.EDUCATION,
        r'(?<!\S)আমার\s+শিক্ষাগত\s+যোগ্যতা\s+(?P<degree>.+)',
        subject='আমি', predicate='শিক্ষা', object='{degree}', confidence=0.8, context='ব্যক্তিগত',
    ),
    FactRule(
        'studies_at', FactType.EDUCATION,
        r'(?<!\S)আমি\s+(?P<place>.+?)\s+(?:পড়ি|পড়াশোনা\s+করি|পড়েছি)',
        subject='আমি', predicate='শিক্ষা', object='{place}', confidence=0.75, context='ব্যক্তিগত',
    ),

    # Cause and effect
    FactRule(
        'cause', FactType.CAUSE,
        r'^(?P<effect>.+?)\s*,?\s+(?:কারণ|কেননা)\s+(?P<cause>.+)',
        subject='{effect}', predicate='কারণ', object='{cause}', confidence=0.6,
    ),
    FactRule(
        'effect', FactType.EFFECT,
        r'^(?P<cause>.+?)\s*,?\s+(?:ফলে|তাই|সেজন্য)\s+(?P<effect>.+)',
        subject='{cause}', predicate='ফলাফল', object='{effect}', confidence=0.6,
    ),
]


class FactExtractor:
    """Runs every registered rule against every sentence, in registry order."""

    def __init__(self, rules: Sequence[FactRule] = None):
        self.rules: List[FactRule] = list(DEFAULT_RULES if rules is None else rules)

    def register(self, rule: FactRule):
        self.rules.append(rule)

    @staticmethod
    def split_sentences(content: str) -> List[str]:
        parts = (_clean(s) for s in _SENTENCE_SPLIT_RE.split(nfc(content or '')))
        return [s for s in parts if s]

    def extract(self, content: str) -> List[ExtractedFact]:
        facts = []
        for sentence in self.split_sentences(content):
            for rule in self.rules:
                try:
                    fact = rule.apply(sentence)
                except (KeyError, IndexError, ValueError) as e:
                    logger.warning(f"Fact rule {rule.name!r} failed on {sentence!r}: {e}")
                    continue
                if fact:
                    facts.append(fact)
        if facts:
            logger.debug(f"Extracted {len(facts)} facts: "
                         f"{[(f.fact_type.value, f.object, f.confidence) for f in facts]}")
        return facts


_default_extractor: Optional[FactExtractor] = None


def extract_facts(content: str) -> List[ExtractedFact]:
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = FactExtractor()
    return _default_extractor.extract(content)
