"""GyanSathi - rule-based Bengali question answering over a user-curated knowledge store"""

__version__ = "0.1.0"
__author__ = "Md. Abid Hasan Rafi"
__powered_by__ = "rapidfuzz · numpy · regex rules"

from .engine import RetrievalEngine
from .knowledge import KnowledgeItem, KnowledgeStorage, QuestionAnswerPair
from .normalizer import normalize, extract_keywords
from .similarity import SimilarityEngine
from .search import SearchStore
from .intent import IntentClassifier, IntentType
from .facts import FactExtractor, FactRule, FactType, extract_facts
from .responses import AnswerSynthesizer, RandomSelector, RoundRobinSelector, FirstSelector

__all__ = [
    "RetrievalEngine",
    "KnowledgeItem",
    "KnowledgeStorage",
    "QuestionAnswerPair",
    "normalize",
    "extract_keywords",
    "SimilarityEngine",
    "SearchStore",
    "IntentClassifier",
    "IntentType",
    "FactExtractor",
    "FactRule",
    "FactType",
    "extract_facts",
    "AnswerSynthesizer",
    "RandomSelector",
    "RoundRobinSelector",
    "FirstSelector",
]
