"""Conversation context: recent questions, current topic and session memory"""

import logging
from typing import Any, Dict, List
from datetime import datetime

from . import config
from .normalizer import normalize, tokenize

logger = logging.getLogger(__name__)

# Words that mark a question as continuing the previous topic
CONTINUATION_WORDS = frozenset(normalize(w) for w in ('আরও', 'তাহলে', 'আর', 'অন্য'))


class MemoryEntry:
    """One answered question"""

    def __init__(self, question: str, answer: str, timestamp: datetime = None):
        self.question = question
        self.answer = answer
        self.timestamp = timestamp or datetime.now()

    def to_dict(self) -> Dict:
        return {
            "question": self.question,
            "answer": self.answer,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "MemoryEntry":
        timestamp = data.get("timestamp")
        try:
            timestamp = datetime.fromisoformat(timestamp) if timestamp else None
        except (TypeError, ValueError):
            timestamp = None
        return cls(
            question=str(data["question"]),
            answer=str(data["answer"]),
            timestamp=timestamp,
        )


class ConversationContext:
    """
    Per-session conversation state.
    The question history and the session memory are bounded; the oldest
    entries are evicted first.
    """

    def __init__(self):
        self.previous_questions: List[str] = []
        self.current_topic: str = ''
        self.user_preferences: Dict[str, Any] = {}
        self.session_memory: List[MemoryEntry] = []

    def is_follow_up(self, question: str) -> bool:
        """
        A question containing a continuation word, asked after at least one
        other question. Words are compared whole, so 'আর' does not match 'আরব'.
        """
        if not self.previous_questions:
            return False
        return any(word in CONTINUATION_WORDS for word in tokenize(question))

    def record_question(self, question: str):
        self.previous_questions.append(question)
        if len(self.previous_questions) > config.MAX_CONVERSATION_HISTORY:
            self.previous_questions = self.previous_questions[-config.MAX_CONVERSATION_HISTORY:]

    def remember(self, question: str, answer: str, topic: str = None):
        """Log an answered question; a matched item's title becomes the current topic."""
        self.session_memory.append(MemoryEntry(question, answer))
        if len(self.session_memory) > config.MAX_SESSION_MEMORY:
            self.session_memory = self.session_memory[-config.MAX_SESSION_MEMORY:]
        if topic:
            self.current_topic = topic

    def clear(self):
        self.previous_questions = []
        self.current_topic = ''
        self.user_preferences = {}
        self.session_memory = []
        logger.info("Conversation context cleared")

    def insights(self) -> Dict:
        """Summary of the current session"""
        return {
            "total_questions": len(self.previous_questions),
            "current_topic": self.current_topic,
            "recent_questions": self.previous_questions[-5:],
            "session_memory": len(self.session_memory),
        }

    def to_dict(self) -> Dict:
        return {
            "previous_questions": list(self.previous_questions),
            "current_topic": self.current_topic,
            "user_preferences": dict(self.user_preferences),
            "session_memory": [entry.to_dict() for entry in self.session_memory],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ConversationContext":
        """Rebuild stored state, dropping anything that does not fit the expected shape."""
        context = cls()
        questions = data.get("previous_questions")
        if isinstance(questions, list):
            context.previous_questions = [q for q in questions if isinstance(q, str)]
            context.previous_questions = context.previous_questions[-config.MAX_CONVERSATION_HISTORY:]
        topic = data.get("current_topic")
        if isinstance(topic, str):
            context.current_topic = topic
        preferences = data.get("user_preferences")
        if isinstance(preferences, dict):
            context.user_preferences = preferences

        memory = data.get("session_memory")
        for raw in memory if isinstance(memory, list) else []:
            try:
                context.session_memory.append(MemoryEntry.from_dict(raw))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed session memory entry: {e}")
        context.session_memory = context.session_memory[-config.MAX_SESSION_MEMORY:]
        return context
