"""Knowledge records and their JSON storage"""

import json
import uuid
import logging
from typing import List, Dict, Optional, Tuple
from datetime import datetime
from pathlib import Path

from . import config
from .normalizer import (
    extract_keywords,
    extract_tags,
    extract_related_topics,
    calculate_importance,
    STOP_WORDS,
)

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def _parse_timestamp(value) -> datetime:
    """Parse an ISO timestamp, falling back to now for missing/garbled values."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            logger.warning(f"Unparseable timestamp {value!r}, using current time")
    return datetime.now()


def _string_list(value) -> Optional[List[str]]:
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return [v for v in dict.fromkeys(value) if v not in STOP_WORDS]
    return None


class KnowledgeItem:
    """A learned free-text passage"""

    def __init__(self, title: str, content: str, id: str = None, timestamp: datetime = None,
                 tags: List[str] = None, keywords: List[str] = None,
                 importance: float = None, related_topics: List[str] = None):
        self.id = id or _new_id()
        self.title = title.strip()
        self.content = content.strip()
        self.timestamp = timestamp or datetime.now()
        self.tags = tags if tags is not None else extract_tags(self.content)
        self.keywords = keywords if keywords is not None else extract_keywords(self.content)
        self.importance = importance if importance is not None else calculate_importance(self.content)
        self.related_topics = (related_topics if related_topics is not None
                               else extract_related_topics(self.content))

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "tags": self.tags,
            "keywords": self.keywords,
            "importance": self.importance,
            "related_topics": self.related_topics,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "KnowledgeItem":
        """Rebuild from a stored record; derived fields are regenerated when absent."""
        title, content = data["title"], data["content"]
        if not isinstance(title, str) or not isinstance(content, str):
            raise ValueError("title and content must be strings")
        importance = data.get("importance")
        return cls(
            title=title,
            content=content,
            id=str(data.get("id") or _new_id()),
            timestamp=_parse_timestamp(data.get("timestamp")),
            tags=_string_list(data.get("tags")),
            keywords=_string_list(data.get("keywords")),
            importance=float(importance) if isinstance(importance, (int, float)) else None,
            related_topics=_string_list(data.get("related_topics")),
        )

    def __repr__(self):
        return f"KnowledgeItem(id={self.id!r}, title={self.title!r})"


class QuestionAnswerPair:
    """An explicit question with its literal answer"""

    def __init__(self, question: str, answer: str, id: str = None,
                 timestamp: datetime = None, keywords: List[str] = None):
        self.id = id or _new_id()
        self.question = question.strip()
        self.answer = answer.strip()
        self.timestamp = timestamp or datetime.now()
        self.keywords = keywords if keywords is not None else extract_keywords(self.question)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "question": self.question,
            "answer": self.answer,
            "timestamp": self.timestamp.isoformat(),
            "keywords": self.keywords,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "QuestionAnswerPair":
        question, answer = data["question"], data["answer"]
        if not isinstance(question, str) or not isinstance(answer, str):
            raise ValueError("question and answer must be strings")
        return cls(
            question=question,
            answer=answer,
            id=str(data.get("id") or _new_id()),
            timestamp=_parse_timestamp(data.get("timestamp")),
            keywords=_string_list(data.get("keywords")),
        )

    def __repr__(self):
        return f"QuestionAnswerPair(id={self.id!r}, question={self.question!r})"


class KnowledgeStorage:
    """
    Durable JSON storage for knowledge items, Q&A pairs and conversation state.
    Loading tolerates partial or corrupt records; saving never raises.
    """

    def __init__(self, directory: Path = None):
        self.directory = Path(directory) if directory else config.KNOWLEDGE_DIR
        self.knowledge_file = self.directory / config.KNOWLEDGE_FILE_NAME
        self.qa_file = self.directory / config.QA_FILE_NAME
        self.conversation_file = self.directory / config.CONVERSATION_FILE_NAME

    # ── Loading ──────────────────────────────────────────────────────────────

    def _read_json(self, path: Path, default):
        try:
            if path.exists():
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            logger.info(f"No stored data at {path}, starting fresh")
        except Exception as e:
            logger.error(f"Failed to read {path}: {e}")
        return default

    def _load_records(self, path: Path, factory, label: str) -> list:
        data = self._read_json(path, [])
        if not isinstance(data, list):
            logger.error(f"Expected a list of {label} in {path}, got {type(data).__name__}")
            return []

        records, ids = [], set()
        for raw in data:
            try:
                if not isinstance(raw, dict):
                    raise ValueError(f"record is {type(raw).__name__}, not an object")
                record = factory(raw)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed {label} record: {e}")
                continue
            if record.id in ids:
                logger.warning(f"Duplicate {label} id {record.id}, assigning a new one")
                record.id = _new_id()
            ids.add(record.id)
            records.append(record)

        logger.info(f"Loaded {len(records)} {label} from {path}")
        return records

    def load_knowledge(self) -> List[KnowledgeItem]:
        return self._load_records(self.knowledge_file, KnowledgeItem.from_dict, "knowledge items")

    def load_question_answers(self) -> List[QuestionAnswerPair]:
        return self._load_records(self.qa_file, QuestionAnswerPair.from_dict, "Q&A pairs")

    def load_all(self) -> Tuple[List[KnowledgeItem], List[QuestionAnswerPair]]:
        return self.load_knowledge(), self.load_question_answers()

    def load_conversation(self) -> Optional[Dict]:
        data = self._read_json(self.conversation_file, None)
        return data if isinstance(data, dict) else None

    # ── Saving ───────────────────────────────────────────────────────────────

    def _write_json(self, path: Path, data) -> bool:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            return True
        except Exception as e:
            logger.error(f"Failed to save {path}: {e}")
            return False

    def save_knowledge(self, items: List[KnowledgeItem]) -> bool:
        ok = self._write_json(self.knowledge_file, [item.to_dict() for item in items])
        if ok:
            logger.debug(f"Saved {len(items)} knowledge items")
        return ok

    def save_question_answers(self, pairs: List[QuestionAnswerPair]) -> bool:
        ok = self._write_json(self.qa_file, [pair.to_dict() for pair in pairs])
        if ok:
            logger.debug(f"Saved {len(pairs)} Q&A pairs")
        return ok

    def save_conversation(self, data: Dict) -> bool:
        return self._write_json(self.conversation_file, data)
