"""GyanSathi retrieval engine - ties the matching pipeline to stored knowledge"""

import logging
from typing import Dict, List, Optional, Tuple

from .bulk import import_pairs, parse_bulk_qa
from .conversation import ConversationContext
from .facts import FactExtractor
from .intent import IntentClassifier, analyze_sentiment
from .knowledge import KnowledgeItem, KnowledgeStorage, QuestionAnswerPair
from .responses import CANNED_RESPONSES, AnswerSynthesizer
from .search import SearchStore
from .similarity import SimilarityEngine
from .wikipedia import WikipediaClient

logger = logging.getLogger(__name__)


class RetrievalEngine:
    """
    One assistant session over one knowledge store.

    Query pipeline:
      1. Q&A match (exact, fused similarity, fuzzy index, keyword overlap)
      2. Intent and sentiment
      3. Knowledge search, narrowed by the current topic
      4. Fact extraction from the top item
      5. Answer synthesis

    Mutations update the in-memory store, rebuild its index and then save.
    A failed save is logged and the in-memory state stays authoritative.
    """

    def __init__(self, storage: KnowledgeStorage = None, similarity: SimilarityEngine = None,
                 classifier: IntentClassifier = None, extractor: FactExtractor = None,
                 synthesizer: AnswerSynthesizer = None, autoload: bool = True):
        self.storage      = storage or KnowledgeStorage()
        self.store        = SearchStore(similarity)
        self.classifier   = classifier or IntentClassifier()
        self.extractor    = extractor or FactExtractor()
        self.synthesizer  = synthesizer or AnswerSynthesizer()
        self.conversation = ConversationContext()

        if autoload:
            self.load()

    # ── Boundary ──────────────────────────────────────────────────────────────

    def load(self):
        items, pairs = self.storage.load_all()
        self.store.replace_all(items, pairs)
        data = self.storage.load_conversation()
        self.conversation = ConversationContext.from_dict(data) if data else ConversationContext()
        logger.info(f"Engine ready with {len(items)} knowledge items and {len(pairs)} Q&A pairs")

    def save(self) -> bool:
        results = [
            self.storage.save_knowledge(self.store.knowledge_items()),
            self.storage.save_question_answers(self.store.question_answer_pairs()),
            self.storage.save_conversation(self.conversation.to_dict()),
        ]
        return all(results)

    def _save_knowledge(self):
        if not self.storage.save_knowledge(self.store.knowledge_items()):
            logger.warning("Knowledge change kept in memory only")

    def _save_question_answers(self):
        if not self.storage.save_question_answers(self.store.question_answer_pairs()):
            logger.warning("Q&A change kept in memory only")

    def _save_conversation(self):
        self.storage.save_conversation(self.conversation.to_dict())

    # ── Query ─────────────────────────────────────────────────────────────────

    def generate_response(self, question: str) -> str:
        """Answer a question. Never raises; the worst case is a generic reply."""
        try:
            return self._respond(question)
        except Exception:
            logger.exception(f"Failed to answer {question!r}")
            return CANNED_RESPONSES["fallback"]

    def _respond(self, question: str) -> str:
        if not question or not question.strip():
            return CANNED_RESPONSES["fallback"]

        qa_match = self.store.match_question_answer(question)
        intent = self.classifier.classify(question)
        sentiment = analyze_sentiment(question)

        matches, facts = [], []
        if qa_match is None:
            matches = self.store.search_knowledge(question, current_topic=self.conversation.current_topic or None)
            if matches:
                facts = self.extractor.extract(matches[0].item.content)

        # Follow-up detection looks at the history before this question joins it
        answer = self.synthesizer.synthesize(
            question, intent, facts, matches,
            qa_match=qa_match, context=self.conversation, sentiment=sentiment,
        )

        self.conversation.record_question(question)
        self.conversation.remember(question, answer, matches[0].item.title if matches else None)
        self._save_conversation()
        return answer

    # ── Mutations ─────────────────────────────────────────────────────────────

    def learn_from_text(self, title: str, content: str) -> KnowledgeItem:
        if not title or not title.strip() or not content or not content.strip():
            raise ValueError("Title and content must not be empty")
        item = KnowledgeItem(title=title, content=content)
        self.store.add_knowledge(item)
        self._save_knowledge()
        logger.info(f"Learned {item.title!r} ({len(item.keywords)} keywords)")
        return item

    def add_question_answer(self, question: str, answer: str, save: bool = True) -> QuestionAnswerPair:
        if not question or not question.strip() or not answer or not answer.strip():
            raise ValueError("Question and answer must not be empty")
        pair = QuestionAnswerPair(question=question, answer=answer)
        self.store.add_question_answer(pair)
        if save:
            self._save_question_answers()
        logger.info(f"Added Q&A pair {pair.question!r}")
        return pair

    def delete_knowledge(self, item_id: str) -> bool:
        removed = self.store.delete_knowledge(item_id)
        if removed:
            self._save_knowledge()
        else:
            logger.warning(f"No knowledge item with id {item_id}")
        return removed

    def delete_question_answer(self, pair_id: str) -> bool:
        removed = self.store.delete_question_answer(pair_id)
        if removed:
            self._save_question_answers()
        else:
            logger.warning(f"No Q&A pair with id {pair_id}")
        return removed

    def clear_knowledge_base(self):
        self.store.clear_knowledge()
        self.conversation.clear()
        self._save_knowledge()
        self._save_conversation()
        logger.info("Knowledge base cleared")

    def clear_question_answers(self):
        self.store.clear_question_answers()
        self._save_question_answers()
        logger.info("Q&A pairs cleared")

    # ── Introspection ─────────────────────────────────────────────────────────

    def get_knowledge_base(self) -> List[KnowledgeItem]:
        """All knowledge items, newest first."""
        return sorted(self.store.knowledge_items(), key=lambda i: i.timestamp, reverse=True)

    def get_question_answer_pairs(self) -> List[QuestionAnswerPair]:
        return sorted(self.store.question_answer_pairs(), key=lambda p: p.timestamp, reverse=True)

    def get_knowledge_stats(self) -> Dict:
        items = self.store.knowledge_items()
        return {
            "total": len(items),
            "topics": list(dict.fromkeys(item.title for item in items)),
            "qa_pairs": len(self.store.question_answer_pairs()),
        }

    def get_conversation_insights(self) -> Dict:
        return self.conversation.insights()

    # ── Importers ─────────────────────────────────────────────────────────────

    def import_bulk_qa(self, text: str, progress: bool = False) -> Tuple[int, int]:
        """Add every Q&A pair found in bulk text. Returns (added, failed)."""
        added, failed = import_pairs(self, parse_bulk_qa(text), progress=progress)
        if added:
            self._save_question_answers()
        return added, failed

    def learn_from_wikipedia(self, query: str, client=None) -> Optional[KnowledgeItem]:
        """Fetch the best Wikipedia page for a query and learn its introduction."""
        client = client or WikipediaClient()
        found = client.relevant_content(query)
        if not found:
            return None
        title, text = found
        return self.learn_from_text(title, text)
