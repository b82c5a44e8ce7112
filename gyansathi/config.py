"""Configuration module for GyanSathi"""

import os
from pathlib import Path

# Base directories
BASE_DIR = Path(os.environ.get("GYANSATHI_HOME", Path.home() / ".gyansathi"))
DATA_DIR = BASE_DIR / "data"
KNOWLEDGE_DIR = DATA_DIR / "knowledge"

KNOWLEDGE_FILE_NAME = "knowledge_base.json"
QA_FILE_NAME = "question_answers.json"
CONVERSATION_FILE_NAME = "conversation.json"

# Similarity settings
SIMILARITY_WEIGHTS = {
    "cosine": 0.25,
    "levenshtein": 0.20,
    "jaccard": 0.20,
    "partial": 0.25,
    "tfidf": 0.10,
}
QA_SIMILARITY_THRESHOLD = 0.5  # Fused score must be strictly above this
PARTIAL_MATCH_CREDIT = 0.3     # Credit for a 3-character substring hit
KEYWORD_OVERLAP_RATIO = 0.6    # Share of query tokens a Q&A question must contain

# Fuzzy index settings (lower score = better match)
KNOWLEDGE_FIELDS = {
    "title": 0.40,
    "content": 0.25,
    "tags": 0.15,
    "keywords": 0.10,
    "related_topics": 0.10,
}
QA_FIELDS = {
    "question": 0.70,
    "keywords": 0.30,
}
KNOWLEDGE_FIELD_THRESHOLD = 0.4
KNOWLEDGE_INDEX_THRESHOLD = 0.5
TOPIC_TIGHT_THRESHOLD = 0.25
QA_FIELD_THRESHOLD = 0.3
QA_INDEX_THRESHOLD = 0.4
MAX_KNOWLEDGE_MATCHES = 3

# Conversation settings
MAX_CONVERSATION_HISTORY = 10
MAX_SESSION_MEMORY = 50

# Response generation settings
MAX_EXCERPT_LENGTH = 400

# Wikipedia settings
WIKIPEDIA_LANGUAGE = "en"
WIKIPEDIA_API_URL = "https://{lang}.wikipedia.org/w/api.php"
USER_AGENT = "GyanSathi/0.1 (knowledge assistant)"
REQUEST_TIMEOUT = 10  # seconds

# CLI settings
CLI_PROMPT = "আপনি"
CLI_ASSISTANT = "জ্ঞানসাথী"
CLI_WIDTH = 80


def knowledge_dir(base: Path = None) -> Path:
    """Resolve the knowledge directory, honouring an explicit base path."""
    if base is None:
        return KNOWLEDGE_DIR
    return Path(base) / "data" / "knowledge"
