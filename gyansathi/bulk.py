"""Bulk import of question/answer pairs from plain text"""

import re
import logging
from typing import List, Tuple

from tqdm import tqdm

from .normalizer import nfc

logger = logging.getLogger(__name__)

_BLOCK_SPLIT_RE = re.compile(r'\n\s*\n')
_QUESTION_RE = re.compile(nfc(r'^(?:Q|প্রশ্ন|প্র)\s*[:：]\s*'), re.IGNORECASE)
_ANSWER_RE = re.compile(nfc(r'^(?:A|উত্তর|উ)\s*[:：]\s*'), re.IGNORECASE)


def parse_bulk_qa(text: str) -> List[Tuple[str, str]]:
    """
    Parse blank-line separated blocks into (question, answer) pairs.

    A block uses its ``প্রশ্ন:``/``প্র:``/``Q:`` and ``উত্তর:``/``উ:``/``A:``
    lines when both are present, otherwise its first two lines.
    Blocks with fewer than two lines or an empty side are skipped.

    Example::

        প্রশ্ন: তুমি কেমন আছো?
        উত্তর: আমি ভালো আছি, ধন্যবাদ।

        Q: আজকের আবহাওয়া কেমন?
        A: আজকের আবহাওয়া ভালো।
    """
    pairs = []
    for block in _BLOCK_SPLIT_RE.split(nfc(text or '')):
        lines = [line.strip() for line in block.split('\n') if line.strip()]
        if len(lines) < 2:
            continue

        q_line = next((line for line in lines if _QUESTION_RE.match(line)), None)
        a_line = next((line for line in lines if _ANSWER_RE.match(line)), None)
        if q_line is None or a_line is None:
            q_line, a_line = lines[0], lines[1]

        question = _QUESTION_RE.sub('', q_line).strip()
        answer = _ANSWER_RE.sub('', a_line).strip()
        if question and answer:
            pairs.append((question, answer))
        else:
            logger.debug(f"Skipping incomplete block: {lines[0][:40]!r}")
    return pairs


def import_pairs(engine, pairs: List[Tuple[str, str]], progress: bool = False) -> Tuple[int, int]:
    """Add pairs to the engine one by one. Returns (added, failed)."""
    added = failed = 0
    for question, answer in tqdm(pairs, desc="Importing Q&A", unit="pair", disable=not progress):
        try:
            engine.add_question_answer(question, answer, save=False)
            added += 1
        except ValueError as e:
            logger.warning(f"Could not import {question[:40]!r}: {e}")
            failed += 1
    logger.info(f"Bulk import finished: {added} added, {failed} failed")
    return added, failed
