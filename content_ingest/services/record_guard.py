"""
Per-record acceptance checks run after normalization and before any write.
"""
import math
from typing import Any, Callable, Dict, Optional

from content_ingest.core.logging_config import logger
from content_ingest.models.results import Accepted, Rejected, RowResult
from content_ingest.models.schemas import NormalizedChapter, NormalizedMcq, NormalizedRevision
from content_ingest.services.chapter_index import ChapterIndex
from content_ingest.services.content_store import ContentStore, ContentTable
from content_ingest.services.field_normalizer import format_number


MISSING_MCQ_FIELDS = "Missing required fields (questionEn, optionAEn, optionBEn, correctAnswer)"
DUPLICATE_QUESTION = "Duplicate question (already exists in database)"
INVALID_CHAPTER_NUMBER = "Invalid or missing chapterNumber"
MISSING_TITLES = "Missing titleEn or titleMr"
DUPLICATE_REVISION = "Duplicate revision (same chapter, title, and order already exists)"


def chapter_not_found(chapter_number: float) -> str:
    return f"Chapter {format_number(chapter_number)} not found"


def _checked(lookup: Callable[[], Optional[Dict[str, Any]]], reason: str) -> Optional[Rejected]:
    """Run a duplicate lookup; a store failure rejects the row instead of the batch."""
    try:
        existing = lookup()
    except Exception as e:
        logger.error(f"[RecordGuard] Duplicate lookup failed: {e}")
        return Rejected(reason=str(e) or type(e).__name__)
    return Rejected(reason=reason) if existing is not None else None


def guard_mcq(record: NormalizedMcq, index: ChapterIndex, store: ContentStore) -> RowResult:
    chapter_id = index.lookup(record.chapter_number)
    if chapter_id is None:
        return Rejected(reason=chapter_not_found(record.chapter_number))

    # Options C and D are collected but not required
    if not (record.question_en and record.option_a_en and record.option_b_en and record.correct_answer):
        return Rejected(reason=MISSING_MCQ_FIELDS)

    duplicate = _checked(
        lambda: store.find_duplicate(ContentTable.QUESTION, {
            "chapter_id": chapter_id,
            "question_en": record.question_en,
        }),
        DUPLICATE_QUESTION
    )
    return duplicate or Accepted(record=record, chapter_id=chapter_id)


def guard_revision(record: NormalizedRevision, index: ChapterIndex, store: ContentStore) -> RowResult:
    if not record.chapter_number or math.isnan(record.chapter_number):
        return Rejected(reason=INVALID_CHAPTER_NUMBER)

    chapter_id = index.lookup(record.chapter_number)
    if chapter_id is None:
        return Rejected(reason=chapter_not_found(record.chapter_number))

    # Only reachable for explicitly empty titles: the normalizer backfills absent ones
    if not record.title_en or not record.title_mr:
        return Rejected(reason=MISSING_TITLES)

    duplicate = _checked(
        lambda: store.find_duplicate(ContentTable.REVISION, {
            "chapter_id": chapter_id,
            "title_en": record.title_en,
            "order": record.order,
        }),
        DUPLICATE_REVISION
    )
    return duplicate or Accepted(record=record, chapter_id=chapter_id)


def guard_chapter(record: NormalizedChapter) -> RowResult:
    number = record.chapter_number
    if not number or math.isnan(number) or not math.isfinite(number) or number < 0 or number != int(number):
        return Rejected(reason=INVALID_CHAPTER_NUMBER)
    return Accepted(record=record)
