"""
Base handler class for per-row content ingestion.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

from content_ingest.core.logging_config import logger
from content_ingest.models.results import Accepted, IngestSummary, Rejected, RowResult, UploadOptions
from content_ingest.models.schemas import SkipDetail
from content_ingest.services.chapter_index import ChapterIndex
from content_ingest.services.content_store import ContentStore


class BaseContentHandler(ABC):
    """Base class for all content-type handlers."""

    tag = "Handler"

    def __init__(self, store: ContentStore, index: ChapterIndex, options: UploadOptions):
        self.store = store
        self.index = index
        self.options = options

    @abstractmethod
    def handle(self, raw: Any, summary: IngestSummary) -> RowResult:
        """
        Take one uploaded row through normalize -> guard -> write.

        Args:
            raw: The untrusted row as decoded from the request
            summary: Batch summary; handlers add conversion counters to it

        Returns:
            Accepted holding the stored row, or Rejected with the reason and
            the normalized record (used to describe the skip)
        """
        pass

    @abstractmethod
    def describe_skip(self, row_number: int, rejected: Rejected) -> SkipDetail:
        """Build the skip detail reported for a rejected row."""
        pass

    def reject(self, row_number: int, rejected: Rejected, summary: IngestSummary) -> None:
        """Record a rejected row on the summary."""
        logger.warning(f"[{self.tag}] Row {row_number} skipped: {rejected.reason}")
        summary.skip(self.describe_skip(row_number, rejected))

    def write(self, accepted: Accepted, record: Any, persist: Callable[[], Dict[str, Any]]) -> RowResult:
        """
        Run ``persist`` for an accepted row.

        A store failure for one row becomes a Rejected carrying the error
        message; the rest of the batch keeps going.
        """
        try:
            accepted.row = persist()
        except Exception as e:
            logger.error(f"[{self.tag}] Failed to write row: {e}")
            return Rejected(reason=str(e) or type(e).__name__, record=record)
        return accepted
