"""
Request-scoped lookup from curriculum chapter number to stored chapter id.
"""
import math
from typing import Dict, List, Optional

from content_ingest.core.logging_config import logger
from content_ingest.services.content_store import ContentStore, ContentTable
from content_ingest.utils.exceptions import ChapterIndexError


class ChapterIndex:
    """Maps ``chapter_number`` to the internal chapter ``id``."""

    def __init__(self, ids_by_number: Dict[int, int]):
        self._ids = dict(ids_by_number)

    @classmethod
    def build(cls, store: ContentStore) -> "ChapterIndex":
        """
        Load every stored chapter once.

        Raises:
            ChapterIndexError: If the store cannot be read
        """
        try:
            chapters = store.find_all(ContentTable.CHAPTER)
        except Exception as e:
            logger.error(f"[ChapterIndex] Failed to load chapters: {e}")
            raise ChapterIndexError(f"Failed to load chapters: {e}") from e

        index = cls({int(row["chapter_number"]): int(row["id"]) for row in chapters})
        logger.info(f"[ChapterIndex] Loaded {len(index)} chapters: {index.chapter_numbers()}")
        return index

    def lookup(self, chapter_number: Optional[float]) -> Optional[int]:
        if chapter_number is None or math.isnan(chapter_number):
            return None
        return self._ids.get(chapter_number)

    def chapter_numbers(self) -> List[int]:
        return sorted(self._ids)

    def __len__(self) -> int:
        return len(self._ids)
