"""
Destructive reset-and-reseed step run before an upload when ``resetIds`` is set.
"""
from typing import Dict, Tuple

from content_ingest.core.logging_config import logger
from content_ingest.models.schemas import UploadType
from content_ingest.services.content_store import ContentStore, ContentTable
from content_ingest.utils.exceptions import ResetError


# Chapters are referenced by both other tables, so they go last
RESET_PLAN: Dict[UploadType, Tuple[ContentTable, ...]] = {
    UploadType.MCQ: (ContentTable.QUESTION,),
    UploadType.REVISION: (ContentTable.REVISION,),
    UploadType.CHAPTERS: (ContentTable.REVISION, ContentTable.QUESTION, ContentTable.CHAPTER),
}


def reset_content(upload_type: UploadType, store: ContentStore) -> Tuple[ContentTable, ...]:
    """
    Wipe the tables owned by ``upload_type`` and restart their id sequences.

    Raises:
        ResetError: If any part of the reset fails; no rows may be written afterwards
    """
    tables = RESET_PLAN[upload_type]
    logger.warning(
        f"[ResetController] Resetting {', '.join(t.value for t in tables)} for {upload_type.value} upload"
    )
    try:
        store.reset_tables(tables)
    except ResetError:
        raise
    except Exception as e:
        logger.error(f"[ResetController] Reset failed: {e}")
        raise ResetError(f"Reset failed: {e}") from e
    return tables
