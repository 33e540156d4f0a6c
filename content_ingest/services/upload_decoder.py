"""
Turns an upload request (JSON body or uploaded file) into a list of raw rows.
"""
import io
import json
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import pandas as pd
from openpyxl import load_workbook

from content_ingest.core.logging_config import logger
from content_ingest.models.schemas import UploadType
from content_ingest.utils.exceptions import (
    FileDecodeError,
    InvalidUploadError,
    UnsupportedUploadTypeError,
)


COLLECTION_KEYS = ("chapters", "questions", "revisions")

PERCENT_FORMAT = re.compile(r"^0(?:\.(0+))?%$")
PADDED_FORMAT = re.compile(r"^0+$")
FIXED_FORMAT = re.compile(r"^(#,##)?0(?:\.(0+))?$")


def parse_upload_type(value: Any) -> UploadType:
    """
    Validate the ``type`` field.

    Raises:
        InvalidUploadError: If it is missing
        UnsupportedUploadTypeError: If it is not mcq, revision or chapters
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidUploadError("Upload type is required")
    try:
        return UploadType(str(value).strip().lower())
    except ValueError:
        raise UnsupportedUploadTypeError(f"Invalid upload type: {value}")


def parse_flag(value: Any) -> bool:
    """Request flags are on only for boolean true or the string "true"."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def extract_records(body: Any) -> List[Any]:
    """
    Find the row list in a JSON upload body.

    Tried in order: the body itself as an array, ``data`` as an array,
    ``data.chapters|questions|revisions``, top-level
    ``chapters|questions|revisions``, then a single ``data`` object.

    Raises:
        InvalidUploadError: If no non-empty row list is found
    """
    if isinstance(body, list):
        records = body
    elif isinstance(body, dict):
        records = _records_from_object(body)
    else:
        records = None

    if records is None:
        raise InvalidUploadError(
            "Could not find upload rows: expected an array, 'data' array or object, "
            "or a 'chapters', 'questions' or 'revisions' array"
        )
    if not records:
        raise InvalidUploadError("No items found in upload")
    return records


def _records_from_object(body: Dict[str, Any]) -> Optional[List[Any]]:
    data = body.get("data")
    if isinstance(data, list):
        return data

    if isinstance(data, dict):
        for key in COLLECTION_KEYS:
            if isinstance(data.get(key), list):
                return data[key]

    for key in COLLECTION_KEYS:
        if isinstance(body.get(key), list):
            return body[key]

    if isinstance(data, dict):
        return [data]
    return None


def decode_json_bytes(content: bytes) -> Any:
    try:
        return json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, ValueError) as e:
        raise FileDecodeError(f"Invalid JSON file: {e}") from e


def _rows_from_frame(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    """Frame rows as dicts; empty cells are dropped like absent keys."""
    rows = []
    for row in frame.to_dict(orient="records"):
        rows.append({
            str(column).strip(): value
            for column, value in row.items()
            if value is not None and value != ""
        })
    return rows


def _format_number(value: float, number_format: str) -> str:
    # Only the first (positive) section of a format applies to our values
    number_format = number_format.split(";")[0]

    match = PERCENT_FORMAT.match(number_format)
    if match:
        decimals = len(match.group(1) or "")
        return f"{value * 100:.{decimals}f}%"

    if PADDED_FORMAT.match(number_format):
        return f"{int(round(value)):0{len(number_format)}d}"

    match = FIXED_FORMAT.match(number_format)
    if match:
        grouping = "," if match.group(1) else ""
        decimals = len(match.group(2) or "")
        return f"{value:{grouping}.{decimals}f}"

    if float(value).is_integer():
        return str(int(value))
    return f"{value:.15g}"


def format_cell(cell: Any) -> str:
    """Text a cell displays in Excel, for the number formats uploads use."""
    value = cell.value
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        return _format_number(value, cell.number_format or "General")
    return str(value)


def _read_workbook(content: bytes) -> pd.DataFrame:
    """First sheet as a frame of displayed cell text; blank rows are dropped."""
    workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        rows = [[format_cell(cell) for cell in row] for row in sheet.iter_rows()]
    finally:
        workbook.close()

    if not rows:
        return pd.DataFrame()

    header, body = rows[0], [row for row in rows[1:] if any(row)]
    positions = [i for i, name in enumerate(header) if name.strip()]
    return pd.DataFrame(
        [[row[i] if i < len(row) else "" for i in positions] for row in body],
        columns=[header[i].strip() for i in positions],
        dtype=str
    )


def read_spreadsheet(filename: str, content: bytes) -> List[Dict[str, Any]]:
    """
    Read a CSV file or the first sheet of an Excel workbook.

    Cells come back as the text they display: CSV cells are kept verbatim and
    Excel numbers are rendered through their number format, so "50%" or "08"
    are not turned into 0.5 or 8.

    Raises:
        FileDecodeError: If the file cannot be parsed
    """
    try:
        if filename.lower().endswith(".csv"):
            frame = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False)
        else:
            frame = _read_workbook(content)
    except Exception as e:
        logger.error(f"[UploadDecoder] Failed to read spreadsheet {filename}: {e}")
        raise FileDecodeError(f"Could not read spreadsheet '{filename}': {e}") from e

    return _rows_from_frame(frame)


def decode_upload_file(upload_type: UploadType, filename: str, content: bytes) -> List[Any]:
    """
    Decode an uploaded file into raw rows.

    MCQ files may be Excel, CSV or JSON (chosen by extension); revision and
    chapter files are always JSON holding an array or a single object.

    Raises:
        FileDecodeError: If the file cannot be parsed
        InvalidUploadError: If it holds no rows
    """
    filename = filename or ""
    if upload_type == UploadType.MCQ and not filename.lower().endswith(".json"):
        records = read_spreadsheet(filename, content)
    else:
        parsed = decode_json_bytes(content)
        if isinstance(parsed, list):
            records = parsed
        elif isinstance(parsed, dict):
            records = [parsed]
        else:
            raise FileDecodeError("JSON file must contain an object or an array")

    logger.info(f"[UploadDecoder] Decoded {len(records)} rows from {filename or 'upload'}")
    if not records:
        raise InvalidUploadError("No items found in uploaded file")
    return records
