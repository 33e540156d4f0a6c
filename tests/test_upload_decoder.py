"""
Tests for request-body and file decoding.
"""
import io
import json

import pandas as pd
import pytest
from openpyxl import Workbook

from content_ingest.models.schemas import UploadType
from content_ingest.services.upload_decoder import (
    decode_upload_file,
    extract_records,
    parse_flag,
    parse_upload_type,
)
from content_ingest.utils.exceptions import (
    FileDecodeError,
    InvalidUploadError,
    UnsupportedUploadTypeError,
)


class TestExtractRecords:
    """Finding the row list in a JSON body."""

    def test_top_level_array(self):
        assert extract_records([{"a": 1}]) == [{"a": 1}]

    def test_data_array(self):
        assert extract_records({"type": "mcq", "data": [{"a": 1}, {"a": 2}]}) == [{"a": 1}, {"a": 2}]

    def test_nested_collection_in_data(self):
        body = {"data": {"questions": [{"a": 1}], "meta": "x"}}
        assert extract_records(body) == [{"a": 1}]

    def test_top_level_collection(self):
        assert extract_records({"type": "chapters", "chapters": [{"chapterNumber": 1}]}) == [{"chapterNumber": 1}]

    def test_data_array_wins_over_top_level_collection(self):
        body = {"data": [{"from": "data"}], "revisions": [{"from": "revisions"}]}
        assert extract_records(body) == [{"from": "data"}]

    def test_single_data_object_is_wrapped(self):
        assert extract_records({"data": {"chapterNumber": 1}}) == [{"chapterNumber": 1}]

    def test_non_array_data_is_rejected(self):
        with pytest.raises(InvalidUploadError):
            extract_records({"type": "mcq", "data": "not-an-array"})

    def test_empty_list_is_rejected(self):
        with pytest.raises(InvalidUploadError):
            extract_records({"data": []})


class TestRequestFields:
    """Upload type and boolean flags."""

    def test_upload_type(self):
        assert parse_upload_type("MCQ") == UploadType.MCQ
        with pytest.raises(InvalidUploadError):
            parse_upload_type(None)
        with pytest.raises(UnsupportedUploadTypeError):
            parse_upload_type("videos")

    def test_flags(self):
        assert parse_flag(True) is True
        assert parse_flag("true") is True
        assert parse_flag("false") is False
        assert parse_flag("yes") is False
        assert parse_flag(None) is False


class TestDecodeUploadFile:
    """Uploaded files."""

    def test_mcq_csv_keeps_cell_text(self):
        content = (
            "chapterNumber,question,optionA,optionB,correctAnswer,difficulty\n"
            "1,What share?,50%,08,2,\n"
        ).encode("utf-8")
        rows = decode_upload_file(UploadType.MCQ, "questions.csv", content)
        assert rows == [{
            "chapterNumber": "1",
            "question": "What share?",
            "optionA": "50%",
            "optionB": "08",
            "correctAnswer": "2",
        }]

    def test_mcq_excel_first_sheet(self):
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            pd.DataFrame([{"questionEn": "Q1", "optionAEn": "007"}]).to_excel(writer, index=False, sheet_name="MCQ")
            pd.DataFrame([{"ignored": "x"}]).to_excel(writer, index=False, sheet_name="Other")

        rows = decode_upload_file(UploadType.MCQ, "questions.xlsx", buffer.getvalue())
        assert rows == [{"questionEn": "Q1", "optionAEn": "007"}]

    def test_mcq_excel_numbers_keep_displayed_text(self):
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(["questionEn", "optionAEn", "optionBEn", "optionCEn", "optionDEn", "correctAnswer"])
        sheet.append(["What share?", 0.5, 8, 1234.5, 0.125, 2])
        sheet.append([None, None, None, None, None, None])
        sheet["B2"].number_format = "0%"
        sheet["C2"].number_format = "00"
        sheet["D2"].number_format = "#,##0.00"
        sheet["E2"].number_format = "0.00%"
        buffer = io.BytesIO()
        workbook.save(buffer)

        rows = decode_upload_file(UploadType.MCQ, "questions.xlsx", buffer.getvalue())

        assert rows == [{
            "questionEn": "What share?",
            "optionAEn": "50%",
            "optionBEn": "08",
            "optionCEn": "1,234.50",
            "optionDEn": "12.50%",
            "correctAnswer": "2",
        }]

    def test_mcq_json_file(self):
        content = json.dumps([{"questionEn": "Q"}]).encode("utf-8")
        assert decode_upload_file(UploadType.MCQ, "questions.json", content) == [{"questionEn": "Q"}]

    def test_revision_single_object(self):
        content = json.dumps({"chapterNumber": 1, "titleEn": "T"}).encode("utf-8")
        assert decode_upload_file(UploadType.REVISION, "notes.json", content) == [{"chapterNumber": 1, "titleEn": "T"}]

    def test_invalid_json(self):
        with pytest.raises(FileDecodeError):
            decode_upload_file(UploadType.CHAPTERS, "chapters.json", b"{not json")

    def test_unreadable_workbook(self):
        with pytest.raises(FileDecodeError):
            decode_upload_file(UploadType.MCQ, "questions.xlsx", b"plain text, not a workbook")

    def test_empty_array(self):
        with pytest.raises(InvalidUploadError):
            decode_upload_file(UploadType.REVISION, "notes.json", b"[]")
