"""
Tests for the in-memory and DynamoDB content stores.
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from conftest import add_chapter

from content_ingest.services.content_store import ContentTable, InMemoryContentStore
from content_ingest.services.dynamodb_store import DynamoContentStore
from content_ingest.utils.exceptions import ResetError, StorageError


class TestInMemoryContentStore:
    """Dict-backed store."""

    def test_create_assigns_sequential_ids(self, store):
        first = store.create(ContentTable.QUESTION, {"question_en": "a"})
        second = store.create(ContentTable.QUESTION, {"question_en": "b"})
        assert (first["id"], second["id"]) == (1, 2)

    def test_chapter_number_is_unique(self, store):
        add_chapter(store, 1)
        with pytest.raises(StorageError):
            add_chapter(store, 1)

    def test_upsert_creates_then_updates(self, store):
        row, created = store.upsert(
            ContentTable.CHAPTER, {"chapter_number": 1}, create={"title_en": "Old"}, update={"title_en": "Old"}
        )
        assert created is True
        updated, created = store.upsert(
            ContentTable.CHAPTER, {"chapter_number": 1}, create={"title_en": "New"}, update={"title_en": "New"}
        )
        assert created is False
        assert updated["id"] == row["id"]
        assert updated["title_en"] == "New"
        assert len(store.find_all(ContentTable.CHAPTER)) == 1

    def test_returned_rows_are_copies(self, store):
        row = store.create(ContentTable.REVISION, {"qa_json": []})
        row["qa_json"].append("mutated")
        assert store.find_all(ContentTable.REVISION)[0]["qa_json"] == []

    def test_reset_tables_wipes_and_restarts_sequences(self, store):
        add_chapter(store, 1)
        store.create(ContentTable.QUESTION, {"question_en": "a"})
        store.reset_tables([ContentTable.QUESTION, ContentTable.CHAPTER])

        assert store.find_all(ContentTable.CHAPTER) == []
        assert store.find_all(ContentTable.QUESTION) == []
        assert add_chapter(store, 5)["id"] == 1

    def test_failed_reset_restores_previous_state(self, store):
        add_chapter(store, 1)
        store.create(ContentTable.QUESTION, {"question_en": "a"})

        original_reset_sequence = store.reset_sequence

        def failing_reset_sequence(table):
            if table == ContentTable.CHAPTER:
                raise RuntimeError("sequence locked")
            original_reset_sequence(table)

        store.reset_sequence = failing_reset_sequence

        with pytest.raises(ResetError):
            store.reset_tables([ContentTable.QUESTION, ContentTable.CHAPTER])

        assert len(store.find_all(ContentTable.CHAPTER)) == 1
        assert len(store.find_all(ContentTable.QUESTION)) == 1
        assert store.create(ContentTable.QUESTION, {"question_en": "b"})["id"] == 2


@pytest.fixture
def dynamodb():
    """Mock boto3 DynamoDB resource; every Table() is the same mock."""
    resource = MagicMock()
    table = MagicMock()
    table.scan.return_value = {"Items": []}
    resource.Table.return_value = table
    return resource


class TestDynamoContentStore:
    """DynamoDB backend against a mocked resource."""

    def test_table_names_use_prefix(self, dynamodb):
        DynamoContentStore(dynamodb=dynamodb, table_prefix="test_")
        names = [call.args[0] for call in dynamodb.Table.call_args_list]
        assert "test_chapter" in names
        assert "test_question" in names
        assert "test_revision_content" in names
        assert "test_sequences" in names

    def test_find_all_converts_decimals(self, dynamodb):
        dynamodb.Table.return_value.scan.return_value = {
            "Items": [
                {"id": Decimal("2"), "chapter_number": Decimal("5")},
                {"id": Decimal("1"), "chapter_number": Decimal("4")},
            ]
        }
        store = DynamoContentStore(dynamodb=dynamodb, table_prefix="")
        rows = store.find_all(ContentTable.CHAPTER)
        assert rows == [{"id": 1, "chapter_number": 4}, {"id": 2, "chapter_number": 5}]
        assert isinstance(rows[0]["id"], int)

    def test_scan_follows_pagination(self, dynamodb):
        dynamodb.Table.return_value.scan.side_effect = [
            {"Items": [{"id": Decimal("1")}], "LastEvaluatedKey": {"id": Decimal("1")}},
            {"Items": [{"id": Decimal("2")}]},
        ]
        store = DynamoContentStore(dynamodb=dynamodb, table_prefix="")
        assert [row["id"] for row in store.find_all(ContentTable.QUESTION)] == [1, 2]

    def test_find_duplicate_returns_lowest_id(self, dynamodb):
        dynamodb.Table.return_value.scan.return_value = {
            "Items": [{"id": Decimal("7"), "question_en": "Q"}, {"id": Decimal("3"), "question_en": "Q"}]
        }
        store = DynamoContentStore(dynamodb=dynamodb, table_prefix="")
        match = store.find_duplicate(ContentTable.QUESTION, {"chapter_id": 1, "question_en": "Q"})
        assert match["id"] == 3
        assert "FilterExpression" in dynamodb.Table.return_value.scan.call_args.kwargs

    def test_create_draws_id_from_sequence(self, dynamodb):
        table = dynamodb.Table.return_value
        table.update_item.return_value = {"Attributes": {"value": Decimal("4")}}
        store = DynamoContentStore(dynamodb=dynamodb, table_prefix="")

        row = store.create(ContentTable.QUESTION, {"question_en": "Q", "weight": 0.5})

        assert row["id"] == 4
        item = table.put_item.call_args.kwargs["Item"]
        assert item["id"] == 4
        assert item["weight"] == Decimal("0.5")

    def test_scan_failure_raises_storage_error(self, dynamodb):
        dynamodb.Table.return_value.scan.side_effect = RuntimeError("throttled")
        store = DynamoContentStore(dynamodb=dynamodb, table_prefix="")
        with pytest.raises(StorageError):
            store.find_all(ContentTable.CHAPTER)

    def test_failed_reset_writes_rows_and_counter_back(self):
        table = MagicMock()
        table.scan.return_value = {"Items": [{"id": Decimal("1"), "question_en": "Q"}]}
        sequences = MagicMock()
        sequences.get_item.return_value = {"Item": {"table_name": "question", "value": Decimal("3")}}
        sequences.put_item.side_effect = [RuntimeError("throttled"), None]
        resource = MagicMock()
        resource.Table.side_effect = lambda name: sequences if name.endswith("sequences") else table
        store = DynamoContentStore(dynamodb=resource, table_prefix="")

        with pytest.raises(ResetError):
            store.reset_tables([ContentTable.QUESTION])

        batch = table.batch_writer.return_value.__enter__.return_value
        batch.delete_item.assert_called_with(Key={"id": 1})
        batch.put_item.assert_called_with(Item={"id": 1, "question_en": "Q"})
        sequences.put_item.assert_called_with(Item={"table_name": "question", "value": Decimal("3")})

    def test_snapshot_failure_deletes_nothing(self, dynamodb):
        table = dynamodb.Table.return_value
        table.get_item.side_effect = RuntimeError("access denied")
        store = DynamoContentStore(dynamodb=dynamodb, table_prefix="")

        with pytest.raises(ResetError):
            store.reset_tables([ContentTable.REVISION])

        table.batch_writer.assert_not_called()

    def test_reset_sequence_writes_zero(self, dynamodb):
        store = DynamoContentStore(dynamodb=dynamodb, table_prefix="")
        store.reset_sequence(ContentTable.REVISION)
        dynamodb.Table.return_value.put_item.assert_called_with(
            Item={"table_name": "revision_content", "value": 0}
        )
