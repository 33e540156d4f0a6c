"""
DynamoDB-backed content store.

Each content table maps to one DynamoDB table keyed on ``id`` (number). Id
sequences live as atomic counters in a separate sequences table keyed on
``table_name``.
"""
from decimal import Decimal
from functools import reduce
from typing import Any, Dict, Iterable, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr

from content_ingest.core.config import settings
from content_ingest.core.logging_config import logger
from content_ingest.services.content_store import ContentStore, ContentTable, UNIQUE_KEYS
from content_ingest.utils.exceptions import ResetError, StorageError


SEQUENCES_TABLE = "sequences"


def _from_dynamo(value: Any) -> Any:
    """Convert DynamoDB Decimals back to ints/floats, recursively."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_dynamo(v) for v in value]
    return value


def _to_dynamo(value: Any) -> Any:
    """DynamoDB rejects floats; store them as Decimal."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_dynamo(v) for v in value]
    return value


class DynamoContentStore(ContentStore):
    """Content store on DynamoDB via the boto3 resource API."""

    backend_name = "dynamodb"

    def __init__(self, dynamodb=None, table_prefix: Optional[str] = None):
        """
        Initialize DynamoDB tables.

        Args:
            dynamodb: Optional boto3 DynamoDB resource (built from settings when omitted)
            table_prefix: Prefix prepended to every table name
        """
        self.table_prefix = table_prefix if table_prefix is not None else settings.dynamodb_table_prefix
        self.dynamodb = dynamodb or boto3.resource(
            'dynamodb',
            region_name=settings.aws_region,
            endpoint_url=settings.dynamodb_endpoint_url,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key
        )
        self.tables = {
            table: self.dynamodb.Table(f"{self.table_prefix}{table.value}")
            for table in ContentTable
        }
        self.sequences = self.dynamodb.Table(f"{self.table_prefix}{SEQUENCES_TABLE}")
        logger.info(f"[DynamoContentStore] Using tables with prefix '{self.table_prefix}'")

    def _scan(self, table: ContentTable, **kwargs) -> List[Dict[str, Any]]:
        items = []
        try:
            response = self.tables[table].scan(**kwargs)
            items.extend(response.get('Items', []))
            while 'LastEvaluatedKey' in response:
                response = self.tables[table].scan(ExclusiveStartKey=response['LastEvaluatedKey'], **kwargs)
                items.extend(response.get('Items', []))
        except Exception as e:
            logger.error(f"[DynamoContentStore] Scan of {table.value} failed: {e}")
            raise StorageError(f"Scan of {table.value} failed: {e}") from e
        return [_from_dynamo(item) for item in items]

    def find_all(self, table: ContentTable) -> List[Dict[str, Any]]:
        return sorted(self._scan(table), key=lambda item: item['id'])

    def find_duplicate(self, table: ContentTable, criteria: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        condition = reduce(
            lambda left, right: left & right,
            [Attr(field).eq(_to_dynamo(value)) for field, value in criteria.items()]
        )
        matches = self._scan(table, FilterExpression=condition)
        if not matches:
            return None
        return min(matches, key=lambda item: item['id'])

    def _next_id(self, table: ContentTable) -> int:
        response = self.sequences.update_item(
            Key={'table_name': table.value},
            UpdateExpression='ADD #v :one',
            ExpressionAttributeNames={'#v': 'value'},
            ExpressionAttributeValues={':one': 1},
            ReturnValues='UPDATED_NEW'
        )
        return int(response['Attributes']['value'])

    def create(self, table: ContentTable, data: Dict[str, Any]) -> Dict[str, Any]:
        unique_field = UNIQUE_KEYS.get(table)
        if unique_field and self.find_duplicate(table, {unique_field: data.get(unique_field)}):
            raise StorageError(
                f"Unique constraint failed on {table.value}.{unique_field}={data.get(unique_field)}"
            )

        item = dict(data)
        item['id'] = self._next_id(table)
        self.tables[table].put_item(
            Item=_to_dynamo(item),
            ConditionExpression='attribute_not_exists(id)'
        )
        return item

    def update(self, table: ContentTable, criteria: Dict[str, Any], data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        existing = self.find_duplicate(table, criteria)
        if existing is None:
            return None
        item = {**existing, **{k: v for k, v in data.items() if k != 'id'}}
        self.tables[table].put_item(Item=_to_dynamo(item))
        return item

    def delete_all(self, table: ContentTable) -> int:
        keys = self._scan(table, ProjectionExpression='id')
        with self.tables[table].batch_writer() as batch:
            for key in keys:
                batch.delete_item(Key={'id': key['id']})
        return len(keys)

    def reset_sequence(self, table: ContentTable) -> None:
        self.sequences.put_item(Item={'table_name': table.value, 'value': 0})

    def _snapshot_sequence(self, table: ContentTable) -> Optional[Dict[str, Any]]:
        response = self.sequences.get_item(Key={'table_name': table.value})
        return response.get('Item')

    def _restore(
        self,
        rows: Dict[ContentTable, List[Dict[str, Any]]],
        sequences: Dict[ContentTable, Optional[Dict[str, Any]]]
    ) -> None:
        """Write snapshotted rows and counters back after a failed reset."""
        for table, items in rows.items():
            with self.tables[table].batch_writer(overwrite_by_pkeys=['id']) as batch:
                for item in items:
                    batch.put_item(Item=_to_dynamo(item))
            logger.info(f"[DynamoContentStore] Restored {len(items)} rows to {table.value}")

        for table, item in sequences.items():
            if item is None:
                self.sequences.delete_item(Key={'table_name': table.value})
            else:
                self.sequences.put_item(Item=item)

    def reset_tables(self, tables: Iterable[ContentTable]) -> None:
        """
        Wipe and reseed ``tables``; on failure the previous rows and counters
        are written back before ResetError is raised.
        """
        tables = list(tables)
        try:
            rows = {table: self.find_all(table) for table in tables}
            sequences = {table: self._snapshot_sequence(table) for table in tables}
        except Exception as e:
            logger.error(f"[DynamoContentStore] Could not snapshot tables before reset: {e}")
            raise ResetError(f"Reset failed before any delete: {e}") from e

        try:
            super().reset_tables(tables)
        except Exception as e:
            logger.error(f"[DynamoContentStore] Reset failed, restoring previous state: {e}")
            try:
                self._restore(rows, sequences)
            except Exception as restore_error:
                logger.error(f"[DynamoContentStore] Restore after failed reset incomplete: {restore_error}")
                raise ResetError(
                    f"Reset failed: {e}; restore incomplete: {restore_error}"
                ) from e
            raise ResetError(f"Reset failed: {e}") from e
