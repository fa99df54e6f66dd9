"""
Inventory Document Store

Data access layer: generic collections of JSON documents.

Backends:
    - InMemoryDocumentStore: process-local dicts (development, tests)
    - PostgresDocumentStore: one JSONB table per schema via asyncpg
      Table: <schema>.documents (collection, id, data, created_at, updated_at)
"""

import asyncio
import copy
import json
import logging
import operator
import uuid
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

import asyncpg

from .models import FilterOp, QueryFilter
from .protocols import DocumentNotFoundError, DocumentStoreError

logger = logging.getLogger(__name__)


_COMPARATORS: Dict[FilterOp, Callable[[Any, Any], bool]] = {
    FilterOp.EQ: operator.eq,
    FilterOp.NE: operator.ne,
    FilterOp.LT: operator.lt,
    FilterOp.LTE: operator.le,
    FilterOp.GT: operator.gt,
    FilterOp.GTE: operator.ge,
}


def new_document_id(collection: str) -> str:
    """Generate a document id prefixed with the collection"""
    return f"{collection[:3]}_{uuid.uuid4().hex[:16]}"


def to_json_value(value: Any) -> Any:
    """Normalize a filter value to the form stored in documents"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class InMemoryDocumentStore:
    """Document store kept in process memory"""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    async def initialize(self) -> None:
        logger.info("In-memory document store initialized")

    async def close(self) -> None:
        logger.info("In-memory document store closed")

    async def health_check(self) -> bool:
        return True

    def _collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def _export(doc_id: str, record: Dict[str, Any]) -> Dict[str, Any]:
        return {"id": doc_id, **copy.deepcopy(record)}

    async def create(self, collection: str, record: Dict[str, Any]) -> str:
        doc_id = new_document_id(collection)
        now = self._now()
        self._collection(collection)[doc_id] = {
            **copy.deepcopy(record),
            "created_at": now,
            "updated_at": now,
        }
        return doc_id

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        record = self._collection(collection).get(doc_id)
        return self._export(doc_id, record) if record is not None else None

    async def update(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        record = self._collection(collection).get(doc_id)
        if record is None:
            raise DocumentNotFoundError(collection, doc_id)
        record.update(copy.deepcopy(partial))
        record["updated_at"] = self._now()

    async def delete(self, collection: str, doc_id: str) -> None:
        if self._collection(collection).pop(doc_id, None) is None:
            raise DocumentNotFoundError(collection, doc_id)

    async def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        results = [
            self._export(doc_id, record)
            for doc_id, record in self._collection(collection).items()
            if all(self._matches(record, f) for f in filters)
        ]

        if order_by:
            # Documents missing the field sort last; ties break on creation time
            present = [r for r in results if r.get(order_by) is not None]
            missing = [r for r in results if r.get(order_by) is None]
            present.sort(key=lambda r: (r[order_by], r.get("created_at") or ""), reverse=descending)
            results = present + missing

        if limit is not None:
            results = results[:limit]
        return results

    @staticmethod
    def _matches(record: Dict[str, Any], query_filter: QueryFilter) -> bool:
        field, op, value = query_filter
        actual = record.get(field)
        expected = to_json_value(value)
        if op in (FilterOp.EQ, FilterOp.NE):
            return _COMPARATORS[op](actual, expected)
        if actual is None or expected is None:
            return False
        try:
            return _COMPARATORS[op](actual, expected)
        except TypeError:
            return False

    async def increment(
        self,
        collection: str,
        doc_id: str,
        field: str,
        delta: float,
        floor: Optional[float] = None,
    ) -> Optional[Dict[str, Any]]:
        # No await between the check and the write
        record = self._collection(collection).get(doc_id)
        if record is None:
            raise DocumentNotFoundError(collection, doc_id)

        new_value = (record.get(field) or 0) + delta
        if floor is not None and new_value < floor:
            return None

        record[field] = new_value
        record["updated_at"] = self._now()
        return self._export(doc_id, record)


_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

_SQL_OPERATORS = {
    FilterOp.LT: "<",
    FilterOp.LTE: "<=",
    FilterOp.GT: ">",
    FilterOp.GTE: ">=",
}


class PostgresDocumentStore:
    """
    Document store on PostgreSQL JSONB.

    Every collection shares one table; conditional increments run as a
    single UPDATE so concurrent depletions cannot overdraw a quantity.
    """

    def __init__(
        self,
        dsn: str,
        schema: str = "inventory",
        min_size: int = 1,
        max_size: int = 10,
    ):
        self.dsn = dsn
        self.schema = schema
        self.table = f'"{schema}".documents'
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None

    @staticmethod
    async def _init_connection(conn: asyncpg.Connection) -> None:
        await conn.set_type_codec(
            "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
        )

    async def initialize(self) -> None:
        """Create the connection pool and the documents table"""
        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                init=self._init_connection,
            )
            async with self._pool.acquire() as conn:
                await conn.execute(f'CREATE SCHEMA IF NOT EXISTS "{self.schema}"')
                await conn.execute(f'''
                    CREATE TABLE IF NOT EXISTS {self.table} (
                        collection TEXT NOT NULL,
                        id TEXT NOT NULL,
                        data JSONB NOT NULL,
                        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                        updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                        PRIMARY KEY (collection, id)
                    )
                ''')
            logger.info(f"PostgreSQL document store initialized (schema={self.schema})")
        except _DRIVER_ERRORS as e:
            logger.error(f"Failed to initialize PostgreSQL document store: {e}")
            raise DocumentStoreError(f"Failed to initialize document store: {e}") from e

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("PostgreSQL document store closed")

    async def health_check(self) -> bool:
        try:
            async with self._connection("health check") as conn:
                return await conn.fetchval("SELECT 1") == 1
        except DocumentStoreError:
            return False

    @asynccontextmanager
    async def _connection(self, operation: str):
        if self._pool is None:
            raise DocumentStoreError("Document store not initialized")
        try:
            async with self._pool.acquire() as conn:
                yield conn
        except _DRIVER_ERRORS as e:
            logger.error(f"Failed to {operation}: {e}")
            raise DocumentStoreError(f"Failed to {operation}: {e}") from e

    @staticmethod
    def _row_to_record(row: asyncpg.Record) -> Dict[str, Any]:
        return {
            "id": row["id"],
            **row["data"],
            "created_at": row["created_at"].isoformat(),
            "updated_at": row["updated_at"].isoformat(),
        }

    @staticmethod
    def _affected(status: str) -> int:
        # asyncpg returns command tags like "UPDATE 1"
        try:
            return int(status.split()[-1])
        except (ValueError, IndexError):
            return 0

    async def create(self, collection: str, record: Dict[str, Any]) -> str:
        doc_id = new_document_id(collection)
        async with self._connection(f"create {collection} document") as conn:
            await conn.execute(
                f"INSERT INTO {self.table} (collection, id, data) VALUES ($1, $2, $3::jsonb)",
                collection, doc_id, record,
            )
        return doc_id

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        async with self._connection(f"get {collection} document {doc_id}") as conn:
            row = await conn.fetchrow(
                f"SELECT id, data, created_at, updated_at FROM {self.table} "
                f"WHERE collection = $1 AND id = $2",
                collection, doc_id,
            )
        return self._row_to_record(row) if row else None

    async def update(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        async with self._connection(f"update {collection} document {doc_id}") as conn:
            status = await conn.execute(
                f"UPDATE {self.table} SET data = data || $3::jsonb, updated_at = now() "
                f"WHERE collection = $1 AND id = $2",
                collection, doc_id, partial,
            )
        if self._affected(status) == 0:
            raise DocumentNotFoundError(collection, doc_id)

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._connection(f"delete {collection} document {doc_id}") as conn:
            status = await conn.execute(
                f"DELETE FROM {self.table} WHERE collection = $1 AND id = $2",
                collection, doc_id,
            )
        if self._affected(status) == 0:
            raise DocumentNotFoundError(collection, doc_id)

    async def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        conditions = ["collection = $1"]
        params: List[Any] = [collection]

        for field, op, value in filters:
            value = to_json_value(value)
            if op in (FilterOp.EQ, FilterOp.NE):
                params.append({field: value})
                clause = f"data @> ${len(params)}::jsonb"
                conditions.append(clause if op == FilterOp.EQ else f"NOT ({clause})")
                continue

            params.append(field)
            field_param = len(params)
            sql_op = _SQL_OPERATORS[op]
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                params.append(float(value))
                conditions.append(f"(data->>${field_param}::text)::float8 {sql_op} ${len(params)}::float8")
            else:
                params.append(str(value))
                conditions.append(f"data->>${field_param}::text {sql_op} ${len(params)}::text")

        query = (
            f"SELECT id, data, created_at, updated_at FROM {self.table} "
            f"WHERE {' AND '.join(conditions)}"
        )
        if order_by:
            params.append(order_by)
            direction = "DESC" if descending else "ASC"
            query += f" ORDER BY data->${len(params)}::text {direction} NULLS LAST, created_at {direction}"
        if limit is not None:
            query += f" LIMIT {int(limit)}"

        async with self._connection(f"query {collection}") as conn:
            rows = await conn.fetch(query, *params)
        return [self._row_to_record(row) for row in rows]

    async def increment(
        self,
        collection: str,
        doc_id: str,
        field: str,
        delta: float,
        floor: Optional[float] = None,
    ) -> Optional[Dict[str, Any]]:
        async with self._connection(f"increment {collection}.{field} on {doc_id}") as conn:
            row = await conn.fetchrow(
                f'''
                UPDATE {self.table}
                SET data = jsonb_set(
                        data, ARRAY[$3::text],
                        to_jsonb(COALESCE((data->>$3::text)::float8, 0) + $4::float8)
                    ),
                    updated_at = now()
                WHERE collection = $1 AND id = $2
                  AND ($5::float8 IS NULL OR COALESCE((data->>$3::text)::float8, 0) + $4::float8 >= $5::float8)
                RETURNING id, data, created_at, updated_at
                ''',
                collection, doc_id, field, float(delta), float(floor) if floor is not None else None,
            )
            if row is None:
                exists = await conn.fetchval(
                    f"SELECT 1 FROM {self.table} WHERE collection = $1 AND id = $2",
                    collection, doc_id,
                )
                if not exists:
                    raise DocumentNotFoundError(collection, doc_id)
                return None
        return self._row_to_record(row)


__all__ = [
    "InMemoryDocumentStore",
    "PostgresDocumentStore",
    "new_document_id",
    "to_json_value",
]
