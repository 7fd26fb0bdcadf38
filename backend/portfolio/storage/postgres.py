"""
PostgreSQL / Aurora DSQL backend.

Connections come from a psycopg2 ``ThreadedConnectionPool`` (FastAPI runs
sync handlers on a thread pool). Against Aurora DSQL the password is a
short-lived IAM token, so the pool is rebuilt before the token expires.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any

import psycopg2
from psycopg2 import errors as pg_errors
from psycopg2 import extras, pool

from ..infrastructure.aws_clients import generate_dsql_auth_token
from ..observability.logging import get_logger
from ..settings import settings
from .base import COLLECTIONS, Collection, Database, DeleteResult, Filter, Sort, UpdateResult, set_fields
from .errors import StorageConflict, StorageError, StorageInternal, StorageUnavailable, StorageValidation
from .mapping import TableSpec, document_to_row, row_to_document, to_column_value

log = get_logger("postgres")

DSQL_TOKEN_TTL_SECONDS = 3600
# Rebuild the pool this long before the IAM token it was built with expires.
DSQL_TOKEN_REFRESH_MARGIN_SECONDS = 300

_pool: pool.ThreadedConnectionPool | None = None
_pool_created_at: float = 0.0
_pool_lock = threading.Lock()


def _connect_kwargs() -> dict[str, Any]:
    missing = [
        name
        for name, value in (
            ("PGHOST", settings.pg_host),
            ("PGUSER", settings.pg_user),
            ("PGDATABASE", settings.pg_database),
        )
        if not value
    ]
    if missing:
        raise StorageUnavailable(
            message=f"Missing required environment variables: {', '.join(missing)}",
            operation="Connect",
        )

    kwargs: dict[str, Any] = {
        "host": settings.pg_host,
        "port": int(settings.pg_port or 5432),
        "user": settings.pg_user,
        "dbname": settings.pg_database,
        "connect_timeout": 10,
    }
    if settings.is_dsql:
        kwargs["password"] = generate_dsql_auth_token(
            hostname=str(settings.pg_host), user=str(settings.pg_user), expires_in=DSQL_TOKEN_TTL_SECONDS
        )
        kwargs["sslmode"] = "require"
    else:
        if settings.pg_password:
            kwargs["password"] = settings.pg_password
        if settings.pg_sslmode:
            kwargs["sslmode"] = settings.pg_sslmode
    return kwargs


def _pool_expired(now: float) -> bool:
    if not settings.is_dsql:
        return False
    return (now - _pool_created_at) >= (DSQL_TOKEN_TTL_SECONDS - DSQL_TOKEN_REFRESH_MARGIN_SECONDS)


def init_pool(min_conn: int = 1, max_conn: int | None = None) -> pool.ThreadedConnectionPool:
    """
    Create the connection pool, or return the live one.

    Raises:
        StorageUnavailable: configuration is missing or the database is unreachable.
    """
    global _pool, _pool_created_at
    with _pool_lock:
        now = time.time()
        if _pool is not None and not _pool_expired(now):
            return _pool
        if _pool is not None:
            log.info("pg_pool_recycle", reason="dsql_token_expiring")
            _pool.closeall()
            _pool = None

        max_conn = int(max_conn or settings.pg_pool_max or 10)
        try:
            _pool = pool.ThreadedConnectionPool(min_conn, max(min_conn, max_conn), **_connect_kwargs())
        except psycopg2.OperationalError as e:
            log.error("pg_pool_init_failed", error=str(e))
            raise StorageUnavailable(
                message=f"Failed to create PostgreSQL connection pool: {e}",
                operation="Connect",
                retryable=True,
                cause=e,
            ) from e
        _pool_created_at = now
        log.info("pg_pool_initialized", dsql=settings.is_dsql, max_conn=max_conn)
        return _pool


def close_pool() -> None:
    global _pool
    with _pool_lock:
        if _pool is not None:
            _pool.closeall()
            _pool = None
            log.info("pg_pool_closed")


@dataclass(slots=True)
class QueryResult:
    rows: list[dict[str, Any]]
    rowcount: int


def _translate(e: Exception, *, operation: str, table: str | None) -> StorageError:
    if isinstance(e, pg_errors.UniqueViolation):
        return StorageConflict(message="Resource already exists", operation=operation, collection=table, cause=e)
    if isinstance(e, (psycopg2.OperationalError, psycopg2.InterfaceError, pool.PoolError)):
        return StorageUnavailable(
            message="Database is unavailable", operation=operation, collection=table, retryable=True, cause=e
        )
    if isinstance(e, (pg_errors.InvalidTextRepresentation, pg_errors.NotNullViolation, psycopg2.DataError)):
        return StorageValidation(message=str(e).strip() or "Invalid value", operation=operation, collection=table, cause=e)
    return StorageInternal(message="Database error", operation=operation, collection=table, cause=e)


def query(sql: str, params: list[Any] | tuple[Any, ...] | None = None, *, operation: str = "Query", table: str | None = None) -> QueryResult:
    """Run one statement in its own transaction and return rows as dicts."""
    p = init_pool()
    try:
        conn = p.getconn()
    except pool.PoolError as e:
        log.error("pg_getconn_failed", error=str(e).strip())
        raise _translate(e, operation=operation, table=table) from e
    broken = False
    try:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(sql, params)
            rows = [dict(r) for r in cur.fetchall()] if cur.description else []
            rowcount = int(cur.rowcount or 0)
        conn.commit()
        log.debug("pg_query", sql=sql[:100], rows=rowcount)
        return QueryResult(rows=rows, rowcount=rowcount)
    except psycopg2.Error as e:
        broken = bool(conn.closed)
        if not broken:
            conn.rollback()
        log.error("pg_query_failed", sql=sql[:100], error=str(e).strip())
        raise _translate(e, operation=operation, table=table) from e
    finally:
        try:
            p.putconn(conn, close=broken)
        except pool.PoolError as e:
            # The pool was recycled while this connection was out.
            log.warning("pg_putconn_failed", error=str(e).strip())
            if not conn.closed:
                conn.close()


# ---- schema ----

VIDEOS_SPEC = TableSpec(
    table="videos",
    key_field="id",
    fields=(
        "id", "title", "description", "year", "video_url", "thumbnail_url", "duration",
        "category", "isPublished", "order", "createdAt", "updatedAt",
    ),
    column_overrides={"order": "display_order"},
)

PHOTOS_SPEC = TableSpec(
    table="photos",
    key_field="id",
    fields=(
        "id", "title", "description", "year", "image_url", "thumbnail_url", "category",
        "location", "isPublished", "order", "createdAt", "updatedAt",
    ),
    column_overrides={"order": "display_order"},
)

REVIEWS_SPEC = TableSpec(
    table="reviews",
    key_field="id",
    fields=(
        "id", "name", "profession", "photo_url", "review_text", "rating", "status",
        "created_at", "updated_at",
    ),
)

ABOUT_SPEC = TableSpec(
    table="about",
    key_field="docId",
    fields=("docId", "profile", "skills", "software", "achievements", "updatedAt"),
    json_fields=frozenset({"profile", "skills", "software", "achievements"}),
    doc_id="about-data",
)

CONTACT_SPEC = TableSpec(
    table="contact",
    key_field="docId",
    fields=("docId", "contact", "social", "availability", "updatedAt"),
    json_fields=frozenset({"contact", "social", "availability"}),
    doc_id="contact-data",
)

SETTINGS_SPEC = TableSpec(
    table="settings",
    key_field="docId",
    fields=("docId", "lightWaveEffect", "reviewsEnabled", "updatedAt"),
    doc_id="main",
)

USERS_SPEC = TableSpec(
    table="users",
    key_field="email",
    fields=("email", "passwordHash", "name", "role", "createdAt", "updatedAt"),
)

TABLE_SPECS: dict[str, TableSpec] = {
    COLLECTIONS.VIDEOS: VIDEOS_SPEC,
    COLLECTIONS.PHOTOS: PHOTOS_SPEC,
    COLLECTIONS.REVIEWS: REVIEWS_SPEC,
    COLLECTIONS.ABOUT: ABOUT_SPEC,
    COLLECTIONS.CONTACT: CONTACT_SPEC,
    COLLECTIONS.SETTINGS: SETTINGS_SPEC,
    COLLECTIONS.USERS: USERS_SPEC,
}

# JSON columns are TEXT: Aurora DSQL has no JSON/JSONB column type.
SCHEMA_SQL: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS videos (
        id              VARCHAR(100) PRIMARY KEY,
        title           VARCHAR(300) NOT NULL,
        description     TEXT NOT NULL,
        year            INT,
        video_url       TEXT NOT NULL,
        thumbnail_url   TEXT,
        duration        VARCHAR(20),
        category        VARCHAR(100),
        is_published    BOOLEAN DEFAULT TRUE,
        display_order   INT DEFAULT 0,
        created_at      TIMESTAMPTZ DEFAULT NOW(),
        updated_at      TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS photos (
        id              VARCHAR(100) PRIMARY KEY,
        title           VARCHAR(300) NOT NULL,
        description     TEXT NOT NULL,
        year            INT,
        image_url       TEXT NOT NULL,
        thumbnail_url   TEXT,
        category        VARCHAR(100),
        location        VARCHAR(200),
        is_published    BOOLEAN DEFAULT TRUE,
        display_order   INT DEFAULT 0,
        created_at      TIMESTAMPTZ DEFAULT NOW(),
        updated_at      TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS reviews (
        id              VARCHAR(100) PRIMARY KEY,
        name            VARCHAR(200) NOT NULL,
        profession      VARCHAR(200),
        photo_url       TEXT,
        review_text     TEXT NOT NULL,
        rating          INT CHECK (rating BETWEEN 1 AND 5),
        status          VARCHAR(20) NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending', 'approved', 'rejected')),
        created_at      TIMESTAMPTZ DEFAULT NOW(),
        updated_at      TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS about (
        doc_id          VARCHAR(50) PRIMARY KEY,
        profile         TEXT,
        skills          TEXT,
        software        TEXT,
        achievements    TEXT,
        created_at      TIMESTAMPTZ DEFAULT NOW(),
        updated_at      TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS contact (
        doc_id          VARCHAR(50) PRIMARY KEY,
        contact         TEXT,
        social          TEXT,
        availability    TEXT,
        created_at      TIMESTAMPTZ DEFAULT NOW(),
        updated_at      TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS settings (
        doc_id              VARCHAR(50) PRIMARY KEY,
        light_wave_effect   BOOLEAN DEFAULT TRUE,
        reviews_enabled     BOOLEAN DEFAULT TRUE,
        created_at          TIMESTAMPTZ DEFAULT NOW(),
        updated_at          TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        email           VARCHAR(320) PRIMARY KEY,
        password_hash   VARCHAR(200) NOT NULL,
        name            VARCHAR(200),
        role            VARCHAR(20) NOT NULL DEFAULT 'admin',
        created_at      TIMESTAMPTZ DEFAULT NOW(),
        updated_at      TIMESTAMPTZ DEFAULT NOW()
    )
    """,
]

INDEX_STATEMENTS: list[str] = [
    "CREATE INDEX {async_kw}IF NOT EXISTS idx_reviews_status_created ON reviews (status, created_at)",
    "CREATE INDEX {async_kw}IF NOT EXISTS idx_videos_order ON videos (display_order, created_at)",
    "CREATE INDEX {async_kw}IF NOT EXISTS idx_photos_order ON photos (display_order, created_at)",
]


def create_tables() -> None:
    """
    Create every table and index. Safe to call repeatedly (IF NOT EXISTS).
    Aurora DSQL allows one DDL statement per transaction and asynchronous
    index builds only, so statements run one at a time.
    """
    async_kw = "ASYNC " if settings.is_dsql else ""
    for stmt in SCHEMA_SQL:
        query(stmt, operation="CreateTable")
    for stmt in INDEX_STATEMENTS:
        query(stmt.format(async_kw=async_kw), operation="CreateIndex")
    log.info("pg_schema_initialized", tables=len(SCHEMA_SQL))


# ---- collection adapter ----


class PostgresCollection(Collection):
    """MongoDB-shaped operations over one table described by a ``TableSpec``."""

    def __init__(self, name: str, spec: TableSpec):
        self.name = name
        self.spec = spec

    def _column(self, field_name: str, *, operation: str) -> str:
        if not self.spec.has_field(field_name):
            raise StorageValidation(
                message=f"Unknown field: {field_name}", operation=operation, collection=self.name
            )
        return self.spec.column(field_name)

    def _where(self, filter: Filter | None, *, operation: str) -> tuple[str, list[Any]]:
        if not filter:
            return "", []
        clauses: list[str] = []
        params: list[Any] = []
        for f, v in filter.items():
            col = self._column(f, operation=operation)
            if v is None:
                clauses.append(f"{col} IS NULL")
            else:
                clauses.append(f"{col} = %s")
                params.append(to_column_value(self.spec, f, v))
        return " WHERE " + " AND ".join(clauses), params

    def _order_by(self, sort: Sort | None) -> str:
        if not sort:
            return " ORDER BY created_at DESC"
        parts = []
        for f, direction in sort:
            col = self._column(f, operation="Find")
            parts.append(f"{col} {'DESC' if int(direction) < 0 else 'ASC'}")
        return " ORDER BY " + ", ".join(parts)

    def find(self, filter: Filter | None = None, *, sort: Sort | None = None) -> list[dict[str, Any]]:
        where, params = self._where(filter, operation="Find")
        sql = f"SELECT * FROM {self.spec.table}{where}{self._order_by(sort)}"
        res = query(sql, params, operation="Find", table=self.spec.table)
        return [row_to_document(self.spec, r) for r in res.rows]

    def find_one(self, filter: Filter) -> dict[str, Any] | None:
        where, params = self._where(filter, operation="FindOne")
        sql = f"SELECT * FROM {self.spec.table}{where} LIMIT 1"
        res = query(sql, params, operation="FindOne", table=self.spec.table)
        return row_to_document(self.spec, res.rows[0]) if res.rows else None

    def insert_one(self, document: dict[str, Any]) -> dict[str, Any]:
        doc = dict(document)
        if self.spec.doc_id and not doc.get(self.spec.key_field):
            doc[self.spec.key_field] = self.spec.doc_id
        row = document_to_row(self.spec, doc)
        if not row.get(self.spec.key_column):
            raise StorageValidation(
                message=f"{self.spec.key_field} is required", operation="InsertOne", collection=self.name
            )
        cols = list(row.keys())
        sql = (
            f"INSERT INTO {self.spec.table} ({', '.join(cols)}) "
            f"VALUES ({', '.join(['%s'] * len(cols))}) RETURNING *"
        )
        res = query(sql, [row[c] for c in cols], operation="InsertOne", table=self.spec.table)
        return row_to_document(self.spec, res.rows[0]) if res.rows else doc

    def _set_columns(self, fields: dict[str, Any]) -> dict[str, Any]:
        # updated_at is always bumped by the statement itself.
        row = document_to_row(self.spec, fields)
        row.pop("updated_at", None)
        row.pop(self.spec.key_column, None)
        return row

    def update_one(self, filter: Filter, update: dict[str, Any], *, upsert: bool = False) -> UpdateResult:
        try:
            fields = set_fields(update)
        except ValueError as e:
            raise StorageValidation(message=str(e), operation="UpdateOne", collection=self.name) from e

        if upsert:
            return self._upsert(filter, fields)

        row = self._set_columns(fields)
        where, where_params = self._where(filter, operation="UpdateOne")
        if not where:
            raise StorageValidation(message="filter is required", operation="UpdateOne", collection=self.name)
        assignments = [f"{c} = %s" for c in row] + ["updated_at = CURRENT_TIMESTAMP"]
        sql = f"UPDATE {self.spec.table} SET {', '.join(assignments)}{where}"
        res = query(sql, [*row.values(), *where_params], operation="UpdateOne", table=self.spec.table)
        return UpdateResult(matched_count=res.rowcount, modified_count=res.rowcount)

    def _upsert(self, filter: Filter, fields: dict[str, Any]) -> UpdateResult:
        key = (filter or {}).get(self.spec.key_field) or fields.get(self.spec.key_field) or self.spec.doc_id
        if not key:
            raise StorageValidation(
                message=f"{self.spec.key_field} is required for upsert", operation="UpsertOne", collection=self.name
            )
        row = self._set_columns(fields)
        key_col = self.spec.key_column
        cols = [key_col, *row.keys()]
        values = [key, *row.values()]
        # Absent (NULL) values keep the stored column.
        updates = [f"{c} = COALESCE(EXCLUDED.{c}, {self.spec.table}.{c})" for c in row]
        updates.append("updated_at = CURRENT_TIMESTAMP")
        sql = (
            f"INSERT INTO {self.spec.table} ({', '.join(cols)}) "
            f"VALUES ({', '.join(['%s'] * len(cols))}) "
            f"ON CONFLICT ({key_col}) DO UPDATE SET {', '.join(updates)} "
            "RETURNING (xmax = 0) AS inserted"
        )
        res = query(sql, values, operation="UpsertOne", table=self.spec.table)
        inserted = bool(res.rows and res.rows[0].get("inserted"))
        return UpdateResult(matched_count=0 if inserted else 1, modified_count=0 if inserted else 1, upserted=inserted)

    def delete_one(self, filter: Filter) -> DeleteResult:
        where, params = self._where(filter, operation="DeleteOne")
        if not where:
            raise StorageValidation(message="filter is required", operation="DeleteOne", collection=self.name)
        res = query(f"DELETE FROM {self.spec.table}{where}", params, operation="DeleteOne", table=self.spec.table)
        return DeleteResult(deleted_count=res.rowcount)

    def count_documents(self, filter: Filter | None = None) -> int:
        where, params = self._where(filter, operation="Count")
        res = query(f"SELECT COUNT(*) AS n FROM {self.spec.table}{where}", params, operation="Count", table=self.spec.table)
        return int(res.rows[0]["n"]) if res.rows else 0


class PostgresDatabase(Database):
    backend = "postgres"

    def __init__(self):
        self._collections = {name: PostgresCollection(name, spec) for name, spec in TABLE_SPECS.items()}

    def collection(self, name: str) -> Collection:
        c = self._collections.get(name)
        if c is None:
            raise StorageValidation(message=f"Unknown collection: {name}", operation="Collection")
        return c

    def ping(self) -> bool:
        try:
            res = query("SELECT 1 AS health_check", operation="Ping")
            return bool(res.rows)
        except StorageError as e:
            log.warning("pg_ping_failed", error=str(e))
            return False

    def close(self) -> None:
        close_pool()
