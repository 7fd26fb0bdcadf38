"""
Document <-> row mapping for the relational backend.

Documents keep their API field names (``video_url``, ``lightWaveEffect``,
``docId``); columns are snake_case, with per-table overrides for names that
collide with SQL keywords (``order`` -> ``display_order``).
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")
_SNAKE_BOUNDARY = re.compile(r"_([a-z0-9])")


def to_snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", str(key)).lower()


def to_camel_case(key: str) -> str:
    return _SNAKE_BOUNDARY.sub(lambda m: m.group(1).upper(), str(key))


def iso_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class TableSpec:
    """
    How one collection is laid out as a table.

    ``fields`` lists the document fields in column order. ``doc_id`` marks a
    single-document table: every row is keyed by that fixed ``doc_id``.
    """

    table: str
    key_field: str
    fields: tuple[str, ...]
    json_fields: frozenset[str] = frozenset()
    column_overrides: dict[str, str] = field(default_factory=dict)
    doc_id: str | None = None

    def column(self, field_name: str) -> str:
        if field_name in self.column_overrides:
            return self.column_overrides[field_name]
        return to_snake_case(field_name)

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self.column(f) for f in self.fields)

    @property
    def key_column(self) -> str:
        return self.column(self.key_field)

    def field_for_column(self, column: str) -> str | None:
        for f in self.fields:
            if self.column(f) == column:
                return f
        return None

    def has_field(self, field_name: str) -> bool:
        return field_name in self.fields


def to_column_value(spec: TableSpec, field_name: str, value: Any) -> Any:
    if value is None:
        return None
    if field_name in spec.json_fields:
        return json.dumps(value)
    return value


def document_to_row(spec: TableSpec, document: dict[str, Any]) -> dict[str, Any]:
    """Known fields only, keyed by column name; unknown fields are dropped."""
    row: dict[str, Any] = {}
    for f in spec.fields:
        if f in document:
            row[spec.column(f)] = to_column_value(spec, f, document[f])
    return row


def _from_column_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return iso_utc(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def row_to_document(spec: TableSpec, row: dict[str, Any]) -> dict[str, Any]:
    doc: dict[str, Any] = {}
    for column, value in row.items():
        f = spec.field_for_column(column)
        if f is None:
            continue
        if f in spec.json_fields and isinstance(value, str):
            value = json.loads(value)
        doc[f] = _from_column_value(value)
    return doc
