from enum import Enum
from pathlib import Path
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from adinvoice.classification.platform import Platform
from adinvoice.database.connection import get_connection
from adinvoice.database.exceptions import RecordNotFoundError, StorageError
from adinvoice.database.models import InvoiceRecord, InvoiceStatus
from adinvoice.database.repositories.base import BaseInvoiceRepository, check_updatable
from adinvoice.extraction.models import InvoiceData

_COLUMNS = """
    id, file_name, file_path, file_hash, platform, status, extracted_data,
    raw_text, error_message, processed_at, created_at, updated_at
"""


class PostgresInvoiceRepository(BaseInvoiceRepository):
    """Database operations for the invoices table."""

    def create(self, record: InvoiceRecord) -> int:
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO invoices
                            (file_name, file_path, file_hash, platform, status,
                             extracted_data, raw_text, error_message)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                        RETURNING id
                        """,
                        (
                            record.file_name,
                            record.file_path,
                            record.file_hash,
                            record.platform.value,
                            record.status.value,
                            _to_db(record.extracted_data),
                            record.raw_text,
                            record.error_message,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to create invoice {record.file_name}: {exc}") from exc
        if row is None:
            raise StorageError(f"Insert of invoice {record.file_name} returned no id")
        return int(row[0])

    def update(self, record_id: int, **fields: Any) -> None:
        check_updatable(fields)
        if not fields:
            return
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(name)) for name in fields
        )
        query = sql.SQL(
            "UPDATE invoices SET {}, updated_at = NOW() WHERE id = %s"
        ).format(assignments)
        params = [_to_db(value) for value in fields.values()]
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (*params, record_id))
                    if cur.rowcount == 0:
                        raise RecordNotFoundError(f"Invoice {record_id} not found")
                conn.commit()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to update invoice {record_id}: {exc}") from exc

    def find_by_id(self, record_id: int) -> InvoiceRecord | None:
        return self._find_one("id = %s", (record_id,))

    def find_by_hash(self, file_hash: str) -> InvoiceRecord | None:
        return self._find_one("file_hash = %s", (file_hash,))

    def find_by_name(self, file_name: str) -> InvoiceRecord | None:
        return self._find_one("file_name = %s", (file_name,))

    def find_by_name_stem(self, stem: str) -> InvoiceRecord | None:
        return self._find_one(
            r"file_name ~ '\.[^/.]+$' "
            r"AND LOWER(regexp_replace(file_name, '\.[^/.]+$', '')) = LOWER(%s)",
            (stem,),
        )

    def find_by_name_case_insensitive(self, file_name: str) -> InvoiceRecord | None:
        return self._find_one("LOWER(file_name) = LOWER(%s)", (file_name,))

    def find_by_platform(self, platform: Platform) -> list[InvoiceRecord]:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"SELECT {_COLUMNS} FROM invoices "
                        "WHERE platform = %s ORDER BY processed_at DESC",
                        (platform.value,),
                    )
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to list {platform.value} invoices: {exc}") from exc
        return [_from_row(row) for row in rows]

    def delete(self, record_id: int) -> None:
        try:
            with get_connection() as conn:
                conn.execute("DELETE FROM invoices WHERE id = %s", (record_id,))
                conn.commit()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to delete invoice {record_id}: {exc}") from exc

    def _find_one(self, where: str, params: tuple[Any, ...]) -> InvoiceRecord | None:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"SELECT {_COLUMNS} FROM invoices WHERE {where} ORDER BY id LIMIT 1",
                        params,
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise StorageError(f"Invoice lookup failed: {exc}") from exc
        return _from_row(row) if row is not None else None


def _to_db(value: Any) -> Any:
    if isinstance(value, InvoiceData):
        return Jsonb(value.to_payload())
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    return value


def _from_row(row: dict[str, Any]) -> InvoiceRecord:
    extracted = row["extracted_data"]
    return InvoiceRecord(
        id=row["id"],
        file_name=row["file_name"],
        file_path=row["file_path"],
        file_hash=row["file_hash"],
        platform=Platform(row["platform"]),
        status=InvoiceStatus(row["status"]),
        extracted_data=InvoiceData.from_payload(extracted) if extracted else None,
        raw_text=row["raw_text"],
        error_message=row["error_message"],
        processed_at=row["processed_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
