# core/supabase_helpers.py

from typing import Any, Dict, Iterable, List, Mapping, Optional

from supabase import Client

from core.errors import RowStoreError, extract_supabase_error
from core.logging_config import logger


# =================================================================
#  ROW STORE: generic CRUD over Supabase (PostgREST) tables
# =================================================================
# Filters:
#   filters      {"column": value}            → column = value
#   in_filters   {"column": [v1, v2, ...]}    → column IN (...)
#   null_columns ["column", ...]              → column IS NULL
#   ilike_filters {"column": pattern}         → column ILIKE pattern
#                 (escape user input with core.utils.escape_like)
#
# Every failure is raised as RowStoreError so callers never see raw
# postgrest exceptions. "Not found" is an empty list / None, not an error.
# =================================================================

Row = Dict[str, Any]


class RowStore:
    def __init__(self, client: Client):
        if client is None:
            raise RuntimeError("Supabase client not configured")
        self.client = client

    # -------------------------------------------------------------
    # Query building
    # -------------------------------------------------------------
    @staticmethod
    def _apply_filters(
        query,
        filters: Optional[Mapping[str, Any]] = None,
        in_filters: Optional[Mapping[str, Iterable[Any]]] = None,
        null_columns: Optional[Iterable[str]] = None,
        ilike_filters: Optional[Mapping[str, str]] = None,
    ):
        for key, val in (filters or {}).items():
            query = query.eq(key, val)
        for key, pattern in (ilike_filters or {}).items():
            query = query.ilike(key, pattern)
        for key, values in (in_filters or {}).items():
            query = query.in_(key, list(values))
        for column in null_columns or ():
            query = query.is_(column, "null")
        return query

    def _fail(self, operation: str, table: str, error: Exception):
        logger.error(f"Row store {operation} on {table} failed: {extract_supabase_error(error)}")
        raise RowStoreError(operation, table, error) from error

    # -------------------------------------------------------------
    # SELECT
    # -------------------------------------------------------------
    def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        columns: str = "*",
        in_filters: Optional[Mapping[str, Iterable[Any]]] = None,
        null_columns: Optional[Iterable[str]] = None,
        ilike_filters: Optional[Mapping[str, str]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        try:
            query = self.client.table(table).select(columns)
            query = self._apply_filters(
                query, filters, in_filters, null_columns, ilike_filters
            )
            if order_by:
                query = query.order(order_by, desc=descending)
            if limit is not None:
                query = query.limit(limit)
            result = query.execute()
            return result.data or []
        except Exception as e:
            self._fail("select", table, e)

    def select_one(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        columns: str = "*",
        null_columns: Optional[Iterable[str]] = None,
        ilike_filters: Optional[Mapping[str, str]] = None,
    ) -> Optional[Row]:
        rows = self.select(
            table, filters, columns=columns, null_columns=null_columns,
            ilike_filters=ilike_filters, limit=1,
        )
        return rows[0] if rows else None

    def count(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        in_filters: Optional[Mapping[str, Iterable[Any]]] = None,
    ) -> int:
        try:
            query = self.client.table(table).select("id", count="exact", head=True)
            query = self._apply_filters(query, filters, in_filters)
            result = query.execute()
            return result.count or 0
        except Exception as e:
            self._fail("count", table, e)

    # -------------------------------------------------------------
    # INSERT / UPSERT
    # -------------------------------------------------------------
    def insert(self, table: str, data: Mapping[str, Any]) -> Optional[Row]:
        try:
            result = (
                self.client.table(table)
                .insert(dict(data), returning="representation")
                .execute()
            )
            return result.data[0] if result.data else None
        except Exception as e:
            self._fail("insert", table, e)

    def upsert(
        self,
        table: str,
        data: Mapping[str, Any],
        *,
        on_conflict: str,
        ignore_duplicates: bool = False,
    ) -> Optional[Row]:
        """
        Single-statement insert-or-update keyed on `on_conflict`.
        With ignore_duplicates=True an existing row is left untouched and
        no row is returned.
        """
        try:
            result = (
                self.client.table(table)
                .upsert(
                    dict(data),
                    on_conflict=on_conflict,
                    ignore_duplicates=ignore_duplicates,
                    returning="representation",
                )
                .execute()
            )
            return result.data[0] if result.data else None
        except Exception as e:
            self._fail("upsert", table, e)

    # -------------------------------------------------------------
    # UPDATE
    # -------------------------------------------------------------
    def update(
        self,
        table: str,
        filters: Mapping[str, Any],
        data: Mapping[str, Any],
        *,
        null_columns: Optional[Iterable[str]] = None,
    ) -> Optional[Row]:
        """Returns the first updated row, or None when nothing matched."""
        if not filters:
            raise ValueError("Refusing to update without filters")
        try:
            query = self.client.table(table).update(
                dict(data), returning="representation"
            )
            query = self._apply_filters(query, filters, null_columns=null_columns)
            result = query.execute()
            return result.data[0] if result.data else None
        except Exception as e:
            self._fail("update", table, e)

    # -------------------------------------------------------------
    # DELETE (delete-if-exists; deleting nothing is not an error)
    # -------------------------------------------------------------
    def delete(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        in_filters: Optional[Mapping[str, Iterable[Any]]] = None,
    ) -> List[Row]:
        if not filters and not in_filters:
            raise ValueError("Refusing to delete without filters")
        try:
            query = self.client.table(table).delete()
            query = self._apply_filters(query, filters, in_filters)
            result = query.execute()
            return result.data or []
        except Exception as e:
            self._fail("delete", table, e)
