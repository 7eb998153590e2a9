# report_builder/metadata/resolver.py
"""Column discovery for the tables named in a manual JOIN fragment."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, NamedTuple, Optional

from report_builder.builder.join_parser import extract_table_names

logger = logging.getLogger(__name__)

ColumnLookup = Callable[[str], List[str]]


class TableColumnCache:
    """Thread-safe map of table name to column names.

    The lock only guards the dictionary; lookups happen outside it, so a slow
    table never holds up the others.
    """

    def __init__(self) -> None:
        self._columns: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def get(self, table_name: str) -> Optional[List[str]]:
        with self._lock:
            columns = self._columns.get(table_name)
        return list(columns) if columns is not None else None

    def set(self, table_name: str, columns: List[str]) -> None:
        with self._lock:
            self._columns[table_name] = list(columns)

    def invalidate(self, table_name: str) -> None:
        with self._lock:
            self._columns.pop(table_name, None)

    def clear(self) -> None:
        with self._lock:
            self._columns.clear()

    def __contains__(self, table_name: object) -> bool:
        with self._lock:
            return table_name in self._columns

    def __len__(self) -> int:
        with self._lock:
            return len(self._columns)


class JoinedFields(NamedTuple):
    tables: List[str]
    fields: List[str]


class JoinedFieldResolver:
    """Looks up the columns of every table referenced by a join fragment."""

    def __init__(self, lookup: ColumnLookup, cache: TableColumnCache, max_workers: int = 4):
        self.lookup = lookup
        self.cache = cache
        self.max_workers = max(1, max_workers)

    def resolve(self, join_query: str) -> JoinedFields:
        tables = extract_table_names(join_query)
        if not tables:
            return JoinedFields(tables=[], fields=[])

        if self.max_workers > 1 and len(tables) > 1:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(tables))) as executor:
                per_table = list(executor.map(self.columns_for, tables))
        else:
            per_table = [self.columns_for(table) for table in tables]

        fields: List[str] = []
        for columns in per_table:
            for column in columns:
                if column not in fields:
                    fields.append(column)

        return JoinedFields(tables=tables, fields=fields)

    def columns_for(self, table_name: str) -> List[str]:
        """Cached columns of one table; a failed lookup yields [] and is not cached."""
        cached = self.cache.get(table_name)
        if cached is not None:
            return cached

        try:
            columns = list(self.lookup(table_name))
        except Exception:
            logger.warning("Failed to load columns for joined table %s", table_name, exc_info=True)
            return []

        self.cache.set(table_name, columns)
        return columns
