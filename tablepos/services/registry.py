from __future__ import annotations

from typing import Iterable

from tablepos.errors import NotFoundError
from tablepos.schemas.tables import Table


class TableRegistry:
    """Physical tables by id. Does no invariant checking of its own; the lifecycle owns that."""

    def __init__(self, tables: Iterable[Table] = ()):
        self._tables: dict[str, Table] = {}
        self.replace_all(tables)

    def replace_all(self, tables: Iterable[Table]) -> None:
        self._tables = {t.id: t for t in tables}

    def list(self) -> list[Table]:
        return list(self._tables.values())

    def get(self, table_id: str) -> Table:
        t = self._tables.get(table_id)
        if t is None:
            raise NotFoundError(f"table {table_id} not found")
        return t

    def list_by_section(self) -> dict[str, list[Table]]:
        # dicts keep insertion order, so sections come out in discovery order
        grouped: dict[str, list[Table]] = {}
        for t in self._tables.values():
            grouped.setdefault(t.section, []).append(t)
        return grouped

    def apply_update(self, table_id: str, **fields) -> Table:
        merged = self.get(table_id).model_copy(update=fields)
        self._tables[table_id] = merged
        return merged
