# storefront/gateway.py
"""
Table-scoped CRUD over SQLAlchemy Core.

Every call returns a GatewayResult instead of raising: callers only ever see
``data`` or a single human-readable ``error``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, Mapping, Optional, TypeVar

from sqlalchemy import Table, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .db import Base
from . import models  # noqa: F401  (registers the tables on Base.metadata)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class GatewayResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _fail(op: str, table: str, message: str) -> GatewayResult[Any]:
    logger.warning("gateway %s on %r failed: %s", op, table, message)
    return GatewayResult(error=message)


def _describe(exc: Exception) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig or exc).strip() or exc.__class__.__name__


class SqlGateway:
    def __init__(self, engine: Engine, tables: Optional[Mapping[str, Table]] = None):
        self.engine = engine
        self.tables: Dict[str, Table] = dict(tables or Base.metadata.tables)

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    # -------------------
    # Helpers
    # -------------------
    def _table(self, name: str) -> Table:
        table = self.tables.get(name)
        if table is None:
            raise LookupError(f"Unknown table '{name}'")
        return table

    def _where(self, table: Table, filters: Optional[Mapping[str, Any]]):
        clauses = []
        for col, value in (filters or {}).items():
            if col not in table.c:
                raise LookupError(f"Unknown column '{col}' on '{table.name}'")
            clauses.append(table.c[col] == value)
        return clauses

    def _require_filters(self, table: Table, filters: Optional[Mapping[str, Any]]):
        if not filters:
            raise LookupError(f"Refusing to mutate every row of '{table.name}' without a filter")
        return self._where(table, filters)

    def _clean(self, table: Table, record: Mapping[str, Any]) -> Dict[str, Any]:
        unknown = [k for k in record if k not in table.c]
        if unknown:
            raise LookupError(f"Unknown column '{unknown[0]}' on '{table.name}'")
        return dict(record)

    # -------------------
    # Table query / mutate
    # -------------------
    def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[str] = None,
        ascending: bool = True,
    ) -> GatewayResult[list]:
        try:
            t = self._table(table)
            stmt = t.select().where(*self._where(t, filters))
            if order:
                if order not in t.c:
                    raise LookupError(f"Unknown column '{order}' on '{table}'")
                stmt = stmt.order_by(t.c[order].asc() if ascending else t.c[order].desc())
            with self.engine.connect() as conn:
                rows = [dict(r._mapping) for r in conn.execute(stmt)]
        except (SQLAlchemyError, LookupError) as e:
            return _fail("select", table, _describe(e))
        return GatewayResult(data=rows)

    def insert(self, table: str, record: Mapping[str, Any]) -> GatewayResult[dict]:
        try:
            t = self._table(table)
            values = self._clean(t, record)
            with self.engine.begin() as conn:
                res = conn.execute(t.insert().values(**values))
                pk = res.inserted_primary_key
                row = dict(values)
                if pk and "id" in t.c:
                    row["id"] = pk[0]
        except (SQLAlchemyError, LookupError) as e:
            return _fail("insert", table, _describe(e))
        return GatewayResult(data=row)

    def update(
        self,
        table: str,
        record: Mapping[str, Any],
        filters: Mapping[str, Any],
    ) -> GatewayResult[int]:
        try:
            t = self._table(table)
            values = self._clean(t, record)
            with self.engine.begin() as conn:
                res = conn.execute(t.update().where(*self._require_filters(t, filters)).values(**values))
        except (SQLAlchemyError, LookupError) as e:
            return _fail("update", table, _describe(e))
        return GatewayResult(data=res.rowcount)

    def delete(self, table: str, filters: Mapping[str, Any]) -> GatewayResult[int]:
        try:
            t = self._table(table)
            with self.engine.begin() as conn:
                res = conn.execute(t.delete().where(*self._require_filters(t, filters)))
        except (SQLAlchemyError, LookupError) as e:
            return _fail("delete", table, _describe(e))
        return GatewayResult(data=res.rowcount)

    # -------------------
    # Connectivity check
    # -------------------
    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("gateway ping failed: %s", _describe(e))
            return False
