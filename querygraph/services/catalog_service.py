"""Catalog Service — lists, describes and drops tables in the engine.

Feeds the editor's table picker and column dropdowns. Engine column types
are collapsed into the four coarse types the editor understands.
"""

import re

import structlog
from sqlglot import exp

from querygraph.core.config import settings
from querygraph.core.engine import DuckDBEngine
from querygraph.core.errors import TableNotFound
from querygraph.schemas.catalog import SchemaColumn, SchemaType, TableInfo, TableSchema
from querygraph.services.sql_renderer import table_expression

logger = structlog.stdlib.get_logger(__name__)

DEFAULT_SCHEMA = "main"

LIST_TABLES_SQL = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = 'main' ORDER BY table_name"
)

_SAFE_TABLE_NAME = re.compile(r"\w+")


def is_safe_table_name(table_name: str) -> bool:
    """True when the whole name is word characters (no trailing newline)."""
    return _SAFE_TABLE_NAME.fullmatch(table_name) is not None


def map_engine_type(column_type: str) -> SchemaType:
    """Collapse an engine type name into number/boolean/date/string."""
    upper = column_type.upper()
    if any(t in upper for t in ("INT", "DOUBLE", "FLOAT", "DECIMAL")):
        return "number"
    if "BOOL" in upper:
        return "boolean"
    if "DATE" in upper or "TIME" in upper:
        return "date"
    return "string"


class CatalogService:
    """Reads and maintains the engine's table catalog."""

    def __init__(self, engine: DuckDBEngine, dialect: str | None = None):
        self._engine = engine
        self._dialect = dialect or settings.query.sql_dialect

    async def list_tables(self) -> list[TableInfo]:
        _, rows = await self._engine.fetch(LIST_TABLES_SQL)
        # row_count is not computed for the listing
        return [TableInfo(name=row["table_name"], row_count=0) for row in rows]

    async def table_exists(self, table_name: str) -> bool:
        table = table_expression(table_name)
        tables_view = exp.Table(
            this=exp.to_identifier("tables"),
            db=exp.to_identifier("information_schema"),
        )
        sql = (
            exp.select(exp.Count(this=exp.Star()))
            .from_(tables_view)
            .where(
                exp.and_(
                    exp.EQ(
                        this=exp.column("table_schema"),
                        expression=exp.Literal.string(table.db or DEFAULT_SCHEMA),
                    ),
                    exp.EQ(
                        this=exp.column("table_name"),
                        expression=exp.Literal.string(table.name),
                    ),
                )
            )
            .sql(dialect=self._dialect)
        )
        return bool(await self._engine.fetch_value(sql))

    async def table_schema(self, table_name: str) -> TableSchema:
        """Describe a table's columns.

        Raises:
            TableNotFound: no such table in the engine.
        """
        if not await self.table_exists(table_name):
            raise TableNotFound(table_name)

        sql = exp.Describe(this=table_expression(table_name)).sql(dialect=self._dialect)
        _, rows = await self._engine.fetch(sql)
        columns = [
            SchemaColumn(
                name=row["column_name"],
                type=map_engine_type(str(row["column_type"])),
            )
            for row in rows
        ]
        return TableSchema(table_name=table_name, columns=columns)

    async def drop_table(self, table_name: str) -> str:
        """Drop a table if it exists.

        Raises:
            ValueError: the name is not plain alphanumerics/underscores.
        """
        if not is_safe_table_name(table_name):
            raise ValueError("Invalid table name")

        # The name is validated above; exp.Drop's table slot differs between sqlglot releases
        table_sql = table_expression(table_name).sql(dialect=self._dialect)
        await self._engine.run(f"DROP TABLE IF EXISTS {table_sql}")
        logger.info("table_dropped", table=table_name)
        return f"Table {table_name} dropped successfully"
