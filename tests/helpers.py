"""Shared test helpers for dbviz tests."""

from typing import Any, Optional

from dbviz.schema.models import Column, ForeignKey, Index, Schema, Table


class FakeMySQLError(Exception):
    """Driver error carrying the server error number in args[0], like pymysql."""


class FakeCursor:
    """DB-API cursor answering INFORMATION_SCHEMA queries from a FakeConnection."""

    def __init__(self, connection: "FakeConnection"):
        self._connection = connection
        self.description = None
        self._rows: list[tuple] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def execute(self, sql: str, params: tuple = ()) -> None:
        self._connection.executed.append((sql, tuple(params)))
        for marker, error in self._connection.errors.items():
            if marker in sql:
                raise error
        rows = self._connection.route(sql, tuple(params))
        keys = list(rows[0].keys()) if rows else ["value"]
        self.description = [(key, None, None, None, None, None, None) for key in keys]
        self._rows = [tuple(row.get(k) for k in keys) for row in rows]

    def fetchall(self) -> list[tuple]:
        return list(self._rows)


class FakeConnection:
    """Stand-in for a pymysql connection.

    catalogs maps database name -> dict with "tables" (list of
    INFORMATION_SCHEMA.TABLES rows) and "columns", "indexes", "foreign_keys"
    (dicts of table name -> catalog rows). errors maps an SQL substring to the
    exception raised when a query containing it runs.
    """

    __module__ = "pymysql.connections"

    def __init__(
        self,
        catalogs: Optional[dict[str, dict]] = None,
        current_database: Optional[str] = "shop",
        version: Optional[str] = "8.0.36",
        errors: Optional[dict[str, Exception]] = None,
    ):
        self.catalogs = catalogs if catalogs is not None else {"shop": make_catalog()}
        self.current_database = current_database
        self.version = version
        self.errors = errors or {}
        self.executed: list[tuple[str, tuple]] = []
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def close(self) -> None:
        self.closed = True

    def queries_containing(self, marker: str) -> list[tuple[str, tuple]]:
        return [(sql, params) for sql, params in self.executed if marker in sql]

    def route(self, sql: str, params: tuple) -> list[dict[str, Any]]:
        if "VERSION()" in sql:
            return [{"version": self.version}]
        if "DATABASE()" in sql:
            return [{"name": self.current_database}]
        if "SCHEMATA LIMIT 1" in sql:
            return [{"1": 1}]
        if "SCHEMA_NAME AS schema_name" in sql:
            return [{"schema_name": name} for name in self.catalogs]

        catalog = self.catalogs.get(params[0], make_catalog()) if params else make_catalog()
        table = params[1] if len(params) > 1 else None

        if "KEY_COLUMN_USAGE" in sql:
            return catalog["foreign_keys"].get(table, [])
        if "INFORMATION_SCHEMA.STATISTICS" in sql:
            return catalog["indexes"].get(table, [])
        if "INFORMATION_SCHEMA.COLUMNS" in sql:
            return catalog["columns"].get(table, [])
        if "DISTINCT TABLE_NAME" in sql:
            return [{"table_name": t["table_name"]} for t in catalog["tables"]]
        if "INFORMATION_SCHEMA.TABLES" in sql:
            return [t for t in catalog["tables"] if t["table_name"] == table]
        return []


class FakePostgresConnection(FakeConnection):
    __module__ = "psycopg2.extensions"


def make_catalog(
    tables: Optional[list[dict]] = None,
    columns: Optional[dict[str, list[dict]]] = None,
    indexes: Optional[dict[str, list[dict]]] = None,
    foreign_keys: Optional[dict[str, list[dict]]] = None,
) -> dict:
    return {
        "tables": tables or [],
        "columns": columns or {},
        "indexes": indexes or {},
        "foreign_keys": foreign_keys or {},
    }


def table_row(name: str, comment: str = "", table_type: str = "BASE TABLE") -> dict:
    return {"table_name": name, "table_comment": comment, "table_type": table_type}


def column_row(
    name: str,
    column_type: str = "int",
    nullable: bool = True,
    default: Optional[str] = None,
    extra: str = "",
    comment: str = "",
    max_length: Optional[int] = None,
) -> dict:
    return {
        "column_name": name,
        "column_type": column_type,
        "is_nullable": "YES" if nullable else "NO",
        "column_default": default,
        "extra": extra,
        "column_comment": comment,
        "character_maximum_length": max_length,
    }


def index_rows(
    name: str,
    columns: list[str],
    non_unique: int = 1,
    constraint_type: Optional[str] = None,
) -> list[dict]:
    return [
        {
            "index_name": name,
            "column_name": column,
            "non_unique": non_unique,
            "seq_in_index": seq,
            "constraint_type": constraint_type,
        }
        for seq, column in enumerate(columns, start=1)
    ]


def foreign_key_rows(
    name: str,
    local_columns: list[str],
    referenced_table: str,
    referenced_columns: list[str],
    delete_rule: Optional[str] = "RESTRICT",
    update_rule: Optional[str] = "RESTRICT",
) -> list[dict]:
    return [
        {
            "constraint_name": name,
            "column_name": local,
            "referenced_table_name": referenced_table,
            "referenced_column_name": ref,
            "update_rule": update_rule,
            "delete_rule": delete_rule,
        }
        for local, ref in zip(local_columns, referenced_columns)
    ]


def make_shop_catalog() -> dict:
    """Catalog rows for a small shop database: customers, orders, order_items."""
    return make_catalog(
        tables=[
            table_row("orders", comment="Customer orders"),
            table_row("customers"),
            table_row("order_items"),
        ],
        columns={
            "customers": [
                column_row("id", "int unsigned", nullable=False, extra="auto_increment"),
                column_row("email", "varchar(255)", nullable=False, max_length=255),
                column_row("name", "varchar(100)", max_length=100, comment="Display name"),
            ],
            "orders": [
                column_row("id", "int", nullable=False, extra="auto_increment"),
                column_row("customer_id", "int unsigned", nullable=False),
                column_row(
                    "created_at",
                    "timestamp",
                    nullable=False,
                    default="CURRENT_TIMESTAMP",
                    extra="DEFAULT_GENERATED",
                ),
            ],
            "order_items": [
                column_row("order_id", "int", nullable=False),
                column_row("line_no", "smallint", nullable=False),
                column_row("sku", "varchar(32)", nullable=False, max_length=32),
            ],
        },
        indexes={
            "customers": index_rows("PRIMARY", ["id"], 0, "PRIMARY KEY")
            + index_rows("uq_email", ["email"], 0, "UNIQUE"),
            "orders": index_rows("PRIMARY", ["id"], 0, "PRIMARY KEY")
            + index_rows("fk_orders_customer", ["customer_id"], 1, "FOREIGN KEY"),
            "order_items": index_rows(
                "PRIMARY", ["order_id", "line_no"], 0, "PRIMARY KEY"
            ),
        },
        foreign_keys={
            "orders": foreign_key_rows(
                "fk_orders_customer",
                ["customer_id"],
                "customers",
                ["id"],
                delete_rule="CASCADE",
                update_rule="NO ACTION",
            ),
            "order_items": foreign_key_rows(
                "fk_items_order", ["order_id"], "orders", ["id"]
            ),
        },
    )


def make_schema() -> Schema:
    """A small in-memory snapshot for renderer and gate tests."""
    customers = Table(
        name="customers",
        schema="shop",
        type="BASE TABLE",
        columns=[
            Column(name="id", type="INT", nullable=False, auto_increment=True),
            Column(name="email", type="VARCHAR(255)", nullable=False, max_length=255),
        ],
        indexes=[
            Index(name="uq_email", columns=["email"], unique=True),
            Index(name="PRIMARY", columns=["id"], unique=True, primary=True),
        ],
    )
    orders = Table(
        name="orders",
        schema="shop",
        type="BASE TABLE",
        comment="Customer orders",
        columns=[
            Column(name="id", type="INT", nullable=False, auto_increment=True),
            Column(name="customer_id", type="INT", nullable=False),
        ],
        indexes=[Index(name="PRIMARY", columns=["id"], unique=True, primary=True)],
        foreign_keys=[
            ForeignKey(
                name="fk_orders_customer",
                local_columns=["customer_id"],
                referenced_table="customers",
                referenced_columns=["id"],
                on_delete="CASCADE",
            )
        ],
    )
    return Schema(name="shop", engine="mysql", tables=[orders, customers])


class CountingRenderer:
    """Renderer that records how often it was called."""

    def __init__(self, output: str = "rendered"):
        self.calls = 0
        self.output = output

    def get_name(self) -> str:
        return "counting"

    def get_mime_type(self) -> str:
        return "text/plain"

    def render(self, schema: Schema) -> str:
        self.calls += 1
        return self.output
