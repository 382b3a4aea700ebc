import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "packages" / "core_engine" / "src"))

from erd_core.dialects import get_dialect
from erd_core.generators import (
    MAX_IDENTIFIER_LENGTH,
    foreign_key_name,
    generate_sql,
    get_generator,
    list_generators,
    write_sql,
)
from erd_core.model import Diagram, Relationship, Table, TableField, TableIndex
from erd_core.settings import Settings

DIALECTS = ["mysql", "mariadb", "postgresql", "oracle", "mssql"]


def _shop(dialect: str) -> Diagram:
    timestamp_type = "DATETIME2" if dialect == "mssql" else "TIMESTAMP"
    users = Table(
        id="t-users",
        name="users",
        fields=[
            TableField(id="u-id", name="id", type="INT", primary=True, increment=True),
            TableField(id="u-name", name="name", type="VARCHAR", size=100, not_null=True),
            TableField(id="u-email", name="email", type="VARCHAR", size=255),
            TableField(id="u-status", name="status", type="VARCHAR", size=20, default="active"),
            TableField(id="u-note", name="note", type="VARCHAR", size=50, default="it's"),
            TableField(id="u-created", name="created_at", type=timestamp_type, default="CURRENT_TIMESTAMP"),
        ],
        indexes=[TableIndex(id="i-1", unique=True, fields=["email", "name"])],
    )
    orders = Table(
        id="t-orders",
        name="orders",
        fields=[
            TableField(id="o-id", name="id", type="INT", primary=True, increment=True),
            TableField(id="o-uid", name="user_id", type="INT", not_null=True),
        ],
    )
    rel = Relationship(
        id="r-1",
        start_table_id="t-orders",
        start_field_id="o-uid",
        end_table_id="t-users",
        end_field_id="u-id",
    )
    return Diagram(title="Shop", dialect=dialect, tables=[users, orders], relationships=[rel])


def _single_table(dialect: str, *fields: TableField, **table_kwargs) -> Diagram:
    table = Table(id="t-1", name="items", fields=list(fields), **table_kwargs)
    return Diagram(dialect=dialect, tables=[table])


class TestEveryDialect:
    @pytest.mark.parametrize("dialect", DIALECTS)
    def test_shop_schema(self, dialect):
        sql = generate_sql(_shop(dialect))
        config = get_dialect(dialect)
        q = config.quote_identifier

        assert sql.count("CREATE TABLE") == 2
        assert f"{q('users')} (" in sql
        assert f"{q('orders')} (" in sql
        assert f"{config.primary_key_keyword} ({q('id')})" in sql
        assert f"ADD CONSTRAINT {q('fk_orders_user_id_users')}" in sql
        assert f"FOREIGN KEY ({q('user_id')})" in sql
        assert f"{q('users')}({q('id')})" in sql
        assert "DEFAULT CURRENT_TIMESTAMP" in sql
        assert "DEFAULT 'active'" in sql
        assert "DEFAULT 'it''s'" in sql
        assert f"({q('email')}, {q('name')})" in sql
        assert "UNIQUE" in sql

    @pytest.mark.parametrize("dialect", DIALECTS)
    def test_tables_come_before_foreign_keys(self, dialect):
        sql = generate_sql(_shop(dialect))
        assert sql.rindex("CREATE TABLE") < sql.index("ALTER TABLE")

    @pytest.mark.parametrize("dialect", DIALECTS)
    def test_generation_does_not_mutate_diagram(self, dialect):
        diagram = _shop(dialect)
        before = diagram.to_dict()
        generate_sql(diagram)
        assert diagram.to_dict() == before

    @pytest.mark.parametrize("dialect", DIALECTS)
    def test_empty_diagram(self, dialect):
        assert generate_sql(Diagram(dialect=dialect)) == ""

    @pytest.mark.parametrize("dialect", DIALECTS)
    def test_stale_relationship_is_skipped(self, dialect):
        diagram = _shop(dialect)
        diagram.relationships[0].end_field_id = "gone"
        assert "ALTER TABLE" not in generate_sql(diagram)


class TestDispatch:
    def test_registry(self):
        assert list_generators() == sorted(DIALECTS)

    def test_unknown_dialect_uses_mysql(self):
        diagram = _shop("mysql")
        assert generate_sql(diagram, "sqlite") == generate_sql(diagram, "mysql")
        assert get_generator("sqlite").dialect_id == "mysql"

    def test_explicit_dialect_overrides_diagram(self):
        sql = generate_sql(_shop("mysql"), "postgresql")
        assert '"users"' in sql
        assert "`users`" not in sql

    def test_write_sql(self, tmp_path):
        out = tmp_path / "out" / "schema.sql"
        written = write_sql(_shop("mysql"), str(out))
        assert written == str(out)
        assert out.read_text(encoding="utf-8") == generate_sql(_shop("mysql"))


class TestMySQL:
    def test_exact_table(self):
        diagram = _single_table(
            "mysql",
            TableField(name="id", type="INT", primary=True, not_null=True, increment=True),
            TableField(name="email", type="VARCHAR", size=255, not_null=True, comment="login"),
            comment="App users",
        )
        diagram.tables[0].name = "users"
        expected = (
            "CREATE TABLE IF NOT EXISTS `users` (\n"
            "\t`id` INT NOT NULL AUTO_INCREMENT,\n"
            "\t`email` VARCHAR(255) NOT NULL COMMENT 'login',\n"
            "\tPRIMARY KEY (`id`)\n"
            ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_general_ci COMMENT='App users';\n"
        )
        assert generate_sql(diagram) == expected

    def test_indexes_are_inline(self):
        sql = generate_sql(_shop("mysql"))
        assert "\tUNIQUE INDEX `idx_users_email_name` (`email`, `name`)" in sql
        assert "CREATE UNIQUE INDEX" not in sql

    def test_settings_override_table_options(self):
        diagram = _single_table("mysql", TableField(name="id", primary=True))
        sql = generate_sql(diagram, settings=Settings(engine="MyISAM", charset="latin1", collation="latin1_bin"))
        assert ") ENGINE=MyISAM DEFAULT CHARSET=latin1 COLLATE=latin1_bin;" in sql

    def test_if_not_exists_can_be_disabled(self):
        diagram = _single_table("mysql", TableField(name="id", primary=True))
        sql = generate_sql(diagram, settings=Settings(if_not_exists=False))
        assert sql.startswith("CREATE TABLE `items` (")

    def test_unsigned(self):
        diagram = _single_table("mysql", TableField(name="qty", type="INT", unsigned=True))
        assert "`qty` INT UNSIGNED" in generate_sql(diagram)

    def test_unsupported_index_type_is_noted(self):
        diagram = _single_table(
            "mysql",
            TableField(name="shape", type="GEOMETRY"),
            indexes=[TableIndex(fields=["shape"], index_type="RTREE")],
        )
        sql = generate_sql(diagram)
        assert "USING" not in sql
        assert "-- Note: MySQL does not support RTREE indexes; idx_items_shape uses the default type" in sql

    def test_mariadb_supports_rtree(self):
        diagram = _single_table(
            "mariadb",
            TableField(name="shape", type="GEOMETRY"),
            indexes=[TableIndex(fields=["shape"], index_type="RTREE")],
        )
        assert "\tINDEX `idx_items_shape` (`shape`) USING RTREE" in generate_sql(diagram)

    def test_empty_index_is_skipped(self):
        diagram = _single_table("mysql", TableField(name="id"), indexes=[TableIndex(fields=[])])
        assert "INDEX" not in generate_sql(diagram)

    def test_floating_point_precision_and_scale(self):
        diagram = _single_table("mysql", TableField(name="amount", type="DOUBLE", precision=10, scale=2))
        assert "`amount` DOUBLE(10,2)" in generate_sql(diagram)

    def test_enum_and_set_values(self):
        diagram = _single_table(
            "mysql",
            TableField(name="status", type="ENUM", values=["draft", "it's"], default="draft"),
        )
        assert "`status` ENUM('draft', 'it''s') DEFAULT 'draft'" in generate_sql(diagram)
        mariadb = _single_table("mariadb", TableField(name="tags", type="SET", values=["a", "b"]))
        assert "`tags` SET('a', 'b')" in generate_sql(mariadb)


class TestPostgreSQL:
    def test_serial_and_comment_on(self):
        diagram = _single_table(
            "postgresql",
            TableField(name="id", type="BIGINT", primary=True, increment=True, comment="surrogate"),
            comment="Things",
        )
        sql = generate_sql(diagram)
        assert '\t"id" BIGSERIAL NOT NULL' in sql
        assert "COMMENT ON TABLE \"items\" IS 'Things';" in sql
        assert "COMMENT ON COLUMN \"items\".\"id\" IS 'surrogate';" in sql
        assert "COMMENT 'surrogate'" not in sql

    def test_standalone_index_with_method(self):
        diagram = _single_table(
            "postgresql",
            TableField(name="tags", type="JSONB"),
            indexes=[TableIndex(fields=["tags"], index_type="GIN")],
        )
        assert 'CREATE INDEX "idx_items_tags" ON "items" USING GIN ("tags");' in generate_sql(diagram)

    def test_array_suffix(self):
        diagram = _single_table("postgresql", TableField(name="labels", type="TEXT", is_array=True))
        assert '"labels" TEXT[]' in generate_sql(diagram)
        mysql = _single_table("mysql", TableField(name="labels", type="TEXT", is_array=True))
        assert "TEXT[]" not in generate_sql(mysql)

    def test_schema_qualification(self):
        sql = generate_sql(_shop("postgresql"), settings=Settings(schema="app"))
        assert 'CREATE TABLE IF NOT EXISTS "app"."users" (' in sql
        assert 'REFERENCES "app"."users"("id")' in sql

    def test_decimal_precision_and_scale(self):
        diagram = _single_table("postgresql", TableField(name="price", type="DECIMAL", precision=10, scale=2))
        assert '"price" DECIMAL(10,2)' in generate_sql(diagram)


class TestOracle:
    def test_number_precision(self):
        diagram = _single_table(
            "oracle",
            TableField(name="qty", type="NUMBER", precision=10),
            TableField(name="price", type="NUMBER", precision=10, scale=2),
        )
        sql = generate_sql(diagram)
        assert '"qty" NUMBER(10)' in sql
        assert '"price" NUMBER(10,2)' in sql

    def test_precision_only_types_ignore_scale(self):
        diagram = _single_table("oracle", TableField(name="stamp", type="TIMESTAMP", precision=6, scale=2))
        assert '"stamp" TIMESTAMP(6)' in generate_sql(diagram)
        mssql = _single_table("mssql", TableField(name="stamp", type="DATETIME2", precision=7, scale=2))
        assert "[stamp] DATETIME2(7)" in generate_sql(mssql)

    def test_default_precedes_not_null(self):
        diagram = _single_table("oracle", TableField(name="st", type="VARCHAR2", size=10, not_null=True, default="x"))
        assert "\"st\" VARCHAR2(10) DEFAULT 'x' NOT NULL" in generate_sql(diagram)

    def test_identity_and_named_primary_key(self):
        diagram = _single_table("oracle", TableField(name="id", type="NUMBER", primary=True, increment=True))
        sql = generate_sql(diagram)
        assert sql.startswith('CREATE TABLE "items" (')
        assert '"id" NUMBER GENERATED ALWAYS AS IDENTITY NOT NULL' in sql
        assert 'CONSTRAINT "pk_items" PRIMARY KEY ("id")' in sql

    def test_on_update_is_not_emitted(self):
        diagram = _shop("oracle")
        diagram.relationships[0].update_constraint = "CASCADE"
        diagram.relationships[0].delete_constraint = "CASCADE"
        sql = generate_sql(diagram)
        assert "ON UPDATE" not in sql
        assert "\tON DELETE CASCADE;" in sql
        assert "-- Note: Oracle does not support ON UPDATE CASCADE" in sql

    def test_no_action_is_implicit(self):
        sql = generate_sql(_shop("oracle"))
        assert "NO ACTION" not in sql
        assert sql.count("GO") == 0

    def test_bitmap_index(self):
        diagram = _single_table(
            "oracle",
            TableField(name="flag", type="CHAR", size=1),
            indexes=[TableIndex(fields=["flag"], index_type="BITMAP")],
        )
        assert 'CREATE BITMAP INDEX "idx_items_flag" ON "items" ("flag");' in generate_sql(diagram)

    def test_unique_bitmap_index_is_noted(self):
        diagram = _single_table(
            "oracle",
            TableField(name="flag", type="CHAR", size=1),
            indexes=[TableIndex(fields=["flag"], unique=True, index_type="bitmap")],
        )
        sql = generate_sql(diagram)
        assert 'CREATE UNIQUE INDEX "idx_items_flag" ON "items" ("flag");' in sql
        assert "BITMAP INDEX" not in sql
        assert "-- Note: Oracle does not support UNIQUE BITMAP indexes; idx_items_flag uses the default type" in sql


class TestSQLServer:
    def test_batches_and_identity(self):
        sql = generate_sql(_shop("mssql"))
        # two tables, one index, one foreign key
        assert sql.count("\nGO") == 4
        assert "[id] INT IDENTITY(1,1) NOT NULL" in sql
        assert "CONSTRAINT [PK_users] PRIMARY KEY CLUSTERED ([id])" in sql
        assert "CREATE TABLE [dbo].[users] (" in sql
        assert "CREATE UNIQUE NONCLUSTERED INDEX [IX_users_email_name]\n\tON [dbo].[users] ([email], [name]);" in sql

    def test_nullable_columns_are_explicit(self):
        diagram = _single_table("mssql", TableField(name="note", type="NVARCHAR", size=40, default="hi"))
        assert "[note] NVARCHAR(40) DEFAULT N'hi' NULL" in generate_sql(diagram)

    def test_max_types_pass_through_and_drop_check(self):
        diagram = _single_table("mssql", TableField(name="body", type="VARCHAR(MAX)", check="LEN(body) > 0"))
        sql = generate_sql(diagram)
        assert "[body] VARCHAR(MAX) NULL" in sql
        assert "CHECK(" not in sql.split("-- Note:")[0]
        assert (
            "-- Note: SQL Server type VARCHAR(MAX) does not support CHECK; "
            "dropped CHECK(LEN(body) > 0) on items.body"
        ) in sql

    def test_extended_property_comments(self):
        diagram = _single_table("mssql", TableField(name="id", primary=True, comment="key"), comment="Things")
        sql = generate_sql(diagram)
        assert "EXEC sp_addextendedproperty" in sql
        assert "@value = N'Things'," in sql
        assert "@level2type = N'COLUMN', @level2name = N'id';" in sql

    def test_restrict_is_noted(self):
        diagram = _shop("mssql")
        diagram.relationships[0].delete_constraint = "RESTRICT"
        assert "-- Note: SQL Server does not support ON DELETE RESTRICT" in generate_sql(diagram)


class TestForeignKeyNames:
    def test_long_names_are_truncated(self):
        name = foreign_key_name("a" * 40, "b" * 40, "c" * 40)
        assert len(name) == MAX_IDENTIFIER_LENGTH
        assert name.startswith("fk_aaa")

    def test_explicit_relationship_name_wins(self):
        diagram = _shop("mysql")
        diagram.relationships[0].name = "orders_owner"
        assert "ADD CONSTRAINT `orders_owner`" in generate_sql(diagram)

    def test_check_constraint_is_kept_when_supported(self):
        diagram = _single_table("mysql", TableField(name="qty", type="INT", check="qty > 0"))
        assert "`qty` INT CHECK(qty > 0)" in generate_sql(diagram)
