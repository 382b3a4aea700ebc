import sys
from dataclasses import replace
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "packages" / "core_engine" / "src"))

from erd_core import dialects
from erd_core.datatypes import can_type_increment, data_type_names, get_data_type, validate_default_value
from erd_core.dialects import get_dialect, is_known_dialect, list_dialects, register_dialect


class TestRegistry:
    def test_builtin_dialects(self):
        assert [d.id for d in list_dialects()] == ["mysql", "mariadb", "postgresql", "oracle", "mssql"]

    @pytest.mark.parametrize("dialect_id", ["sqlite", "", None, "nope"])
    def test_unknown_falls_back_to_mysql(self, dialect_id):
        assert get_dialect(dialect_id).id == "mysql"
        assert not is_known_dialect(dialect_id)

    def test_lookup_is_case_insensitive(self):
        assert get_dialect(" MSSQL ").id == "mssql"

    def test_register_custom_dialect(self):
        custom = replace(dialects.POSTGRESQL, id="cockroach", name="CockroachDB")
        register_dialect(custom)
        try:
            assert get_dialect("cockroach") is custom
        finally:
            dialects._REGISTRY.pop("cockroach", None)


class TestQuoting:
    @pytest.mark.parametrize(
        "dialect_id, expected",
        [
            ("mysql", "`or``ders`"),
            ("mariadb", "`or``ders`"),
            ("postgresql", '"or`ders"'),
            ("oracle", '"or`ders"'),
            ("mssql", "[or`ders]"),
        ],
    )
    def test_quote_identifier(self, dialect_id, expected):
        assert get_dialect(dialect_id).quote_identifier("or`ders") == expected

    def test_closing_quote_is_doubled(self):
        assert get_dialect("mssql").quote_identifier("a]b") == "[a]]b]"
        assert get_dialect("postgresql").quote_identifier('a"b') == '"a""b"'

    def test_quote_string(self):
        assert get_dialect("oracle").quote_string("it's") == "'it''s'"


class TestTypeMetadata:
    def test_sized_and_precision(self):
        mysql = get_dialect("mysql")
        assert mysql.is_sized("varchar")
        assert mysql.has_precision("DECIMAL")
        assert not mysql.is_sized("INT")
        assert mysql.signed("INT")

    def test_spelling_normalization(self):
        assert get_dialect("postgresql").type_info("double_precision").name == "DOUBLE PRECISION"
        assert get_data_type("oracle", "timestamp with time zone").has_precision

    def test_custom_types_are_looked_up_by_normalized_name(self):
        mysql = get_dialect("mysql")
        custom = replace(mysql, id="tidb", types={"LONG TEXT": replace(mysql.types["TEXT"], name="LONG TEXT")})
        assert custom.type_info("long_text").name == "LONG TEXT"
        assert custom.type_info("TEXT") is None
        assert mysql.type_info("long_text") is None

    def test_value_list_and_national_flags(self):
        assert get_dialect("mysql").has_values("enum")
        assert get_dialect("mariadb").has_values("SET")
        assert not get_dialect("postgresql").has_values("ENUM")
        assert get_dialect("mssql").is_national("NVARCHAR(MAX)")
        assert not get_dialect("mssql").is_national("NUMERIC")

    def test_postgresql_drops_mysql_only_types(self):
        names = data_type_names("postgresql")
        assert "DATETIME" not in names
        assert "BLOB" not in names
        assert "JSONB" in names

    def test_unknown_type_is_quoted(self):
        assert get_dialect("mysql").has_quotes("MYSTERY")
        assert not get_dialect("mysql").has_quotes("INT")

    def test_mssql_max_types_have_no_check(self):
        assert not get_dialect("mssql").has_check("VARCHAR(MAX)")
        assert get_dialect("mssql").has_check("VARCHAR")

    def test_increment_capability(self):
        assert can_type_increment("oracle", "NUMBER")
        assert not can_type_increment("mysql", "VARCHAR")

    def test_default_value_validation(self):
        assert validate_default_value("mysql", "INT", "42")
        assert not validate_default_value("mysql", "INT", "abc")
        assert not validate_default_value("mysql", "VARCHAR", "x" * 11, size=10)
        assert validate_default_value("mysql", "TIMESTAMP", "CURRENT_TIMESTAMP")
        assert validate_default_value("mysql", "UNKNOWN", "anything")


class TestActionsAndIndexes:
    def test_oracle_has_no_update_actions(self):
        oracle = get_dialect("oracle")
        assert not oracle.supports_action("update", "CASCADE")
        assert oracle.supports_action("DELETE", "cascade")
        assert not oracle.supports_action("DELETE", "RESTRICT")

    def test_mssql_rejects_restrict(self):
        assert not get_dialect("mssql").supports_action("DELETE", "RESTRICT")
        assert get_dialect("mysql").supports_action("DELETE", "RESTRICT")

    def test_index_types(self):
        assert get_dialect("mariadb").supports_index_type("rtree")
        assert not get_dialect("mysql").supports_index_type("RTREE")
        assert get_dialect("mysql").supports_index_type(None)
