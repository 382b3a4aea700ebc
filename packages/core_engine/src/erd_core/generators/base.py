"""Shared DDL emission for every dialect.

``BaseGenerator`` renders a diagram into ordered statements (tables, then
comments, then indexes, then foreign keys) using only what its
``DialectConfig`` says about quoting, types, auto-increment, comments and
constraints. Dialect subclasses override the few hooks whose syntax differs.
"""

import logging
from typing import List, Optional, Tuple

from erd_core.defaults import format_default
from erd_core.dialects import DialectConfig, get_dialect
from erd_core.datatypes import normalize_type_name
from erd_core.model import NO_ACTION, Diagram, Relationship, Table, TableField, TableIndex
from erd_core.settings import Settings

logger = logging.getLogger(__name__)

MAX_IDENTIFIER_LENGTH = 64


def foreign_key_name(start_table: str, start_field: str, end_table: str) -> str:
    return f"fk_{start_table}_{start_field}_{end_table}"[:MAX_IDENTIFIER_LENGTH]


def primary_key_fields(table: Table) -> List[TableField]:
    return [field for field in table.fields if field.primary]


def note_line(text: str) -> str:
    return f"-- Note: {text}"


class BaseGenerator:
    dialect_id: str = ""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.config: DialectConfig = get_dialect(self.dialect_id)

    # -- naming ------------------------------------------------------------

    def q(self, name: str) -> str:
        return self.config.quote_identifier(name)

    def schema_name(self) -> Optional[str]:
        return self.settings.schema or self.config.default_schema

    def qualified(self, table_name: str) -> str:
        schema = self.schema_name()
        if schema:
            return f"{self.q(schema)}.{self.q(table_name)}"
        return self.q(table_name)

    def index_name(self, table: Table, index: TableIndex) -> str:
        if index.name:
            return index.name
        return f"{self.config.index_prefix}{table.name}_{'_'.join(index.fields)}"

    # -- document ----------------------------------------------------------

    def generate(self, diagram: Diagram) -> str:
        statements: List[str] = []
        for table in diagram.tables:
            statements.append(self.create_table(table))
        for table in diagram.tables:
            statements.extend(self.comment_statements(table))
        if not self.config.inline_indexes:
            for table in diagram.tables:
                statements.extend(self.index_statements(table))
        for rel in diagram.relationships:
            statement = self.foreign_key(diagram, rel)
            if statement:
                statements.append(statement)
        return self.join(statements)

    def join(self, statements: List[str]) -> str:
        if not statements:
            return ""
        separator = self.config.batch_separator
        if separator:
            statements = [f"{statement}\n{separator}" for statement in statements]
        return "\n\n".join(statements) + "\n"

    # -- types -------------------------------------------------------------

    def precision_suffix(self, field: TableField) -> str:
        info = self.config.type_info(field.type)
        if info is None or not info.has_scale:
            return f"({field.precision})"
        scale = field.scale if field.scale is not None else 0
        if scale == 0 and self.config.omit_zero_scale:
            return f"({field.precision})"
        return f"({field.precision},{scale})"

    def render_type(self, field: TableField) -> str:
        if field.increment and self.config.increment_strategy == "serial":
            serial = self.config.serial_types.get(normalize_type_name(field.type))
            if serial:
                return serial

        result = field.type
        if "(" not in result:
            if self.config.is_sized(field.type) and field.size:
                result += f"({field.size})"
            elif self.config.has_precision(field.type) and field.precision is not None:
                result += self.precision_suffix(field)
            elif self.config.has_values(field.type) and field.values:
                result += "(" + ", ".join(self.config.quote_string(value) for value in field.values) + ")"
        if field.is_array and self.config.supports_arrays:
            result += "[]"
        return result

    # -- columns -----------------------------------------------------------

    def increment_clause(self, field: TableField) -> str:
        if not field.increment or self.config.increment_strategy == "serial":
            return ""
        return self.config.auto_increment

    def column_definition(self, table: Table, field: TableField, notes: List[str]) -> str:
        parts = [self.q(field.name), self.render_type(field)]
        if field.unsigned and self.config.signed(field.type):
            parts.append("UNSIGNED")

        # DEFAULT precedes inline constraints (Oracle rejects it after NOT NULL).
        default = None if field.increment else format_default(field, self.config)
        if default is not None:
            parts.append(f"DEFAULT {default}")

        increment = self.increment_clause(field)
        if increment and self.config.increment_strategy == "identity":
            parts.append(increment)
        if field.not_null or field.increment:
            parts.append("NOT NULL")
        elif self.config.explicit_null:
            parts.append("NULL")
        if increment and self.config.increment_strategy == "keyword":
            parts.append(increment)

        if field.unique and not field.primary:
            parts.append("UNIQUE")

        if field.check:
            if self.config.has_check(field.type):
                parts.append(f"CHECK({field.check})")
            else:
                notes.append(
                    note_line(
                        f"{self.config.name} type {field.type} does not support CHECK; "
                        f"dropped CHECK({field.check}) on {table.name}.{field.name}"
                    )
                )

        if field.comment and self.config.comment_style == "inline":
            parts.append(f"COMMENT {self.config.quote_string(field.comment)}")

        return "\t" + " ".join(parts)

    def primary_key_clause(self, table: Table) -> Optional[str]:
        keys = primary_key_fields(table)
        if not keys:
            return None
        columns = ", ".join(self.q(field.name) for field in keys)
        keyword = self.config.primary_key_keyword
        if self.config.primary_key_name:
            name = self.config.primary_key_name.format(table=table.name)
            return f"\tCONSTRAINT {self.q(name)} {keyword} ({columns})"
        return f"\t{keyword} ({columns})"

    # -- tables ------------------------------------------------------------

    def create_table_prefix(self) -> str:
        if self.config.supports_if_not_exists and self.settings.if_not_exists:
            return "CREATE TABLE IF NOT EXISTS"
        return "CREATE TABLE"

    def table_suffix(self, table: Table) -> str:
        return ""

    def inline_index_line(self, table: Table, index: TableIndex, notes: List[str]) -> str:
        keyword = "UNIQUE INDEX" if index.unique else "INDEX"
        columns = ", ".join(self.q(name) for name in index.fields)
        line = f"\t{keyword} {self.q(self.index_name(table, index))} ({columns})"
        index_type = self.checked_index_type(table, index, notes)
        if index_type:
            line += f" USING {index_type}"
        return line

    def create_table(self, table: Table) -> str:
        notes: List[str] = []
        lines = [self.column_definition(table, field, notes) for field in table.fields]
        primary_key = self.primary_key_clause(table)
        if primary_key:
            lines.append(primary_key)
        if self.config.inline_indexes:
            for index in self.usable_indexes(table):
                lines.append(self.inline_index_line(table, index, notes))

        sql = f"{self.create_table_prefix()} {self.qualified(table.name)} (\n"
        sql += ",\n".join(lines)
        sql += "\n)" + self.table_suffix(table) + ";"
        for note in notes:
            sql += "\n" + note
        return sql

    # -- comments ----------------------------------------------------------

    def comment_statements(self, table: Table) -> List[str]:
        style = self.config.comment_style
        if style == "comment_on":
            return self._comment_on(table)
        if style == "extended_property":
            return self._extended_properties(table)
        return []

    def _comment_on(self, table: Table) -> List[str]:
        out = []
        qualified = self.qualified(table.name)
        if table.comment:
            out.append(f"COMMENT ON TABLE {qualified} IS {self.config.quote_string(table.comment)};")
        for field in table.fields:
            if field.comment:
                out.append(
                    f"COMMENT ON COLUMN {qualified}.{self.q(field.name)} "
                    f"IS {self.config.quote_string(field.comment)};"
                )
        return out

    def _extended_properties(self, table: Table) -> List[str]:
        schema = self.schema_name() or ""
        quote = self.config.quote_string

        def prop(comment: str, levels: List[Tuple[str, str]]) -> str:
            lines = [
                "EXEC sp_addextendedproperty",
                "\t@name = N'MS_Description',",
                f"\t@value = N{quote(comment)},",
            ]
            for position, (kind, name) in enumerate(levels):
                lines.append(f"\t@level{position}type = N'{kind}', @level{position}name = N{quote(name)},")
            lines[-1] = lines[-1][:-1] + ";"
            return "\n".join(lines)

        out = []
        base = [("SCHEMA", schema), ("TABLE", table.name)]
        if table.comment:
            out.append(prop(table.comment, base))
        for field in table.fields:
            if field.comment:
                out.append(prop(field.comment, base + [("COLUMN", field.name)]))
        return out

    # -- indexes -----------------------------------------------------------

    def usable_indexes(self, table: Table) -> List[TableIndex]:
        usable = []
        for index in table.indexes:
            if not index.fields:
                logger.debug("Skipping index %s on %s with no fields", index.id, table.name)
                continue
            usable.append(index)
        return usable

    def checked_index_type(self, table: Table, index: TableIndex, notes: List[str]) -> Optional[str]:
        if not index.index_type:
            return None
        if self.config.supports_index_type(index.index_type):
            return index.index_type.upper()
        notes.append(
            note_line(
                f"{self.config.name} does not support {index.index_type} indexes; "
                f"{self.index_name(table, index)} uses the default type"
            )
        )
        return None

    def index_statement(self, table: Table, index: TableIndex, index_type: Optional[str]) -> str:
        keyword = "UNIQUE INDEX" if index.unique else "INDEX"
        columns = ", ".join(self.q(name) for name in index.fields)
        return (
            f"CREATE {keyword} {self.q(self.index_name(table, index))} "
            f"ON {self.qualified(table.name)} ({columns});"
        )

    def index_statements(self, table: Table) -> List[str]:
        out = []
        for index in self.usable_indexes(table):
            notes: List[str] = []
            index_type = self.checked_index_type(table, index, notes)
            statement = self.index_statement(table, index, index_type)
            for note in notes:
                statement += "\n" + note
            out.append(statement)
        return out

    # -- foreign keys ------------------------------------------------------

    def foreign_key(self, diagram: Diagram, rel: Relationship) -> Optional[str]:
        resolved = diagram.resolve_endpoints(rel)
        if resolved is None:
            logger.warning("Skipping relationship %s: endpoint no longer exists", rel.id)
            return None
        start_table, start_field, end_table, end_field = resolved

        name = rel.name or foreign_key_name(start_table.name, start_field.name, end_table.name)
        lines = [
            f"ALTER TABLE {self.qualified(start_table.name)}",
            f"\tADD CONSTRAINT {self.q(name)}",
            f"\tFOREIGN KEY ({self.q(start_field.name)})",
            f"\tREFERENCES {self.qualified(end_table.name)}({self.q(end_field.name)})",
        ]
        notes = []
        for verb, action in (("UPDATE", rel.update_constraint), ("DELETE", rel.delete_constraint)):
            action = (action or NO_ACTION).upper()
            if action == NO_ACTION and self.config.implicit_no_action:
                continue
            if self.config.supports_action(verb, action):
                lines.append(f"\tON {verb} {action}")
            else:
                notes.append(note_line(f"{self.config.name} does not support ON {verb} {action}"))

        statement = "\n".join(lines) + ";"
        for note in notes:
            statement += "\n" + note
        return statement
