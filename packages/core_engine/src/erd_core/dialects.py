"""Static per-dialect syntax rules.

Generators read everything dialect-specific from a ``DialectConfig``; a new
engine plugs in through ``register_dialect`` without touching generator code.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from erd_core.datatypes import (
    MARIADB_TYPES,
    MSSQL_TYPES,
    MYSQL_TYPES,
    ORACLE_TYPES,
    POSTGRESQL_TYPES,
    TypeInfo,
    lookup_table,
    normalize_type_name,
)

DEFAULT_DIALECT_ID = "mysql"

ALL_ACTIONS = ("NO ACTION", "RESTRICT", "CASCADE", "SET NULL", "SET DEFAULT")

COMMON_FUNCTIONS = (
    "NOW()",
    "CURRENT_TIMESTAMP",
    "CURRENT_DATE",
    "CURRENT_TIME",
    "GETDATE()",
    "SYSDATE",
    "UUID()",
    "GEN_RANDOM_UUID()",
    "NEWID()",
)
COMMON_KEYWORDS = ("NULL", "TRUE", "FALSE", "DEFAULT")

ORACLE_FUNCTIONS = (
    "SYSDATE",
    "SYSTIMESTAMP",
    "CURRENT_DATE",
    "CURRENT_TIMESTAMP",
    "LOCALTIMESTAMP",
    "SYS_GUID()",
    "USER",
    "UID",
    "USERENV",
)
MSSQL_FUNCTIONS = (
    "GETDATE()",
    "SYSDATETIME()",
    "GETUTCDATE()",
    "SYSDATETIMEOFFSET()",
    "SYSUTCDATETIME()",
    "CURRENT_TIMESTAMP",
    "NEWID()",
    "NEWSEQUENTIALID()",
    "USER_NAME()",
    "SYSTEM_USER",
    "SUSER_SNAME()",
)
NULL_DEFAULT_KEYWORDS = ("NULL", "DEFAULT")


@dataclass(frozen=True)
class DialectConfig:
    id: str
    name: str
    identifier_quotes: Tuple[str, str]
    types: Dict[str, TypeInfo]
    index_types: Tuple[str, ...] = ()
    update_actions: Tuple[str, ...] = ALL_ACTIONS
    delete_actions: Tuple[str, ...] = ALL_ACTIONS
    auto_increment: str = ""
    increment_strategy: str = "keyword"
    serial_types: Dict[str, str] = field(default_factory=dict)
    comment_style: str = "inline"
    batch_separator: Optional[str] = None
    supports_if_not_exists: bool = True
    default_schema: Optional[str] = None
    inline_indexes: bool = False
    index_prefix: str = "idx_"
    primary_key_name: Optional[str] = None
    primary_key_keyword: str = "PRIMARY KEY"
    explicit_null: bool = False
    national_string_prefix: Optional[str] = None
    implicit_no_action: bool = False
    default_functions: Tuple[str, ...] = COMMON_FUNCTIONS
    default_keywords: Tuple[str, ...] = COMMON_KEYWORDS
    supports_arrays: bool = False
    omit_zero_scale: bool = False
    table_options: Dict[str, str] = field(default_factory=dict)
    _type_lookup: Dict[str, TypeInfo] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_type_lookup", lookup_table(self.types))

    def quote_identifier(self, name: str) -> str:
        opening, closing = self.identifier_quotes
        return f"{opening}{name.replace(closing, closing * 2)}{closing}"

    def quote_string(self, value: str) -> str:
        return "'" + value.replace("'", "''") + "'"

    def type_info(self, type_name: str) -> Optional[TypeInfo]:
        if not type_name:
            return None
        return self._type_lookup.get(normalize_type_name(type_name))

    def is_sized(self, type_name: str) -> bool:
        info = self.type_info(type_name)
        return bool(info and info.is_sized)

    def has_precision(self, type_name: str) -> bool:
        info = self.type_info(type_name)
        return bool(info and info.has_precision)

    def has_check(self, type_name: str) -> bool:
        info = self.type_info(type_name)
        return bool(info and info.has_check)

    def has_quotes(self, type_name: str) -> bool:
        """Literal defaults of unknown types are quoted."""
        info = self.type_info(type_name)
        return True if info is None else info.has_quotes

    def signed(self, type_name: str) -> bool:
        info = self.type_info(type_name)
        return bool(info and info.signed)

    def is_national(self, type_name: str) -> bool:
        info = self.type_info(type_name)
        return bool(info and info.national)

    def has_values(self, type_name: str) -> bool:
        info = self.type_info(type_name)
        return bool(info and info.has_values)

    def supports_index_type(self, index_type: Optional[str]) -> bool:
        if not index_type:
            return True
        return index_type.upper() in self.index_types

    def supports_action(self, verb: str, action: str) -> bool:
        actions = self.update_actions if verb.upper() == "UPDATE" else self.delete_actions
        return action.upper() in actions


MYSQL = DialectConfig(
    id="mysql",
    name="MySQL",
    identifier_quotes=("`", "`"),
    types=MYSQL_TYPES,
    index_types=("BTREE", "HASH"),
    auto_increment="AUTO_INCREMENT",
    inline_indexes=True,
    table_options={
        "engine": "InnoDB",
        "charset": "utf8mb4",
        "collation": "utf8mb4_general_ci",
    },
)

MARIADB = DialectConfig(
    id="mariadb",
    name="MariaDB",
    identifier_quotes=("`", "`"),
    types=MARIADB_TYPES,
    index_types=("BTREE", "HASH", "RTREE"),
    auto_increment="AUTO_INCREMENT",
    inline_indexes=True,
    table_options={
        "engine": "InnoDB",
        "charset": "utf8mb4",
        "collation": "utf8mb4_general_ci",
    },
)

POSTGRESQL = DialectConfig(
    id="postgresql",
    name="PostgreSQL",
    identifier_quotes=('"', '"'),
    types=POSTGRESQL_TYPES,
    index_types=("BTREE", "HASH", "GIN", "GIST", "SPGIST", "BRIN"),
    increment_strategy="serial",
    serial_types={
        "INT": "SERIAL",
        "INTEGER": "SERIAL",
        "BIGINT": "BIGSERIAL",
        "SMALLINT": "SMALLSERIAL",
    },
    supports_arrays=True,
    comment_style="comment_on",
)

ORACLE = DialectConfig(
    id="oracle",
    name="Oracle",
    identifier_quotes=('"', '"'),
    types=ORACLE_TYPES,
    index_types=("BTREE", "BITMAP", "FUNCTION-BASED"),
    update_actions=(),
    delete_actions=("NO ACTION", "CASCADE", "SET NULL"),
    auto_increment="GENERATED ALWAYS AS IDENTITY",
    increment_strategy="identity",
    comment_style="comment_on",
    supports_if_not_exists=False,
    primary_key_name="pk_{table}",
    omit_zero_scale=True,
    implicit_no_action=True,
    default_functions=ORACLE_FUNCTIONS,
    default_keywords=NULL_DEFAULT_KEYWORDS,
)

MSSQL = DialectConfig(
    id="mssql",
    name="SQL Server",
    identifier_quotes=("[", "]"),
    types=MSSQL_TYPES,
    index_types=("CLUSTERED", "NONCLUSTERED", "COLUMNSTORE", "XML", "SPATIAL"),
    update_actions=("NO ACTION", "CASCADE", "SET NULL", "SET DEFAULT"),
    delete_actions=("NO ACTION", "CASCADE", "SET NULL", "SET DEFAULT"),
    auto_increment="IDENTITY(1,1)",
    increment_strategy="identity",
    comment_style="extended_property",
    batch_separator="GO",
    supports_if_not_exists=False,
    default_schema="dbo",
    index_prefix="IX_",
    primary_key_name="PK_{table}",
    primary_key_keyword="PRIMARY KEY CLUSTERED",
    explicit_null=True,
    national_string_prefix="N",
    implicit_no_action=True,
    default_functions=MSSQL_FUNCTIONS,
    default_keywords=NULL_DEFAULT_KEYWORDS,
)

_REGISTRY: Dict[str, DialectConfig] = {}


def register_dialect(config: DialectConfig) -> None:
    _REGISTRY[config.id] = config


def register_all() -> None:
    for config in (MYSQL, MARIADB, POSTGRESQL, ORACLE, MSSQL):
        register_dialect(config)


def get_dialect(dialect_id: Optional[str]) -> DialectConfig:
    key = (dialect_id or "").strip().lower()
    return _REGISTRY.get(key, _REGISTRY[DEFAULT_DIALECT_ID])


def is_known_dialect(dialect_id: Optional[str]) -> bool:
    return (dialect_id or "").strip().lower() in _REGISTRY


def list_dialects() -> List[DialectConfig]:
    return list(_REGISTRY.values())


register_all()
