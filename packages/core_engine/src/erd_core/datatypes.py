import json
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

Validator = Callable[[str, Optional[int]], bool]

_INTEGER_RE = re.compile(r"^-?\d+$")
_DECIMAL_RE = re.compile(r"^-?\d+(\.\d+)?$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}(:\d{2}(\.\d+)?)?$")
_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}(:\d{2}(\.\d+)?)?$")
_YEAR_RE = re.compile(r"^\d{4}$")
_UUID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
_NOW_TOKENS = {"CURRENT_TIMESTAMP", "NOW()", "CURRENT_DATE", "CURRENT_TIME", "LOCALTIMESTAMP"}


def is_integer(value: str, size: Optional[int] = None) -> bool:
    return bool(_INTEGER_RE.match(value.strip()))


def is_decimal(value: str, size: Optional[int] = None) -> bool:
    return bool(_DECIMAL_RE.match(value.strip()))


def is_valid_string(value: str, size: Optional[int] = None) -> bool:
    return len(value) <= (size or 255)


def is_binary(value: str, size: Optional[int] = None) -> bool:
    return bool(re.match(r"^[01]+$", value.strip())) and (size is None or len(value.strip()) <= size)


def is_boolean(value: str, size: Optional[int] = None) -> bool:
    return value.strip().lower() in {"true", "false", "0", "1"}


def _is_now(value: str) -> bool:
    return value.strip().upper() in _NOW_TOKENS


def is_date(value: str, size: Optional[int] = None) -> bool:
    return bool(_DATE_RE.match(value.strip())) or _is_now(value)


def is_time(value: str, size: Optional[int] = None) -> bool:
    return bool(_TIME_RE.match(value.strip())) or _is_now(value)


def is_datetime(value: str, size: Optional[int] = None) -> bool:
    return bool(_DATETIME_RE.match(value.strip())) or _is_now(value)


def is_year(value: str, size: Optional[int] = None) -> bool:
    return bool(_YEAR_RE.match(value.strip()))


def is_uuid(value: str, size: Optional[int] = None) -> bool:
    return bool(_UUID_RE.match(value.strip()))


def is_json(value: str, size: Optional[int] = None) -> bool:
    try:
        json.loads(value)
    except ValueError:
        return False
    return True


@dataclass(frozen=True)
class TypeInfo:
    name: str
    category: str
    is_sized: bool = False
    has_precision: bool = False
    has_check: bool = False
    has_quotes: bool = False
    signed: bool = False
    can_increment: bool = False
    has_scale: bool = False
    has_values: bool = False
    national: bool = False
    default_size: Optional[int] = None
    default_precision: Optional[int] = None
    default_scale: Optional[int] = None
    validator: Optional[Validator] = None

    def validate(self, value: str, size: Optional[int] = None) -> bool:
        if self.validator is None:
            return True
        return self.validator(value, size)


def _numeric(name: str, **kwargs) -> TypeInfo:
    kwargs.setdefault("validator", is_integer)
    return TypeInfo(name=name, category="numeric", has_check=True, **kwargs)


def _integer(name: str, signed: bool = False) -> TypeInfo:
    return _numeric(name, signed=signed, can_increment=True)


def _decimal(name: str, precision: int = 10, scale: Optional[int] = 2, signed: bool = False) -> TypeInfo:
    return _numeric(
        name,
        has_precision=True,
        has_scale=True,
        signed=signed,
        default_precision=precision,
        default_scale=scale,
        validator=is_decimal,
    )


def _float(name: str, has_precision: bool = False, scale: bool = False, signed: bool = False) -> TypeInfo:
    return _numeric(name, has_precision=has_precision, has_scale=scale, signed=signed, validator=is_decimal)


def _string(
    name: str,
    sized: bool = False,
    size: Optional[int] = None,
    check: bool = True,
    national: bool = False,
    values: bool = False,
) -> TypeInfo:
    return TypeInfo(
        name=name,
        category="string",
        is_sized=sized,
        has_check=check,
        has_quotes=True,
        has_values=values,
        national=national,
        default_size=size,
        validator=is_valid_string if sized else None,
    )


def _temporal(name: str, validator: Validator, precision: bool = False) -> TypeInfo:
    return TypeInfo(
        name=name,
        category="datetime",
        has_precision=precision,
        has_check=True,
        has_quotes=True,
        validator=validator,
    )


def _binary(name: str, sized: bool = False, size: Optional[int] = None, quotes: bool = False) -> TypeInfo:
    return TypeInfo(
        name=name,
        category="binary",
        is_sized=sized,
        has_quotes=quotes,
        default_size=size,
    )


def _plain(name: str, category: str, quotes: bool = False, validator: Optional[Validator] = None) -> TypeInfo:
    return TypeInfo(name=name, category=category, has_quotes=quotes, validator=validator)


def _table(*types: TypeInfo) -> Dict[str, TypeInfo]:
    return {item.name: item for item in types}


BASE_TYPES = _table(
    _integer("INT"),
    _integer("SMALLINT"),
    _integer("BIGINT"),
    _decimal("DECIMAL"),
    _decimal("NUMERIC"),
    _float("FLOAT", has_precision=True, scale=True),
    _float("DOUBLE", has_precision=True, scale=True),
    _float("REAL"),
    _string("CHAR", sized=True, size=1),
    _string("VARCHAR", sized=True, size=255),
    _string("TEXT"),
    _temporal("DATE", is_date),
    _temporal("TIME", is_time),
    _temporal("DATETIME", is_datetime),
    _temporal("TIMESTAMP", is_datetime),
    _plain("BOOLEAN", "boolean", validator=is_boolean),
    _binary("BLOB"),
    _binary("BINARY", sized=True, size=1, quotes=True),
    _binary("VARBINARY", sized=True, size=255, quotes=True),
    _plain("JSON", "json", quotes=True, validator=is_json),
)

MYSQL_TYPES = dict(BASE_TYPES)
MYSQL_TYPES.update(
    _table(
        _integer("TINYINT", signed=True),
        _integer("SMALLINT", signed=True),
        _integer("MEDIUMINT", signed=True),
        _integer("INT", signed=True),
        _integer("INTEGER", signed=True),
        _integer("BIGINT", signed=True),
        _decimal("DECIMAL", signed=True),
        _decimal("NUMERIC", signed=True),
        _float("FLOAT", has_precision=True, scale=True, signed=True),
        _float("DOUBLE", has_precision=True, scale=True, signed=True),
        _string("TINYTEXT"),
        _string("MEDIUMTEXT"),
        _string("LONGTEXT"),
        _binary("TINYBLOB"),
        _binary("MEDIUMBLOB"),
        _binary("LONGBLOB"),
        TypeInfo(name="YEAR", category="datetime", has_check=True, validator=is_year),
        _string("ENUM", check=False, values=True),
        _string("SET", check=False, values=True),
        TypeInfo(name="BIT", category="numeric", is_sized=True, has_check=True, default_size=1, validator=is_binary),
        _plain("GEOMETRY", "spatial"),
        _plain("POINT", "spatial"),
        _plain("LINESTRING", "spatial"),
        _plain("POLYGON", "spatial"),
        _plain("MULTIPOINT", "spatial"),
        _plain("MULTILINESTRING", "spatial"),
        _plain("MULTIPOLYGON", "spatial"),
        _plain("GEOMETRYCOLLECTION", "spatial"),
    )
)

MARIADB_TYPES = dict(MYSQL_TYPES)
MARIADB_TYPES.update(
    _table(
        _plain("UUID", "string", quotes=True, validator=is_uuid),
        _plain("INET4", "network", quotes=True),
        _plain("INET6", "network", quotes=True),
    )
)

POSTGRESQL_TYPES = dict(BASE_TYPES)
POSTGRESQL_TYPES.update(
    _table(
        _integer("INTEGER"),
        TypeInfo(name="SERIAL", category="numeric", has_check=True, validator=is_integer),
        TypeInfo(name="SMALLSERIAL", category="numeric", has_check=True, validator=is_integer),
        TypeInfo(name="BIGSERIAL", category="numeric", has_check=True, validator=is_integer),
        _float("DOUBLE PRECISION"),
        _plain("MONEY", "numeric", validator=is_decimal),
        _string("CHARACTER", sized=True, size=1),
        _string("CHARACTER VARYING", sized=True, size=255),
        _plain("UUID", "string", quotes=True, validator=is_uuid),
        _plain("JSONB", "json", quotes=True, validator=is_json),
        _plain("ARRAY", "array", quotes=True),
        _plain("BYTEA", "binary", quotes=True),
        _temporal("TIMESTAMPTZ", is_datetime, precision=True),
        _temporal("TIMESTAMP WITH TIME ZONE", is_datetime, precision=True),
        _temporal("TIMESTAMP WITHOUT TIME ZONE", is_datetime, precision=True),
        _temporal("TIMETZ", is_time, precision=True),
        _temporal("TIME WITH TIME ZONE", is_time, precision=True),
        _temporal("TIME WITHOUT TIME ZONE", is_time, precision=True),
        _plain("INTERVAL", "datetime", quotes=True),
        _plain("CIDR", "network", quotes=True),
        _plain("INET", "network", quotes=True),
        _plain("MACADDR", "network", quotes=True),
        _plain("MACADDR8", "network", quotes=True),
        _plain("POINT", "spatial", quotes=True),
        _plain("LINE", "spatial", quotes=True),
        _plain("LSEG", "spatial", quotes=True),
        _plain("BOX", "spatial", quotes=True),
        _plain("PATH", "spatial", quotes=True),
        _plain("POLYGON", "spatial", quotes=True),
        _plain("CIRCLE", "spatial", quotes=True),
        _plain("TSVECTOR", "text_search", quotes=True),
        _plain("TSQUERY", "text_search", quotes=True),
        _plain("INT4RANGE", "range", quotes=True),
        _plain("INT8RANGE", "range", quotes=True),
        _plain("NUMRANGE", "range", quotes=True),
        _plain("TSRANGE", "range", quotes=True),
        _plain("TSTZRANGE", "range", quotes=True),
        _plain("DATERANGE", "range", quotes=True),
        _plain("XML", "document", quotes=True),
        TypeInfo(name="BIT", category="binary", is_sized=True, has_quotes=True, default_size=1, validator=is_binary),
        TypeInfo(name="BIT VARYING", category="binary", is_sized=True, has_quotes=True, default_size=1, validator=is_binary),
        _plain("BOOL", "boolean", validator=is_boolean),
    )
)
# PostgreSQL has no DATETIME or BLOB; TIMESTAMP/TIME take a precision.
for _name in ("DATETIME", "BLOB", "DOUBLE", "BINARY", "VARBINARY"):
    POSTGRESQL_TYPES.pop(_name, None)
POSTGRESQL_TYPES["TIMESTAMP"] = replace(POSTGRESQL_TYPES["TIMESTAMP"], has_precision=True)
POSTGRESQL_TYPES["TIME"] = replace(POSTGRESQL_TYPES["TIME"], has_precision=True)
POSTGRESQL_TYPES["FLOAT"] = replace(POSTGRESQL_TYPES["FLOAT"], has_precision=False)

ORACLE_TYPES = _table(
    TypeInfo(
        name="NUMBER",
        category="numeric",
        has_precision=True,
        has_scale=True,
        has_check=True,
        can_increment=True,
        default_precision=10,
        default_scale=0,
        validator=is_decimal,
    ),
    _integer("INT"),
    _integer("INTEGER"),
    _integer("SMALLINT"),
    _decimal("DECIMAL", scale=0),
    _decimal("NUMERIC", scale=0),
    _float("BINARY_FLOAT"),
    _float("BINARY_DOUBLE"),
    _float("FLOAT", has_precision=True),
    _string("VARCHAR2", sized=True, size=255),
    _string("VARCHAR", sized=True, size=255),
    _string("NVARCHAR2", sized=True, size=255, national=True),
    _string("CHAR", sized=True, size=1),
    _string("NCHAR", sized=True, size=1, national=True),
    _string("CLOB", check=False),
    _string("NCLOB", check=False, national=True),
    _binary("BLOB"),
    _binary("BFILE"),
    _temporal("DATE", is_datetime),
    _temporal("TIMESTAMP", is_datetime, precision=True),
    _temporal("TIMESTAMP WITH TIME ZONE", is_datetime, precision=True),
    _temporal("TIMESTAMP WITH LOCAL TIME ZONE", is_datetime, precision=True),
    _plain("INTERVAL YEAR TO MONTH", "datetime", quotes=True),
    _plain("INTERVAL DAY TO SECOND", "datetime", quotes=True),
    _binary("RAW", sized=True, size=2000),
    _binary("LONG RAW"),
    _plain("ROWID", "rowid"),
    TypeInfo(name="UROWID", category="rowid", is_sized=True, default_size=4000),
    _plain("XMLTYPE", "document", quotes=True),
    _plain("JSON", "json", quotes=True, validator=is_json),
    _plain("SDO_GEOMETRY", "spatial"),
    _string("LONG", check=False),
)

MSSQL_TYPES = _table(
    _integer("TINYINT"),
    _integer("SMALLINT"),
    _integer("INT"),
    _integer("BIGINT"),
    _decimal("DECIMAL", precision=18, scale=0),
    _decimal("NUMERIC", precision=18, scale=0),
    _float("FLOAT", has_precision=True),
    _float("REAL"),
    _plain("MONEY", "numeric", validator=is_decimal),
    _plain("SMALLMONEY", "numeric", validator=is_decimal),
    _string("CHAR", sized=True, size=1),
    _string("VARCHAR", sized=True, size=255),
    _string("NCHAR", sized=True, size=1, national=True),
    _string("NVARCHAR", sized=True, size=255, national=True),
    _string("VARCHAR(MAX)", check=False),
    _string("NVARCHAR(MAX)", check=False, national=True),
    _string("TEXT", check=False),
    _string("NTEXT", check=False, national=True),
    _temporal("DATE", is_date),
    _temporal("DATETIME", is_datetime),
    _temporal("SMALLDATETIME", is_datetime),
    _temporal("TIME", is_time, precision=True),
    _temporal("DATETIME2", is_datetime, precision=True),
    _temporal("DATETIMEOFFSET", is_datetime, precision=True),
    _binary("BINARY", sized=True, size=1),
    _binary("VARBINARY", sized=True, size=255),
    _binary("VARBINARY(MAX)"),
    _binary("IMAGE"),
    _plain("BIT", "boolean", validator=is_boolean),
    _plain("UNIQUEIDENTIFIER", "string", quotes=True, validator=is_uuid),
    _plain("XML", "document", quotes=True),
    _plain("GEOGRAPHY", "spatial"),
    _plain("GEOMETRY", "spatial"),
    _plain("HIERARCHYID", "other"),
    _plain("SQL_VARIANT", "other"),
    _plain("ROWVERSION", "other"),
)

_TYPES_BY_DIALECT: Dict[str, Dict[str, TypeInfo]] = {
    "mysql": MYSQL_TYPES,
    "mariadb": MARIADB_TYPES,
    "postgresql": POSTGRESQL_TYPES,
    "oracle": ORACLE_TYPES,
    "mssql": MSSQL_TYPES,
}


def normalize_type_name(name: str) -> str:
    return re.sub(r"[\s_]+", " ", name.strip().upper())


def lookup_table(types: Dict[str, TypeInfo]) -> Dict[str, TypeInfo]:
    return {normalize_type_name(key): value for key, value in types.items()}


_LOOKUP: Dict[str, Dict[str, TypeInfo]] = {
    dialect: lookup_table(types) for dialect, types in _TYPES_BY_DIALECT.items()
}


def get_data_types(dialect: str) -> Dict[str, TypeInfo]:
    return dict(_TYPES_BY_DIALECT.get(dialect, {}))


def get_data_type(dialect: str, type_name: str) -> Optional[TypeInfo]:
    table = _LOOKUP.get(dialect)
    if table is None or not type_name:
        return None
    return table.get(normalize_type_name(type_name))


def data_type_names(dialect: str) -> List[str]:
    return list(_TYPES_BY_DIALECT.get(dialect, {}).keys())


def validate_default_value(dialect: str, type_name: str, value: str, size: Optional[int] = None) -> bool:
    info = get_data_type(dialect, type_name)
    if info is None:
        return True
    return info.validate(value, size)


def can_type_increment(dialect: str, type_name: str) -> bool:
    info = get_data_type(dialect, type_name)
    return bool(info and info.can_increment)
