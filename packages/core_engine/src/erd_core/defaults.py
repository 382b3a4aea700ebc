import re
from enum import Enum
from typing import Optional

from erd_core.dialects import DialectConfig
from erd_core.model import TableField


class DefaultKind(str, Enum):
    LITERAL = "literal"
    FUNCTION = "function"
    KEYWORD = "keyword"


def _token_pattern(token: str) -> str:
    token = token.upper()
    if token.endswith("()"):
        return re.escape(token[:-2]) + r"\s*\(.*\)"
    return re.escape(token) + r"(\s*\(\s*\d*\s*\))?"


def is_function_default(value: str, config: DialectConfig) -> bool:
    upper = value.strip().upper()
    if not upper:
        return False
    return any(re.fullmatch(_token_pattern(token), upper) for token in config.default_functions)


def is_keyword_default(value: str, config: DialectConfig) -> bool:
    return value.strip().upper() in config.default_keywords


def classify_default(value: str, config: DialectConfig) -> DefaultKind:
    if is_keyword_default(value, config):
        return DefaultKind.KEYWORD
    if is_function_default(value, config):
        return DefaultKind.FUNCTION
    return DefaultKind.LITERAL


def resolve_kind(field: TableField, config: DialectConfig) -> DefaultKind:
    if field.default_kind in {kind.value for kind in DefaultKind}:
        return DefaultKind(field.default_kind)
    return classify_default(field.default, config)


def format_default(field: TableField, config: DialectConfig) -> Optional[str]:
    """Render the value of a ``DEFAULT`` clause, or ``None`` when there is none."""
    if field.default == "":
        return None
    kind = resolve_kind(field, config)
    if kind is not DefaultKind.LITERAL:
        return field.default
    if not config.has_quotes(field.type):
        return field.default
    quoted = config.quote_string(field.default)
    prefix = config.national_string_prefix
    if prefix and config.is_national(field.type):
        return prefix + quoted
    return quoted
