"""Dialect DDL generators.

Each generator implements the same interface:
  generate(diagram) -> str

``generate_sql`` dispatches through the registry and falls back to MySQL for
unknown dialect ids.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Type

from erd_core.dialects import DEFAULT_DIALECT_ID
from erd_core.generators.base import (
    MAX_IDENTIFIER_LENGTH,
    BaseGenerator,
    foreign_key_name,
    primary_key_fields,
)
from erd_core.generators.mssql import SQLServerGenerator
from erd_core.generators.mysql import MariaDBGenerator, MySQLGenerator
from erd_core.generators.oracle import OracleGenerator
from erd_core.generators.postgresql import PostgreSQLGenerator
from erd_core.model import Diagram
from erd_core.settings import Settings

logger = logging.getLogger(__name__)

_REGISTRY: Dict[str, Type[BaseGenerator]] = {}


def register_generator(generator_cls: Type[BaseGenerator]) -> None:
    _REGISTRY[generator_cls.dialect_id] = generator_cls


def register_all() -> None:
    """Register all built-in generators."""
    for generator_cls in (
        MySQLGenerator,
        MariaDBGenerator,
        PostgreSQLGenerator,
        OracleGenerator,
        SQLServerGenerator,
    ):
        register_generator(generator_cls)


def list_generators() -> List[str]:
    return sorted(_REGISTRY)


def get_generator(dialect: Optional[str], settings: Optional[Settings] = None) -> BaseGenerator:
    key = (dialect or "").strip().lower()
    generator_cls = _REGISTRY.get(key)
    if generator_cls is None:
        logger.warning("No generator for dialect %r; falling back to %s", dialect, DEFAULT_DIALECT_ID)
        generator_cls = _REGISTRY[DEFAULT_DIALECT_ID]
    return generator_cls(settings)


def generate_sql(
    diagram: Diagram,
    dialect: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> str:
    settings = settings or Settings()
    target = dialect or diagram.dialect or settings.dialect
    return get_generator(target, settings).generate(diagram)


def write_sql(
    diagram: Diagram,
    out_path: str,
    dialect: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> str:
    sql = generate_sql(diagram, dialect=dialect, settings=settings)
    target = Path(out_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(sql, encoding="utf-8")
    return str(target)


register_all()

__all__ = [
    "BaseGenerator",
    "MAX_IDENTIFIER_LENGTH",
    "MariaDBGenerator",
    "MySQLGenerator",
    "OracleGenerator",
    "PostgreSQLGenerator",
    "SQLServerGenerator",
    "foreign_key_name",
    "generate_sql",
    "get_generator",
    "list_generators",
    "primary_key_fields",
    "register_all",
    "register_generator",
    "write_sql",
]
