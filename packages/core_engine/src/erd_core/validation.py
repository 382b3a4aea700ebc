from collections import Counter
from typing import List, Optional, Set

from erd_core.datatypes import get_data_type, normalize_type_name
from erd_core.defaults import DefaultKind, resolve_kind
from erd_core.dialects import get_dialect
from erd_core.issues import Issue
from erd_core.model import CARDINALITIES, Diagram, Table


def _table_path(table: Table) -> str:
    return f"/tables/{table.name or table.id}"


def _duplicates(values: List[str]) -> Set[str]:
    return {value for value, count in Counter(values).items() if count > 1}


def _table_issues(table: Table, dialect_id: str) -> List[Issue]:
    config = get_dialect(dialect_id)
    issues: List[Issue] = []
    path = _table_path(table)

    if not table.name.strip():
        issues.append(Issue("error", "EMPTY_TABLE_NAME", f"Table {table.id} has no name.", path))

    for field_id in sorted(_duplicates([f.id for f in table.fields])):
        issues.append(Issue("error", "DUPLICATE_FIELD_ID", f"Field id '{field_id}' is used more than once.", path))
    for name in sorted(_duplicates([f.name for f in table.fields if f.name])):
        issues.append(Issue("warn", "DUPLICATE_FIELD_NAME", f"Field name '{name}' is used more than once.", path))

    if table.fields and not any(f.primary for f in table.fields):
        issues.append(Issue("warn", "NO_PRIMARY_KEY", f"Table '{table.name}' has no primary key.", path))

    for field in table.fields:
        field_path = f"{path}/fields/{field.name or field.id}"
        if not field.name.strip():
            issues.append(Issue("error", "EMPTY_FIELD_NAME", f"Field {field.id} has no name.", field_path))

        info = get_data_type(config.id, field.type)
        if info is None and "(" not in field.type:
            issues.append(
                Issue("warn", "UNKNOWN_TYPE", f"Type '{field.type}' is not a known {config.name} type.", field_path)
            )

        if field.increment:
            if field.default:
                issues.append(
                    Issue(
                        "warn",
                        "INCREMENT_WITH_DEFAULT",
                        "Auto-increment field carries a default that will not be emitted.",
                        field_path,
                    )
                )
            if info is not None and not info.can_increment and config.increment_strategy != "serial":
                issues.append(
                    Issue("warn", "INCREMENT_TYPE", f"Type '{field.type}' cannot auto-increment.", field_path)
                )
            if config.increment_strategy == "serial" and not config.serial_types.get(normalize_type_name(field.type)):
                issues.append(
                    Issue("warn", "INCREMENT_TYPE", f"Type '{field.type}' has no serial equivalent.", field_path)
                )

        if field.default and info is not None and resolve_kind(field, config) is DefaultKind.LITERAL:
            if not info.validate(field.default, field.size):
                issues.append(
                    Issue(
                        "warn",
                        "INVALID_DEFAULT",
                        f"Default '{field.default}' is not a valid {field.type} value.",
                        field_path,
                    )
                )

    field_names = {f.name for f in table.fields}
    for index in table.indexes:
        index_path = f"{path}/indexes/{index.name or index.id}"
        if not index.fields:
            issues.append(Issue("warn", "INDEX_NO_FIELDS", "Index has no fields and will be skipped.", index_path))
        for name in index.fields:
            if name not in field_names:
                issues.append(
                    Issue("warn", "INDEX_UNKNOWN_FIELD", f"Index refers to unknown field '{name}'.", index_path)
                )
        if not config.supports_index_type(index.index_type):
            issues.append(
                Issue(
                    "warn",
                    "UNSUPPORTED_INDEX_TYPE",
                    f"{config.name} does not support {index.index_type} indexes.",
                    index_path,
                )
            )

    return issues


def diagram_issues(diagram: Diagram, dialect: Optional[str] = None) -> List[Issue]:
    dialect_id = get_dialect(dialect or diagram.dialect).id
    config = get_dialect(dialect_id)
    issues: List[Issue] = []

    for table_id in sorted(_duplicates([t.id for t in diagram.tables])):
        issues.append(Issue("error", "DUPLICATE_TABLE_ID", f"Table id '{table_id}' is used more than once.", "/tables"))
    for name in sorted(_duplicates([t.name for t in diagram.tables if t.name])):
        issues.append(Issue("warn", "DUPLICATE_TABLE_NAME", f"Table name '{name}' is used more than once.", "/tables"))

    for table in diagram.tables:
        issues.extend(_table_issues(table, dialect_id))

    for rel in diagram.relationships:
        rel_path = f"/relationships/{rel.name or rel.id}"
        if diagram.resolve_endpoints(rel) is None:
            issues.append(
                Issue(
                    "error",
                    "STALE_RELATIONSHIP",
                    "Relationship endpoint table or field no longer exists.",
                    rel_path,
                )
            )
        if rel.cardinality not in CARDINALITIES:
            issues.append(
                Issue("warn", "UNKNOWN_CARDINALITY", f"Unknown cardinality '{rel.cardinality}'.", rel_path)
            )
        for verb, action in (("UPDATE", rel.update_constraint), ("DELETE", rel.delete_constraint)):
            if action.upper() == "NO ACTION" and config.implicit_no_action:
                continue
            if not config.supports_action(verb, action):
                issues.append(
                    Issue(
                        "warn",
                        "UNSUPPORTED_FK_ACTION",
                        f"{config.name} does not support ON {verb} {action}.",
                        rel_path,
                    )
                )

    return issues
