from erd_core.completion import generate_bash_completion, generate_fish_completion, generate_zsh_completion
from erd_core.connections import RelationshipBuilder
from erd_core.datatypes import (
    TypeInfo,
    can_type_increment,
    data_type_names,
    get_data_type,
    get_data_types,
    validate_default_value,
)
from erd_core.defaults import DefaultKind, classify_default, format_default
from erd_core.dialects import DialectConfig, get_dialect, list_dialects, register_dialect
from erd_core.editor import DiagramEditor
from erd_core.generators import generate_sql, get_generator, write_sql
from erd_core.history import HistoryManager
from erd_core.issues import Issue, has_errors, to_lines
from erd_core.model import (
    Area,
    Diagram,
    Note,
    Relationship,
    Table,
    TableField,
    TableIndex,
    create_default_field,
    create_default_table,
    create_empty_diagram,
)
from erd_core.settings import Settings, load_settings
from erd_core.snapshot import (
    diagram_file,
    dump_snapshot,
    load_snapshot,
    save_snapshot,
    snapshot_issues,
)
from erd_core.validation import diagram_issues

__all__ = [
    "Area",
    "can_type_increment",
    "classify_default",
    "create_default_field",
    "create_default_table",
    "create_empty_diagram",
    "data_type_names",
    "DefaultKind",
    "Diagram",
    "diagram_file",
    "diagram_issues",
    "DiagramEditor",
    "DialectConfig",
    "dump_snapshot",
    "format_default",
    "generate_bash_completion",
    "generate_fish_completion",
    "generate_sql",
    "generate_zsh_completion",
    "get_data_type",
    "get_data_types",
    "get_dialect",
    "get_generator",
    "has_errors",
    "HistoryManager",
    "Issue",
    "list_dialects",
    "load_settings",
    "load_snapshot",
    "Note",
    "register_dialect",
    "Relationship",
    "RelationshipBuilder",
    "save_snapshot",
    "Settings",
    "snapshot_issues",
    "Table",
    "TableField",
    "TableIndex",
    "to_lines",
    "TypeInfo",
    "validate_default_value",
    "write_sql",
]
