import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from erd_core import (
    Diagram,
    DiagramEditor,
    RelationshipBuilder,
    Settings,
    create_empty_diagram,
    diagram_issues,
    dump_snapshot,
    generate_bash_completion,
    generate_fish_completion,
    generate_sql,
    generate_zsh_completion,
    get_data_types,
    get_dialect,
    list_dialects,
    load_settings,
    save_snapshot,
    snapshot_issues,
)
from erd_core.dialects import is_known_dialect
from erd_core.issues import Issue, has_errors, to_lines
from erd_core.model import Table, TableField, TableIndex
from erd_core.snapshot import read_snapshot_document, snapshot_format

logger = logging.getLogger("erd_cli")

DEFAULT_SNAPSHOT = "diagram.json"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _print_issues(issues: List[Issue]) -> None:
    if not issues:
        print("No issues found.")
        return
    for line in to_lines(issues):
        print(line)


def _issues_as_json(issues: List[Issue]) -> List[Dict[str, str]]:
    return [issue.to_dict() for issue in issues]


def _load_checked(path: str, dialect: Optional[str]) -> Tuple[Optional[Diagram], List[Issue]]:
    data = read_snapshot_document(path)
    issues = snapshot_issues(data)
    if has_errors(issues):
        return None, issues
    diagram = Diagram.from_dict(data)
    issues.extend(diagram_issues(diagram, dialect))
    return diagram, issues


def _starter_diagram(settings: Settings, dialect: str) -> Diagram:
    editor = DiagramEditor(create_empty_diagram(dialect), settings=settings)
    editor.set_title("Starter diagram")

    users = editor.add_table(Table(name="users", x=80, y=80))
    users_id = editor.add_field(users.id, TableField(name="id", primary=True, not_null=True, increment=True))
    editor.add_field(users.id, TableField(name="email", type="VARCHAR", size=255, not_null=True))
    editor.add_field(users.id, TableField(name="status", type="VARCHAR", size=20, default="active"))
    editor.add_index(users.id, TableIndex(unique=True, fields=["email"]))

    orders = editor.add_table(Table(name="orders", x=400, y=80))
    editor.add_field(orders.id, TableField(name="id", primary=True, not_null=True, increment=True))
    user_id = editor.add_field(orders.id, TableField(name="user_id", not_null=True))

    builder = RelationshipBuilder(editor)
    builder.start_connection(orders.id, user_id.id)
    builder.end_connection(users.id, users_id.id)
    return editor.export_diagram()


def cmd_init(args: argparse.Namespace) -> int:
    root = Path(args.path).resolve()
    root.mkdir(parents=True, exist_ok=True)
    settings: Settings = args.settings
    dialect = args.dialect or settings.dialect

    config_dst = root / "erd.yaml"
    if not config_dst.exists() or args.force:
        payload = Settings(dialect=dialect).to_dict()
        config_dst.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        print(f"Created {config_dst}")

    snapshot_dst = root / args.name
    if snapshot_dst.exists() and not args.force:
        print(f"Init skipped: {snapshot_dst} already exists (use --force to overwrite).", file=sys.stderr)
        return 1

    if args.example:
        diagram = _starter_diagram(settings, dialect)
    else:
        diagram = create_empty_diagram(dialect)
    save_snapshot(diagram, str(snapshot_dst))
    print(f"Created {snapshot_dst}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    _, issues = _load_checked(args.snapshot, args.dialect)
    if args.output_json:
        print(json.dumps(_issues_as_json(issues), indent=2))
    else:
        _print_issues(issues)
    return 1 if has_errors(issues) else 0


def cmd_generate_sql(args: argparse.Namespace) -> int:
    settings: Settings = args.settings
    diagram, issues = _load_checked(args.snapshot, args.dialect)

    if diagram is None or has_errors(issues):
        _print_issues(issues)
        return 1
    for issue in issues:
        logger.warning("%s %s: %s", issue.code, issue.path, issue.message)

    ddl = generate_sql(diagram, dialect=args.dialect, settings=settings)
    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(ddl, encoding="utf-8")
        print(f"Wrote SQL DDL: {args.out}")
    else:
        print(ddl, end="")

    return 0


def cmd_dialects(args: argparse.Namespace) -> int:
    rows = []
    for config in list_dialects():
        rows.append(
            {
                "id": config.id,
                "name": config.name,
                "quote": "".join(config.identifier_quotes),
                "auto_increment": config.auto_increment or "SERIAL",
                "comments": config.comment_style,
                "index_types": list(config.index_types),
            }
        )

    if args.output_json:
        print(json.dumps(rows, indent=2))
        return 0
    for row in rows:
        print(
            f"{row['id']:<12}{row['name']:<14}quote {row['quote']:<4}"
            f"auto-increment {row['auto_increment']:<32}comments {row['comments']}"
        )
    return 0


def cmd_types(args: argparse.Namespace) -> int:
    if not is_known_dialect(args.dialect):
        print(f"Unknown dialect: {args.dialect}", file=sys.stderr)
        return 1
    types = get_data_types(get_dialect(args.dialect).id)

    if args.output_json:
        payload = [
            {
                "name": info.name,
                "category": info.category,
                "sized": info.is_sized,
                "precision": info.has_precision,
                "check": info.has_check,
                "quoted": info.has_quotes,
                "signed": info.signed,
                "increment": info.can_increment,
            }
            for info in types.values()
        ]
        print(json.dumps(payload, indent=2))
        return 0

    for info in types.values():
        flags = [
            label
            for label, enabled in (
                ("sized", info.is_sized),
                ("precision", info.has_precision),
                ("check", info.has_check),
                ("quoted", info.has_quotes),
                ("signed", info.signed),
                ("increment", info.can_increment),
            )
            if enabled
        ]
        print(f"{info.name:<32}{info.category:<12}{', '.join(flags)}")
    return 0


def _diagram_stats(diagram: Diagram) -> Dict[str, Any]:
    fields = [field for table in diagram.tables for field in table.fields]
    return {
        "title": diagram.title,
        "dialect": diagram.dialect,
        "table_count": len(diagram.tables),
        "field_count": len(fields),
        "primary_keys": sum(1 for field in fields if field.primary),
        "auto_increment": sum(1 for field in fields if field.increment),
        "index_count": sum(len(table.indexes) for table in diagram.tables),
        "relationship_count": len(diagram.relationships),
        "stale_relationships": sum(
            1 for rel in diagram.relationships if diagram.resolve_endpoints(rel) is None
        ),
        "note_count": len(diagram.notes),
        "area_count": len(diagram.areas),
        "commented_fields": f"{sum(1 for field in fields if field.comment)}/{len(fields)}",
    }


def cmd_stats(args: argparse.Namespace) -> int:
    diagram, issues = _load_checked(args.snapshot, None)
    if diagram is None:
        _print_issues(issues)
        return 1
    stats = _diagram_stats(diagram)

    if args.output_json:
        print(json.dumps(stats, indent=2))
        return 0

    print(f"Diagram: {stats['title']} ({stats['dialect']})")
    print(f"Tables: {stats['table_count']}")
    print(f"Fields: {stats['field_count']}  (PK: {stats['primary_keys']}, auto-increment: {stats['auto_increment']})")
    print(f"Indexes: {stats['index_count']}")
    print(f"Relationships: {stats['relationship_count']}")
    if stats["stale_relationships"]:
        print(f"Stale relationships: {stats['stale_relationships']}")
    print(f"Notes: {stats['note_count']}  Areas: {stats['area_count']}")
    print(f"Commented fields: {stats['commented_fields']}")
    return 0


def cmd_fmt(args: argparse.Namespace) -> int:
    diagram, issues = _load_checked(args.snapshot, None)
    if diagram is None:
        _print_issues(issues)
        return 1

    if args.write:
        save_snapshot(diagram, args.snapshot)
        print(f"Formatted: {args.snapshot}")
    elif args.out:
        save_snapshot(diagram, args.out)
        print(f"Wrote formatted snapshot: {args.out}")
    else:
        fmt = args.format or snapshot_format(args.snapshot)
        print(dump_snapshot(diagram, fmt), end="")
    return 0


def cmd_completion(args: argparse.Namespace) -> int:
    shell = args.shell
    if shell == "bash":
        print(generate_bash_completion())
    elif shell == "zsh":
        print(generate_zsh_completion())
    elif shell == "fish":
        print(generate_fish_completion())
    else:
        print(f"Unsupported shell: {shell}", file=sys.stderr)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    dialect_ids = [config.id for config in list_dialects()]

    parser = argparse.ArgumentParser(prog="erd", description="ER diagram modeling and DDL generation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", help="Path to settings YAML (default: ./erd.yaml when present)")
    sub = parser.add_subparsers(dest="command", required=True)

    init_parser = sub.add_parser("init", help="Create settings and an empty diagram snapshot")
    init_parser.add_argument("path", nargs="?", default=".", help="Target directory")
    init_parser.add_argument("--name", default=DEFAULT_SNAPSHOT, help="Snapshot file name")
    init_parser.add_argument("--dialect", choices=dialect_ids, help="Dialect of the new diagram")
    init_parser.add_argument("--example", action="store_true", help="Include a users/orders starter schema")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing files")
    init_parser.set_defaults(func=cmd_init)

    validate_parser = sub.add_parser("validate", help="Validate a snapshot with schema + lint rules")
    validate_parser.add_argument("snapshot", help="Path to diagram snapshot (JSON or YAML)")
    validate_parser.add_argument("--dialect", choices=dialect_ids, help="Lint against this dialect")
    validate_parser.add_argument("--output-json", action="store_true", help="Print issues as JSON")
    validate_parser.set_defaults(func=cmd_validate)

    generate_parser = sub.add_parser("generate", help="Generate artifacts from a snapshot")
    generate_sub = generate_parser.add_subparsers(dest="generate_command", required=True)

    gen_sql_parser = generate_sub.add_parser("sql", help="Generate SQL DDL")
    gen_sql_parser.add_argument("snapshot", help="Path to diagram snapshot")
    gen_sql_parser.add_argument("--dialect", choices=dialect_ids, help="Target dialect (default: the diagram's)")
    gen_sql_parser.add_argument("--out", help="Output SQL file path")
    gen_sql_parser.set_defaults(func=cmd_generate_sql)

    dialects_parser = sub.add_parser("dialects", help="List supported dialects")
    dialects_parser.add_argument("--output-json", action="store_true", help="Print as JSON")
    dialects_parser.set_defaults(func=cmd_dialects)

    types_parser = sub.add_parser("types", help="List the data types of a dialect")
    types_parser.add_argument("dialect", help="Dialect id")
    types_parser.add_argument("--output-json", action="store_true", help="Print as JSON")
    types_parser.set_defaults(func=cmd_types)

    stats_parser = sub.add_parser("stats", help="Summarize a snapshot")
    stats_parser.add_argument("snapshot", help="Path to diagram snapshot")
    stats_parser.add_argument("--output-json", action="store_true", help="Print as JSON")
    stats_parser.set_defaults(func=cmd_stats)

    fmt_parser = sub.add_parser("fmt", help="Rewrite a snapshot in canonical form")
    fmt_parser.add_argument("snapshot", help="Path to diagram snapshot")
    fmt_parser.add_argument("--write", action="store_true", help="Rewrite the file in place")
    fmt_parser.add_argument("--out", help="Write the formatted snapshot to this path")
    fmt_parser.add_argument("--format", choices=["json", "yaml"], help="Output format when printing")
    fmt_parser.set_defaults(func=cmd_fmt)

    completion_parser = sub.add_parser("completion", help="Generate shell completion script")
    completion_parser.add_argument("shell", choices=["bash", "zsh", "fish"], help="Shell type")
    completion_parser.set_defaults(func=cmd_completion)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        args.settings = load_settings(args.config)
        return args.func(args)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
