import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import Draft202012Validator

from erd_core.issues import Issue
from erd_core.model import Diagram

SCHEMA_FILE = Path(__file__).with_name("diagram.schema.json")
FILE_VERSION = "1.0"

_WRAPPER_KEYS = {"author", "project", "date", "version"}


def load_snapshot_schema(schema_path: Optional[str] = None) -> Dict[str, Any]:
    path = Path(schema_path) if schema_path else SCHEMA_FILE
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def _to_json_path(parts: List[Any]) -> str:
    if not parts:
        return "/"
    return "/" + "/".join(str(part) for part in parts)


def snapshot_issues(data: Dict[str, Any], schema: Optional[Dict[str, Any]] = None) -> List[Issue]:
    validator = Draft202012Validator(schema or load_snapshot_schema())
    issues: List[Issue] = []
    for error in sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path)):
        issues.append(
            Issue(
                severity="error",
                code="SCHEMA_VALIDATION_FAILED",
                message=error.message,
                path=_to_json_path(list(error.absolute_path)),
            )
        )
    return issues


def unwrap_snapshot(document: Dict[str, Any]) -> Dict[str, Any]:
    """Return the diagram document from either a bare snapshot or a file wrapper."""
    data = document.get("data")
    if isinstance(data, dict) and (_WRAPPER_KEYS & set(document) or "tables" not in document):
        unwrapped = dict(data)
        if "title" not in unwrapped and document.get("title"):
            unwrapped["title"] = document["title"]
        return unwrapped
    return document


def read_snapshot_document(path: str) -> Dict[str, Any]:
    snapshot_path = Path(path)
    if not snapshot_path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    with snapshot_path.open("r", encoding="utf-8") as handle:
        if snapshot_path.suffix.lower() == ".json":
            try:
                document = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Snapshot {path} is not valid JSON: {exc}") from exc
        else:
            document = yaml.safe_load(handle)

    if not isinstance(document, dict):
        raise ValueError("Snapshot must parse to an object/map at root.")
    return unwrap_snapshot(document)


def load_snapshot(path: str) -> Diagram:
    data = read_snapshot_document(path)
    issues = snapshot_issues(data)
    if issues:
        details = "; ".join(f"{issue.path}: {issue.message}" for issue in issues)
        raise ValueError(f"Invalid snapshot {path}: {details}")
    return Diagram.from_dict(data)


def diagram_file(diagram: Diagram, author: str = "", project: str = "") -> Dict[str, Any]:
    return {
        "author": author,
        "project": project,
        "title": diagram.title,
        "date": date.today().isoformat(),
        "version": FILE_VERSION,
        "data": diagram.to_dict(),
    }


def dump_snapshot(diagram: Diagram, fmt: str = "json", wrapper: Optional[Dict[str, Any]] = None) -> str:
    payload = wrapper if wrapper is not None else diagram.to_dict()
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False)
    if fmt == "json":
        return json.dumps(payload, indent=2) + "\n"
    raise ValueError(f"Unsupported snapshot format: {fmt}")


def snapshot_format(path: str) -> str:
    return "yaml" if Path(path).suffix.lower() in {".yaml", ".yml"} else "json"


def save_snapshot(
    diagram: Diagram,
    path: str,
    author: Optional[str] = None,
    project: Optional[str] = None,
) -> str:
    wrapper = None
    if author is not None or project is not None:
        wrapper = diagram_file(diagram, author or "", project or "")
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dump_snapshot(diagram, snapshot_format(path), wrapper), encoding="utf-8")
    return str(target)
