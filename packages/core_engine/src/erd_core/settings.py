from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from jsonschema import Draft202012Validator

DEFAULT_SETTINGS_FILE = "erd.yaml"

SETTINGS_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "dialect": {
            "type": "string",
            "enum": ["mysql", "mariadb", "postgresql", "oracle", "mssql"],
        },
        "history_limit": {"type": "integer", "minimum": 2},
        "if_not_exists": {"type": "boolean"},
        "schema": {"type": ["string", "null"]},
        "engine": {"type": ["string", "null"]},
        "charset": {"type": ["string", "null"]},
        "collation": {"type": ["string", "null"]},
    },
}


@dataclass
class Settings:
    dialect: str = "mysql"
    history_limit: int = 50
    if_not_exists: bool = True
    schema: Optional[str] = None
    engine: Optional[str] = None
    charset: Optional[str] = None
    collation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _settings_errors(data: Dict[str, Any]) -> str:
    validator = Draft202012Validator(SETTINGS_SCHEMA)
    messages = []
    for error in sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path)):
        location = "/".join(str(part) for part in error.absolute_path) or "/"
        messages.append(f"{location}: {error.message}")
    return "; ".join(messages)


def load_settings(path: Optional[str] = None) -> Settings:
    if path is None:
        candidate = Path.cwd() / DEFAULT_SETTINGS_FILE
        if not candidate.exists():
            return Settings()
        settings_path = candidate
    else:
        settings_path = Path(path)
        if not settings_path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

    with settings_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ValueError("Settings YAML must parse to an object/map at root.")

    errors = _settings_errors(data)
    if errors:
        raise ValueError(f"Invalid settings in {settings_path}: {errors}")

    return Settings(**data)
