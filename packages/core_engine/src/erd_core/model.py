"""In-memory ER diagram model.

A ``Diagram`` owns ordered lists of tables, relationships, notes and areas.
Tables own their fields and indexes. Relationships point at (table, field)
endpoints by id; index field lists refer to field *names*.

Every entity converts to and from the camelCase snapshot document with
``to_dict`` / ``from_dict`` so a snapshot round-trips losslessly.
"""

import uuid
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

ONE_TO_ONE = "one_to_one"
ONE_TO_MANY = "one_to_many"
MANY_TO_ONE = "many_to_one"
CARDINALITIES = (ONE_TO_ONE, ONE_TO_MANY, MANY_TO_ONE)

NO_ACTION = "NO ACTION"
CONSTRAINT_ACTIONS = ("NO ACTION", "RESTRICT", "CASCADE", "SET NULL", "SET DEFAULT")

DEFAULT_DIALECT = "mysql"
DEFAULT_TITLE = "Untitled Diagram"

TABLE_COLORS = [
    "#175e7a",
    "#2a6f4e",
    "#7c3aed",
    "#dc2626",
    "#d97706",
    "#0891b2",
    "#be185d",
    "#4b5563",
]


def new_id() -> str:
    return str(uuid.uuid4())


def _put_optional(out: Dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        out[key] = value


def _text(data: Dict[str, Any], key: str, default: str) -> str:
    """String value of ``key``; ``default`` only when the key is absent or null."""
    value = data.get(key)
    return default if value is None else str(value)


@dataclass
class TableField:
    id: str = field(default_factory=new_id)
    name: str = ""
    type: str = "INT"
    size: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    default: str = ""
    default_kind: Optional[str] = None
    check: str = ""
    primary: bool = False
    unique: bool = False
    not_null: bool = False
    increment: bool = False
    unsigned: bool = False
    is_array: bool = False
    comment: str = ""
    values: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "name": self.name, "type": self.type}
        _put_optional(out, "size", self.size)
        _put_optional(out, "precision", self.precision)
        _put_optional(out, "scale", self.scale)
        out["default"] = self.default
        _put_optional(out, "defaultKind", self.default_kind)
        out.update(
            {
                "check": self.check,
                "primary": self.primary,
                "unique": self.unique,
                "notNull": self.not_null,
                "increment": self.increment,
                "unsigned": self.unsigned,
                "isArray": self.is_array,
                "comment": self.comment,
            }
        )
        if self.values:
            out["values"] = list(self.values)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableField":
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name", "")),
            type=str(data.get("type", "INT")),
            size=data.get("size"),
            precision=data.get("precision"),
            scale=data.get("scale"),
            default=str(data.get("default") or ""),
            default_kind=data.get("defaultKind"),
            check=str(data.get("check") or ""),
            primary=bool(data.get("primary", False)),
            unique=bool(data.get("unique", False)),
            not_null=bool(data.get("notNull", False)),
            increment=bool(data.get("increment", False)),
            unsigned=bool(data.get("unsigned", False)),
            is_array=bool(data.get("isArray", False)),
            comment=str(data.get("comment") or ""),
            values=[str(v) for v in data.get("values") or []],
        )


@dataclass
class TableIndex:
    id: str = field(default_factory=new_id)
    name: str = ""
    unique: bool = False
    fields: List[str] = field(default_factory=list)
    index_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "unique": self.unique,
            "fields": list(self.fields),
        }
        _put_optional(out, "indexType", self.index_type)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableIndex":
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name") or ""),
            unique=bool(data.get("unique", False)),
            fields=[str(f) for f in data.get("fields") or []],
            index_type=data.get("indexType", data.get("type")),
        )


@dataclass
class Table:
    id: str = field(default_factory=new_id)
    name: str = "new_table"
    x: float = 100
    y: float = 100
    width: float = 200
    height: float = 150
    fields: List[TableField] = field(default_factory=list)
    indexes: List[TableIndex] = field(default_factory=list)
    comment: str = ""
    color: str = TABLE_COLORS[0]
    locked: bool = False
    hidden: bool = False

    def get_field(self, field_id: str) -> Optional[TableField]:
        for item in self.fields:
            if item.id == field_id:
                return item
        return None

    def get_index(self, index_id: str) -> Optional[TableIndex]:
        for item in self.indexes:
            if item.id == index_id:
                return item
        return None

    def primary_key_fields(self) -> List[TableField]:
        return [f for f in self.fields if f.primary]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "fields": [f.to_dict() for f in self.fields],
            "indexes": [i.to_dict() for i in self.indexes],
            "comment": self.comment,
            "color": self.color,
            "locked": self.locked,
            "hidden": self.hidden,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Table":
        indexes = data.get("indexes")
        if indexes is None:
            indexes = data.get("indices") or []
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name", "")),
            x=data.get("x", 100),
            y=data.get("y", 100),
            width=data.get("width", 200),
            height=data.get("height", 150),
            fields=[TableField.from_dict(f) for f in data.get("fields") or []],
            indexes=[TableIndex.from_dict(i) for i in indexes],
            comment=str(data.get("comment") or ""),
            color=_text(data, "color", TABLE_COLORS[0]),
            locked=bool(data.get("locked", False)),
            hidden=bool(data.get("hidden", False)),
        )


@dataclass
class Relationship:
    start_table_id: str
    start_field_id: str
    end_table_id: str
    end_field_id: str
    id: str = field(default_factory=new_id)
    name: str = ""
    cardinality: str = ONE_TO_MANY
    update_constraint: str = NO_ACTION
    delete_constraint: str = NO_ACTION

    @property
    def start(self) -> Tuple[str, str]:
        return (self.start_table_id, self.start_field_id)

    @property
    def end(self) -> Tuple[str, str]:
        return (self.end_table_id, self.end_field_id)

    def touches_table(self, table_id: str) -> bool:
        return self.start_table_id == table_id or self.end_table_id == table_id

    def touches_field(self, table_id: str, field_id: str) -> bool:
        return (table_id, field_id) in (self.start, self.end)

    def connects(self, a: Tuple[str, str], b: Tuple[str, str]) -> bool:
        """True when this edge joins endpoints ``a`` and ``b`` in either direction."""
        return (self.start, self.end) in ((a, b), (b, a))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "startTableId": self.start_table_id,
            "startFieldId": self.start_field_id,
            "endTableId": self.end_table_id,
            "endFieldId": self.end_field_id,
            "cardinality": self.cardinality,
            "updateConstraint": self.update_constraint,
            "deleteConstraint": self.delete_constraint,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Relationship":
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name") or ""),
            start_table_id=str(data.get("startTableId", "")),
            start_field_id=str(data.get("startFieldId", "")),
            end_table_id=str(data.get("endTableId", "")),
            end_field_id=str(data.get("endFieldId", "")),
            cardinality=_text(data, "cardinality", ONE_TO_MANY),
            update_constraint=_text(data, "updateConstraint", NO_ACTION),
            delete_constraint=_text(data, "deleteConstraint", NO_ACTION),
        )


@dataclass
class Note:
    id: str = field(default_factory=new_id)
    x: float = 100
    y: float = 100
    title: str = "Note"
    content: str = ""
    color: str = "#fef3c7"
    width: float = 200
    height: float = 100
    locked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "title": self.title,
            "content": self.content,
            "color": self.color,
            "width": self.width,
            "height": self.height,
            "locked": self.locked,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        return cls(
            id=str(data.get("id") or new_id()),
            x=data.get("x", 100),
            y=data.get("y", 100),
            title=_text(data, "title", "Note"),
            content=str(data.get("content") or ""),
            color=_text(data, "color", "#fef3c7"),
            width=data.get("width", 200),
            height=data.get("height", 100),
            locked=bool(data.get("locked", False)),
        )


@dataclass
class Area:
    id: str = field(default_factory=new_id)
    name: str = "Area"
    x: float = 50
    y: float = 50
    width: float = 400
    height: float = 300
    color: str = "#e5e7eb"
    locked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "color": self.color,
            "locked": self.locked,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Area":
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name") or ""),
            x=data.get("x", 50),
            y=data.get("y", 50),
            width=data.get("width", 400),
            height=data.get("height", 300),
            color=_text(data, "color", "#e5e7eb"),
            locked=bool(data.get("locked", False)),
        )


@dataclass
class Diagram:
    title: str = DEFAULT_TITLE
    dialect: str = DEFAULT_DIALECT
    tables: List[Table] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    areas: List[Area] = field(default_factory=list)

    def get_table(self, table_id: str) -> Optional[Table]:
        for table in self.tables:
            if table.id == table_id:
                return table
        return None

    def get_field(self, table_id: str, field_id: str) -> Optional[TableField]:
        table = self.get_table(table_id)
        if table is None:
            return None
        return table.get_field(field_id)

    def get_relationship(self, relationship_id: str) -> Optional[Relationship]:
        for rel in self.relationships:
            if rel.id == relationship_id:
                return rel
        return None

    def get_note(self, note_id: str) -> Optional[Note]:
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def get_area(self, area_id: str) -> Optional[Area]:
        for area in self.areas:
            if area.id == area_id:
                return area
        return None

    def find_relationship_between(
        self, a: Tuple[str, str], b: Tuple[str, str]
    ) -> Optional[Relationship]:
        for rel in self.relationships:
            if rel.connects(a, b):
                return rel
        return None

    def resolve_endpoints(
        self, rel: Relationship
    ) -> Optional[Tuple[Table, TableField, Table, TableField]]:
        """Resolve both ends of ``rel``; ``None`` when either side is stale."""
        start_table = self.get_table(rel.start_table_id)
        end_table = self.get_table(rel.end_table_id)
        if start_table is None or end_table is None:
            return None
        start_field = start_table.get_field(rel.start_field_id)
        end_field = end_table.get_field(rel.end_field_id)
        if start_field is None or end_field is None:
            return None
        return start_table, start_field, end_table, end_field

    def copy(self) -> "Diagram":
        return deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "dialect": self.dialect,
            "tables": [t.to_dict() for t in self.tables],
            "relationships": [r.to_dict() for r in self.relationships],
            "notes": [n.to_dict() for n in self.notes],
            "areas": [a.to_dict() for a in self.areas],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Diagram":
        return cls(
            title=_text(data, "title", DEFAULT_TITLE),
            dialect=_text(data, "dialect", _text(data, "database", DEFAULT_DIALECT)),
            tables=[Table.from_dict(t) for t in data.get("tables") or []],
            relationships=[Relationship.from_dict(r) for r in data.get("relationships") or []],
            notes=[Note.from_dict(n) for n in data.get("notes") or []],
            areas=[Area.from_dict(a) for a in data.get("areas") or []],
        )


def create_default_field(name: str = "") -> TableField:
    return TableField(name=name)


def create_default_table(x: float = 100, y: float = 100) -> Table:
    id_field = TableField(
        name="id",
        type="INT",
        primary=True,
        not_null=True,
        increment=True,
    )
    return Table(x=x, y=y, fields=[id_field])


def create_empty_diagram(dialect: str = DEFAULT_DIALECT) -> Diagram:
    return Diagram(dialect=dialect)


def next_field_name(table: Table) -> str:
    """First free ``field_<n>`` name, starting after the current field count."""
    existing = {f.name for f in table.fields}
    number = len(table.fields) + 1
    candidate = f"field_{number}"
    while candidate in existing:
        number += 1
        candidate = f"field_{number}"
    return candidate
