"""Mutation API over a single diagram aggregate.

Every structural change goes through ``DiagramEditor``: the pre-mutation
diagram is pushed onto the history, then the change is applied. Lookups
happen before anything is recorded, so an operation on an unknown id leaves
both the diagram and the history untouched and reports ``None``/``False``.
"""

import logging
from dataclasses import fields as dataclass_fields
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, TypeVar

from erd_core.dialects import get_dialect, is_known_dialect
from erd_core.history import HistoryManager
from erd_core.model import (
    Area,
    Diagram,
    Note,
    Relationship,
    Table,
    TableField,
    TableIndex,
    create_default_table,
    create_empty_diagram,
    new_id,
    next_field_name,
)
from erd_core.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TABLE_PROTECTED = {"id", "fields", "indexes"}
_ENTITY_PROTECTED = {"id"}


def _reordered(items: List[T], ordered_ids: Iterable[str]) -> List[T]:
    by_id = {getattr(item, "id"): item for item in items}
    head: List[T] = []
    seen: Set[str] = set()
    for item_id in ordered_ids:
        if item_id in by_id and item_id not in seen:
            head.append(by_id[item_id])
            seen.add(item_id)
    tail = [item for item in items if getattr(item, "id") not in seen]
    return head + tail


def _same_order(left: Sequence[Any], right: Sequence[Any]) -> bool:
    return [item.id for item in left] == [item.id for item in right]


class DiagramEditor:
    def __init__(
        self,
        diagram: Optional[Diagram] = None,
        history: Optional[HistoryManager] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.diagram = diagram if diagram is not None else create_empty_diagram(self.settings.dialect)
        self.history = history if history is not None else HistoryManager(self.settings.history_limit)
        self._dirty = False

    # -- bookkeeping -------------------------------------------------------

    def _record(self) -> None:
        self.history.push(self.diagram)
        self._dirty = True

    def _accepted_updates(self, entity: Any, updates: Dict[str, Any], protected: Set[str]) -> Dict[str, Any]:
        known = {item.name for item in dataclass_fields(entity)}
        accepted: Dict[str, Any] = {}
        for key, value in updates.items():
            if key in protected or key not in known:
                logger.warning("Ignoring update of %r on %s", key, type(entity).__name__)
                continue
            accepted[key] = value
        return accepted

    @staticmethod
    def _apply(entity: Any, updates: Dict[str, Any]) -> None:
        for key, value in updates.items():
            setattr(entity, key, list(value) if isinstance(value, (list, tuple)) else value)

    def _missing(self, kind: str, item_id: str) -> None:
        logger.debug("%s %s not found; nothing to do", kind, item_id)

    def is_dirty(self) -> bool:
        return self._dirty

    # -- diagram -----------------------------------------------------------

    def set_title(self, title: str) -> None:
        self._record()
        self.diagram.title = title

    def set_dialect(self, dialect: str) -> str:
        if not is_known_dialect(dialect):
            logger.warning("Unknown dialect %r; using %s", dialect, get_dialect(dialect).id)
        resolved = get_dialect(dialect).id
        self._record()
        self.diagram.dialect = resolved
        return resolved

    def load_diagram(self, diagram: Diagram) -> None:
        self.diagram = diagram.copy()
        self.history.clear()
        self._dirty = False

    def export_diagram(self) -> Diagram:
        return self.diagram.copy()

    def reset(self) -> None:
        self.diagram = create_empty_diagram(self.settings.dialect)
        self.history.clear()
        self._dirty = False

    # -- lookups -----------------------------------------------------------

    def get_table(self, table_id: str) -> Optional[Table]:
        return self.diagram.get_table(table_id)

    def get_field(self, table_id: str, field_id: str) -> Optional[TableField]:
        return self.diagram.get_field(table_id, field_id)

    def get_relationship(self, relationship_id: str) -> Optional[Relationship]:
        return self.diagram.get_relationship(relationship_id)

    # -- tables ------------------------------------------------------------

    def add_table(
        self,
        table: Optional[Table] = None,
        x: Optional[float] = None,
        y: Optional[float] = None,
    ) -> Table:
        if table is None:
            table = create_default_table(100 if x is None else x, 100 if y is None else y)
        elif self.diagram.get_table(table.id) is not None:
            table = replace(table, id=new_id())
        self._record()
        self.diagram.tables.append(table)
        return table

    def update_table(self, table_id: str, updates: Dict[str, Any]) -> Optional[Table]:
        table = self.diagram.get_table(table_id)
        if table is None:
            self._missing("Table", table_id)
            return None
        accepted = self._accepted_updates(table, updates, _TABLE_PROTECTED)
        if not accepted:
            return table
        self._record()
        self._apply(table, accepted)
        return table

    def delete_table(self, table_id: str) -> bool:
        if self.diagram.get_table(table_id) is None:
            self._missing("Table", table_id)
            return False
        self._record()
        self.diagram.tables = [t for t in self.diagram.tables if t.id != table_id]
        self.diagram.relationships = [
            rel for rel in self.diagram.relationships if not rel.touches_table(table_id)
        ]
        return True

    def move_table(self, table_id: str, x: float, y: float) -> Optional[Table]:
        table = self.diagram.get_table(table_id)
        if table is None:
            self._missing("Table", table_id)
            return None
        table.x = x
        table.y = y
        self._dirty = True
        return table

    def resize_table(self, table_id: str, width: float, height: float) -> Optional[Table]:
        table = self.diagram.get_table(table_id)
        if table is None:
            self._missing("Table", table_id)
            return None
        table.width = width
        table.height = height
        self._dirty = True
        return table

    def reorder_tables(self, table_ids: Sequence[str]) -> bool:
        ordered = _reordered(self.diagram.tables, table_ids)
        if not _same_order(ordered, self.diagram.tables):
            self._record()
            self.diagram.tables = ordered
        return True

    # -- fields ------------------------------------------------------------

    def add_field(self, table_id: str, field: Optional[TableField] = None) -> Optional[TableField]:
        table = self.diagram.get_table(table_id)
        if table is None:
            self._missing("Table", table_id)
            return None
        if field is None:
            field = TableField(name=next_field_name(table))
        elif table.get_field(field.id) is not None:
            field = replace(field, id=new_id())
        self._record()
        table.fields.append(field)
        return field

    def update_field(self, table_id: str, field_id: str, updates: Dict[str, Any]) -> Optional[TableField]:
        table = self.diagram.get_table(table_id)
        field = table.get_field(field_id) if table is not None else None
        if table is None or field is None:
            self._missing("Field", field_id)
            return None
        accepted = self._accepted_updates(field, updates, _ENTITY_PROTECTED)
        if not accepted:
            return field
        if "default" in accepted and "default_kind" not in accepted:
            accepted["default_kind"] = None

        self._record()
        old_name = field.name
        self._apply(field, accepted)
        if field.name != old_name:
            for index in table.indexes:
                index.fields = [field.name if name == old_name else name for name in index.fields]
        return field

    def delete_field(self, table_id: str, field_id: str) -> bool:
        table = self.diagram.get_table(table_id)
        field = table.get_field(field_id) if table is not None else None
        if table is None or field is None:
            self._missing("Field", field_id)
            return False

        self._record()
        table.fields = [f for f in table.fields if f.id != field_id]
        if all(f.name != field.name for f in table.fields):
            for index in table.indexes:
                index.fields = [name for name in index.fields if name != field.name]
        self.diagram.relationships = [
            rel
            for rel in self.diagram.relationships
            if not rel.touches_field(table_id, field_id)
        ]
        return True

    def reorder_fields(self, table_id: str, field_ids: Sequence[str]) -> bool:
        table = self.diagram.get_table(table_id)
        if table is None:
            self._missing("Table", table_id)
            return False
        ordered = _reordered(table.fields, field_ids)
        if not _same_order(ordered, table.fields):
            self._record()
            table.fields = ordered
        return True

    # -- indexes -----------------------------------------------------------

    def add_index(self, table_id: str, index: Optional[TableIndex] = None) -> Optional[TableIndex]:
        table = self.diagram.get_table(table_id)
        if table is None:
            self._missing("Table", table_id)
            return None
        if index is None:
            index = TableIndex()
        elif table.get_index(index.id) is not None:
            index = replace(index, id=new_id())
        self._record()
        table.indexes.append(index)
        return index

    def update_index(self, table_id: str, index_id: str, updates: Dict[str, Any]) -> Optional[TableIndex]:
        table = self.diagram.get_table(table_id)
        index = table.get_index(index_id) if table is not None else None
        if table is None or index is None:
            self._missing("Index", index_id)
            return None
        accepted = self._accepted_updates(index, updates, _ENTITY_PROTECTED)
        if not accepted:
            return index
        self._record()
        self._apply(index, accepted)
        return index

    def delete_index(self, table_id: str, index_id: str) -> bool:
        table = self.diagram.get_table(table_id)
        if table is None or table.get_index(index_id) is None:
            self._missing("Index", index_id)
            return False
        self._record()
        table.indexes = [i for i in table.indexes if i.id != index_id]
        return True

    def reorder_indexes(self, table_id: str, index_ids: Sequence[str]) -> bool:
        table = self.diagram.get_table(table_id)
        if table is None:
            self._missing("Table", table_id)
            return False
        ordered = _reordered(table.indexes, index_ids)
        if not _same_order(ordered, table.indexes):
            self._record()
            table.indexes = ordered
        return True

    # -- relationships -----------------------------------------------------

    def add_relationship(self, relationship: Relationship) -> Optional[Relationship]:
        if self.diagram.resolve_endpoints(relationship) is None:
            logger.warning("Refusing relationship %s with unresolved endpoints", relationship.id)
            return None
        if self.diagram.get_relationship(relationship.id) is not None:
            relationship = replace(relationship, id=new_id())
        self._record()
        self.diagram.relationships.append(relationship)
        return relationship

    def update_relationship(self, relationship_id: str, updates: Dict[str, Any]) -> Optional[Relationship]:
        rel = self.diagram.get_relationship(relationship_id)
        if rel is None:
            self._missing("Relationship", relationship_id)
            return None
        accepted = self._accepted_updates(rel, updates, _ENTITY_PROTECTED)
        if not accepted:
            return rel
        candidate = replace(rel, **accepted)
        if self.diagram.resolve_endpoints(candidate) is None:
            logger.warning("Refusing update of relationship %s to unresolved endpoints", relationship_id)
            return None
        self._record()
        self._apply(rel, accepted)
        return rel

    def delete_relationship(self, relationship_id: str) -> bool:
        if self.diagram.get_relationship(relationship_id) is None:
            self._missing("Relationship", relationship_id)
            return False
        self._record()
        self.diagram.relationships = [r for r in self.diagram.relationships if r.id != relationship_id]
        return True

    def reorder_relationships(self, relationship_ids: Sequence[str]) -> bool:
        ordered = _reordered(self.diagram.relationships, relationship_ids)
        if not _same_order(ordered, self.diagram.relationships):
            self._record()
            self.diagram.relationships = ordered
        return True

    # -- notes -------------------------------------------------------------

    def add_note(self, note: Optional[Note] = None, x: Optional[float] = None, y: Optional[float] = None) -> Note:
        if note is None:
            note = Note()
            if x is not None:
                note.x = x
            if y is not None:
                note.y = y
        elif self.diagram.get_note(note.id) is not None:
            note = replace(note, id=new_id())
        self._record()
        self.diagram.notes.append(note)
        return note

    def update_note(self, note_id: str, updates: Dict[str, Any]) -> Optional[Note]:
        note = self.diagram.get_note(note_id)
        if note is None:
            self._missing("Note", note_id)
            return None
        accepted = self._accepted_updates(note, updates, _ENTITY_PROTECTED)
        if not accepted:
            return note
        self._record()
        self._apply(note, accepted)
        return note

    def delete_note(self, note_id: str) -> bool:
        if self.diagram.get_note(note_id) is None:
            self._missing("Note", note_id)
            return False
        self._record()
        self.diagram.notes = [n for n in self.diagram.notes if n.id != note_id]
        return True

    def reorder_notes(self, note_ids: Sequence[str]) -> bool:
        ordered = _reordered(self.diagram.notes, note_ids)
        if not _same_order(ordered, self.diagram.notes):
            self._record()
            self.diagram.notes = ordered
        return True

    # -- areas -------------------------------------------------------------

    def add_area(self, area: Optional[Area] = None, x: Optional[float] = None, y: Optional[float] = None) -> Area:
        if area is None:
            area = Area()
            if x is not None:
                area.x = x
            if y is not None:
                area.y = y
        elif self.diagram.get_area(area.id) is not None:
            area = replace(area, id=new_id())
        self._record()
        self.diagram.areas.append(area)
        return area

    def update_area(self, area_id: str, updates: Dict[str, Any]) -> Optional[Area]:
        area = self.diagram.get_area(area_id)
        if area is None:
            self._missing("Area", area_id)
            return None
        accepted = self._accepted_updates(area, updates, _ENTITY_PROTECTED)
        if not accepted:
            return area
        self._record()
        self._apply(area, accepted)
        return area

    def delete_area(self, area_id: str) -> bool:
        if self.diagram.get_area(area_id) is None:
            self._missing("Area", area_id)
            return False
        self._record()
        self.diagram.areas = [a for a in self.diagram.areas if a.id != area_id]
        return True

    def reorder_areas(self, area_ids: Sequence[str]) -> bool:
        ordered = _reordered(self.diagram.areas, area_ids)
        if not _same_order(ordered, self.diagram.areas):
            self._record()
            self.diagram.areas = ordered
        return True

    # -- history -----------------------------------------------------------

    def undo(self) -> bool:
        restored = self.history.undo(self.diagram)
        if restored is None:
            return False
        self.diagram = restored
        self._dirty = True
        return True

    def redo(self) -> bool:
        restored = self.history.redo()
        if restored is None:
            return False
        self.diagram = restored
        self._dirty = True
        return True

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def clear_history(self) -> None:
        self.history.clear()
