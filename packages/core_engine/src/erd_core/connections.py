import logging
from typing import Optional, Tuple

from erd_core.editor import DiagramEditor
from erd_core.model import NO_ACTION, ONE_TO_MANY, Relationship

logger = logging.getLogger(__name__)

IDLE = "idle"
PENDING = "pending"

Endpoint = Tuple[str, str]


class RelationshipBuilder:
    """Two-phase creation of a relationship: pick a source field, then a target.

    ``end_connection`` always returns the builder to idle. Self-loops on the
    same field and edges that already join the same endpoint pair (in either
    direction) are rejected by returning ``None``.
    """

    def __init__(self, editor: DiagramEditor) -> None:
        self.editor = editor
        self.state = IDLE
        self.source: Optional[Endpoint] = None
        self.target: Optional[Endpoint] = None

    def is_connecting(self) -> bool:
        return self.state == PENDING

    def start_connection(self, table_id: str, field_id: str) -> None:
        self.source = (table_id, field_id)
        self.target = None
        self.state = PENDING

    def cancel_connection(self) -> None:
        self.source = None
        self.target = None
        self.state = IDLE

    def end_connection(self, table_id: str, field_id: str) -> Optional[Relationship]:
        source = self.source
        target = (table_id, field_id)
        self.cancel_connection()

        if source is None:
            logger.debug("end_connection called with no pending source")
            return None
        if source == target:
            logger.debug("Rejecting self-loop on %s.%s", *source)
            return None
        if self.editor.diagram.find_relationship_between(source, target) is not None:
            logger.debug("Rejecting duplicate relationship %s <-> %s", source, target)
            return None

        relationship = Relationship(
            start_table_id=source[0],
            start_field_id=source[1],
            end_table_id=target[0],
            end_field_id=target[1],
            cardinality=ONE_TO_MANY,
            update_constraint=NO_ACTION,
            delete_constraint=NO_ACTION,
        )
        return self.editor.add_relationship(relationship)
