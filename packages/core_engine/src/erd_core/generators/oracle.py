from typing import List, Optional

from erd_core.generators.base import BaseGenerator, note_line
from erd_core.model import Table, TableIndex


class OracleGenerator(BaseGenerator):
    """Oracle 12c+ DDL.

    Identity columns replace auto-increment, comments go through
    ``COMMENT ON`` and foreign keys carry no ``ON UPDATE`` clause.
    """

    dialect_id = "oracle"

    def checked_index_type(self, table: Table, index: TableIndex, notes: List[str]) -> Optional[str]:
        index_type = super().checked_index_type(table, index, notes)
        if index.unique and index_type == "BITMAP":
            notes.append(
                note_line(
                    f"{self.config.name} does not support UNIQUE BITMAP indexes; "
                    f"{self.index_name(table, index)} uses the default type"
                )
            )
            return None
        return index_type

    def index_statement(self, table: Table, index: TableIndex, index_type: Optional[str]) -> str:
        columns = ", ".join(self.q(name) for name in index.fields)
        if index.unique:
            keyword = "UNIQUE INDEX"
        elif index_type == "BITMAP":
            keyword = "BITMAP INDEX"
        else:
            keyword = "INDEX"
        return (
            f"CREATE {keyword} {self.q(self.index_name(table, index))} "
            f"ON {self.qualified(table.name)} ({columns});"
        )
