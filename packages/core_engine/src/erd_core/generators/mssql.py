from typing import Optional

from erd_core.generators.base import BaseGenerator
from erd_core.model import Table, TableIndex

_INDEX_KINDS = {
    "CLUSTERED": "CLUSTERED",
    "NONCLUSTERED": "NONCLUSTERED",
    "COLUMNSTORE": "NONCLUSTERED COLUMNSTORE",
    "SPATIAL": "SPATIAL",
    "XML": "PRIMARY XML",
}


class SQLServerGenerator(BaseGenerator):
    """T-SQL DDL with ``GO`` batches and ``sp_addextendedproperty`` comments."""

    dialect_id = "mssql"

    def index_statement(self, table: Table, index: TableIndex, index_type: Optional[str]) -> str:
        kind = _INDEX_KINDS.get(index_type or "", "NONCLUSTERED")
        if index.unique and kind in ("CLUSTERED", "NONCLUSTERED"):
            kind = f"UNIQUE {kind}"
        columns = ", ".join(self.q(name) for name in index.fields)
        return (
            f"CREATE {kind} INDEX {self.q(self.index_name(table, index))}\n"
            f"\tON {self.qualified(table.name)} ({columns});"
        )
