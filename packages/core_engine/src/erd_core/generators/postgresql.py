from typing import Optional

from erd_core.generators.base import BaseGenerator
from erd_core.model import Table, TableIndex


class PostgreSQLGenerator(BaseGenerator):
    dialect_id = "postgresql"

    def index_statement(self, table: Table, index: TableIndex, index_type: Optional[str]) -> str:
        keyword = "UNIQUE INDEX" if index.unique else "INDEX"
        columns = ", ".join(self.q(name) for name in index.fields)
        using = f" USING {index_type}" if index_type else ""
        return (
            f"CREATE {keyword} {self.q(self.index_name(table, index))} "
            f"ON {self.qualified(table.name)}{using} ({columns});"
        )
