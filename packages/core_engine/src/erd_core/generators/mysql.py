from typing import List

from erd_core.generators.base import BaseGenerator
from erd_core.model import Table


class MySQLGenerator(BaseGenerator):
    """MySQL DDL: inline indexes and comments, table options after the body."""

    dialect_id = "mysql"

    def table_options(self, table: Table) -> List[str]:
        defaults = self.config.table_options
        engine = self.settings.engine or defaults.get("engine")
        charset = self.settings.charset or defaults.get("charset")
        collation = self.settings.collation or defaults.get("collation")

        options = []
        if engine:
            options.append(f"ENGINE={engine}")
        if charset:
            options.append(f"DEFAULT CHARSET={charset}")
        if collation:
            options.append(f"COLLATE={collation}")
        if table.comment:
            options.append(f"COMMENT={self.config.quote_string(table.comment)}")
        return options

    def table_suffix(self, table: Table) -> str:
        options = self.table_options(table)
        if not options:
            return ""
        return " " + " ".join(options)


class MariaDBGenerator(MySQLGenerator):
    dialect_id = "mariadb"
