import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "packages" / "core_engine" / "src"))

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
    next_field_name,
)


def _sample_diagram() -> Diagram:
    users = Table(
        id="t-users",
        name="users",
        comment="App users",
        fields=[
            TableField(id="f-id", name="id", primary=True, not_null=True, increment=True),
            TableField(id="f-email", name="email", type="VARCHAR", size=255, default="a@b.c", default_kind="literal"),
            TableField(id="f-price", name="price", type="DECIMAL", precision=10, scale=2),
        ],
        indexes=[TableIndex(id="i-email", name="", unique=True, fields=["email"], index_type="BTREE")],
    )
    orders = Table(
        id="t-orders",
        name="orders",
        fields=[
            TableField(id="f-oid", name="id", primary=True),
            TableField(id="f-uid", name="user_id"),
        ],
    )
    return Diagram(
        title="Shop",
        dialect="postgresql",
        tables=[users, orders],
        relationships=[
            Relationship(
                id="r-1",
                start_table_id="t-orders",
                start_field_id="f-uid",
                end_table_id="t-users",
                end_field_id="f-id",
                delete_constraint="CASCADE",
            )
        ],
        notes=[Note(id="n-1", title="Todo", content="Add payments")],
        areas=[Area(id="a-1", name="Sales")],
    )


class TestSerialization:
    def test_round_trip_is_lossless(self):
        diagram = _sample_diagram()
        restored = Diagram.from_dict(diagram.to_dict())
        assert restored == diagram

    def test_camel_case_keys(self):
        data = _sample_diagram().to_dict()
        field = data["tables"][0]["fields"][0]
        assert field["notNull"] is True
        assert field["isArray"] is False
        assert data["tables"][0]["indexes"][0]["indexType"] == "BTREE"
        rel = data["relationships"][0]
        assert rel["startTableId"] == "t-orders"
        assert rel["deleteConstraint"] == "CASCADE"

    def test_unset_optionals_are_omitted(self):
        field = TableField(id="x", name="plain").to_dict()
        assert "size" not in field
        assert "precision" not in field
        assert "defaultKind" not in field

    def test_accepts_legacy_key_spellings(self):
        data = _sample_diagram().to_dict()
        data["database"] = data.pop("dialect")
        data["tables"][0]["indices"] = data["tables"][0].pop("indexes")
        restored = Diagram.from_dict(data)
        assert restored.dialect == "postgresql"
        assert restored.tables[0].indexes[0].fields == ["email"]

    def test_empty_strings_survive_round_trip(self):
        diagram = _sample_diagram()
        diagram.title = ""
        diagram.relationships[0].cardinality = ""
        diagram.relationships[0].update_constraint = ""
        assert Diagram.from_dict(diagram.to_dict()) == diagram

    def test_absent_or_null_keys_take_defaults(self):
        restored = Diagram.from_dict({"title": None, "relationships": [{"id": "r-1"}]})
        assert restored.title == "Untitled Diagram"
        assert restored.relationships[0].cardinality == "one_to_many"
        assert restored.relationships[0].delete_constraint == "NO ACTION"


class TestLookups:
    def test_get_field_and_relationship(self):
        diagram = _sample_diagram()
        assert diagram.get_field("t-users", "f-email").name == "email"
        assert diagram.get_field("t-missing", "f-email") is None
        assert diagram.get_relationship("r-1").end_table_id == "t-users"

    def test_relationship_direction_insensitive_lookup(self):
        diagram = _sample_diagram()
        forward = diagram.find_relationship_between(("t-orders", "f-uid"), ("t-users", "f-id"))
        backward = diagram.find_relationship_between(("t-users", "f-id"), ("t-orders", "f-uid"))
        assert forward is backward is diagram.relationships[0]

    def test_resolve_endpoints_detects_stale(self):
        diagram = _sample_diagram()
        assert diagram.resolve_endpoints(diagram.relationships[0]) is not None
        diagram.tables[1].fields.pop()
        assert diagram.resolve_endpoints(diagram.relationships[0]) is None

    def test_copy_is_independent(self):
        diagram = _sample_diagram()
        clone = diagram.copy()
        clone.tables[0].fields[0].name = "changed"
        assert diagram.tables[0].fields[0].name == "id"


class TestFactories:
    def test_default_table(self):
        table = create_default_table(10, 20)
        assert (table.name, table.x, table.y, table.width, table.height) == ("new_table", 10, 20, 200, 150)
        field = table.fields[0]
        assert field.name == "id"
        assert field.type == "INT"
        assert field.primary and field.increment and field.not_null

    def test_empty_diagram(self):
        diagram = create_empty_diagram("oracle")
        assert diagram.dialect == "oracle"
        assert diagram.title == "Untitled Diagram"
        assert diagram.tables == [] and diagram.relationships == []

    def test_next_field_name_skips_taken_names(self):
        table = create_default_table()
        assert next_field_name(table) == "field_2"
        table.fields.append(TableField(name="field_2"))
        assert next_field_name(table) == "field_3"
        table.fields.append(TableField(name="field_4"))
        assert next_field_name(table) == "field_5"
