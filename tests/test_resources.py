from itertools import combinations
from pathlib import Path

import pytest

from permmap import Field, NotFoundError, Permission, Resource, SchemaError, Taxonomy, parse_entity
from permmap.resources import load_schema_document


def test_permissions_are_fixed_and_ordered(widget_taxonomy: Taxonomy) -> None:
    permissions = widget_taxonomy.list_permissions()

    assert [p.value for p in permissions] == ["Create", "Delete", "List", "Read", "Update"]
    assert widget_taxonomy.list_permissions() == permissions
    assert Taxonomy([]).list_permissions() == permissions


def test_entities_list_resources_then_their_fields(shop_taxonomy: Taxonomy) -> None:
    identifiers = [e.identifier for e in shop_taxonomy.list_entities()]

    assert identifiers == [
        "Orders",
        "Orders.id",
        "Orders.total",
        "Orders.note",
        "Customers",
        "Customers.id",
        "Customers.email",
        "Tags",
    ]


def test_identifiers_are_unique(shop_taxonomy: Taxonomy) -> None:
    entities = shop_taxonomy.list_entities()

    for first, second in combinations(entities, 2):
        assert first != second
        assert first.identifier != second.identifier


def test_field_identifier_uses_owner_name() -> None:
    field = Resource(name="Widget").field("id")

    assert field == Field(resource="Widget", name="id")
    assert field.identifier == "Widget.id"
    assert field.owner == Resource(name="Widget")
    assert str(field) == "Widget.id"


def test_same_field_name_under_two_resources_is_two_entities(shop_taxonomy: Taxonomy) -> None:
    assert shop_taxonomy.get("Orders.id") != shop_taxonomy.get("Customers.id")


@pytest.mark.parametrize(
    "resources, fragment",
    [
        ([("Wid.get", [])], "must not contain '.'"),
        ([("Widget", ["a.b"])], "must not contain '.'"),
        ([("", [])], "must not be empty"),
        ([("Widget", [""])], "must not be empty"),
        ([("Widget", ["has space"])], "not a valid identifier"),
        ([("Resources", [])], "reserved"),
        ([("requiresPermission", ["id"])], "reserved"),
        ([("Record", [])], "reserved"),
        ([("boolean", [])], "reserved"),
        ([("class", [])], "TypeScript keyword"),
        ([("enum", [])], "TypeScript keyword"),
        ([("function", [])], "TypeScript keyword"),
        ([("Widget", []), ("Widget", [])], "duplicate resource 'Widget'"),
        ([("Widget", ["id", "id"])], "duplicate field Widget.id"),
    ],
)
def test_schema_errors(resources: list, fragment: str) -> None:
    with pytest.raises(SchemaError) as excinfo:
        Taxonomy(resources)

    assert fragment in str(excinfo.value)


def test_schema_error_lists_every_problem() -> None:
    with pytest.raises(SchemaError) as excinfo:
        Taxonomy([("A.b", ["c.d"]), ("Ok", ["x.y"])])

    assert len(excinfo.value.problems) == 3


def test_parse_entity_round_trips_identifiers(shop_taxonomy: Taxonomy) -> None:
    for entity in shop_taxonomy.list_entities():
        assert parse_entity(entity.identifier) == entity


@pytest.mark.parametrize("identifier", ["a.b.c", ".id", "Widget.", ""])
def test_parse_entity_rejects_ambiguous_identifiers(identifier: str) -> None:
    with pytest.raises(SchemaError):
        parse_entity(identifier)


def test_get_and_contains(widget_taxonomy: Taxonomy) -> None:
    assert widget_taxonomy.get("Widget.id") == Field(resource="Widget", name="id")
    assert "Widget" in widget_taxonomy
    assert Resource(name="Widget") in widget_taxonomy
    assert Resource(name="Widget.id") not in widget_taxonomy
    assert "Gadget" not in widget_taxonomy
    with pytest.raises(NotFoundError):
        widget_taxonomy.get("Gadget")
    with pytest.raises(NotFoundError):
        widget_taxonomy.fields("Gadget")


def test_permission_renders_as_value() -> None:
    assert str(Permission.READ) == "Read"
    assert Permission("List") is Permission.LIST


def test_load_schema_document(schema_file: Path) -> None:
    document = load_schema_document(schema_file)
    taxonomy = Taxonomy.from_document(document)

    assert [e.identifier for e in taxonomy.list_entities()] == ["Widget", "Widget.id"]
    assert document.decisions["Widget.id"]["Create"] is True


def test_load_schema_document_rejects_bad_input(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text('{"resources": [{"fields": []}]}', encoding="utf-8")

    with pytest.raises(SchemaError):
        load_schema_document(bad)
    with pytest.raises(SchemaError):
        load_schema_document(tmp_path / "missing.json")
