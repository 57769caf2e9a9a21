import json
from pathlib import Path

import pytest

from permmap import MappingTable, Permission, Taxonomy, build_mapping_table


def _only_create() -> dict[str, bool]:
    return {p.value: p is Permission.CREATE for p in Permission}


@pytest.fixture
def widget_taxonomy() -> Taxonomy:
    return Taxonomy([("Widget", ["id"])])


@pytest.fixture
def widget_decisions() -> dict[str, dict[str, bool]]:
    return {"Widget": _only_create(), "Widget.id": _only_create()}


@pytest.fixture
def widget_table(widget_taxonomy: Taxonomy, widget_decisions: dict) -> MappingTable:
    return build_mapping_table(widget_taxonomy, widget_decisions)


@pytest.fixture
def shop_taxonomy() -> Taxonomy:
    return Taxonomy(
        [
            ("Orders", ["id", "total", "note"]),
            ("Customers", ["id", "email"]),
            ("Tags", []),
        ]
    )


@pytest.fixture
def shop_decisions(shop_taxonomy: Taxonomy) -> dict[str, dict[str, bool]]:
    decisions = {}
    for index, entity in enumerate(shop_taxonomy.list_entities()):
        decisions[entity.identifier] = {
            p.value: (index + position) % 3 == 0 for position, p in enumerate(Permission)
        }
    return decisions


@pytest.fixture
def shop_table(shop_taxonomy: Taxonomy, shop_decisions: dict) -> MappingTable:
    return build_mapping_table(shop_taxonomy, shop_decisions)


@pytest.fixture
def schema_file(tmp_path: Path, widget_decisions: dict) -> Path:
    path = tmp_path / "permissions.schema.json"
    path.write_text(
        json.dumps({"resources": [{"name": "Widget", "fields": ["id"]}], "decisions": widget_decisions}),
        encoding="utf-8",
    )
    return path
