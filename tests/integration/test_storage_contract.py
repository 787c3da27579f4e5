"""Behaviour every storage adapter must share, run against memory and SQLite."""

from datetime import date

import pytest

from productdb.graph.models import (
    IdentificationHelper,
    LoadOptions,
    Node,
    NodeCategory,
    ProductType,
    Relationship,
    RelationshipCategory,
)
from productdb.graph.storage.base import RecordNotFound
from productdb.graph.storage.memory import InMemoryStorage
from productdb.graph.storage.sql import SQLStorage


@pytest.fixture(params=["memory", "sql"])
async def backend(request, tmp_path):
    if request.param == "memory":
        storage = InMemoryStorage()
    else:
        storage = SQLStorage.from_url(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    await storage.create_schema()
    yield storage
    await storage.close()


async def _seed(storage):
    await storage.create_node(Node(id="acme", category=NodeCategory.VENDOR, name="Acme"))
    await storage.create_node(Node(id="fam", category=NodeCategory.PRODUCT_FAMILY, name="Routers"))
    await storage.create_node(
        Node(
            id="router",
            category=NodeCategory.PRODUCT_NAME,
            name="Router",
            parent_id="acme",
            family_id="fam",
            product_type=ProductType.HARDWARE,
        )
    )
    await storage.create_node(
        Node(
            id="v1",
            category=NodeCategory.PRODUCT_VERSION,
            name="1.0",
            parent_id="router",
            released_at=date(2023, 5, 1),
        )
    )
    await storage.create_node(
        Node(id="v2", category=NodeCategory.PRODUCT_VERSION, name="2.0", parent_id="router", is_latest_version=True)
    )
    await storage.create_node(Node(id="other", category=NodeCategory.VENDOR, name="Other"))
    await storage.create_node(
        Node(
            id="os",
            category=NodeCategory.PRODUCT_NAME,
            name="OS",
            parent_id="other",
            product_type=ProductType.SOFTWARE,
        )
    )
    await storage.create_node(Node(id="os1", category=NodeCategory.PRODUCT_VERSION, name="11", parent_id="os"))

    # v1 is the predecessor of v2
    v1 = (await storage.nodes_by_ids(["v1"]))[0]
    v1.successor_id = "v2"
    await storage.update_node(v1)

    await storage.create_relationship(
        Relationship(id="r1", category=RelationshipCategory.INSTALLED_ON, source_node_id="v2", target_node_id="os1")
    )
    await storage.create_relationship(
        Relationship(
            id="r2", category=RelationshipCategory.DEFAULT_COMPONENT_OF, source_node_id="os1", target_node_id="v1"
        )
    )
    await storage.create_identification_helper(
        IdentificationHelper(id="h1", node_id="v2", category="cpe", metadata=b'{"cpe": "cpe:2.3:h:acme:router"}')
    )


@pytest.mark.asyncio
async def test_get_node_preloads_requested_hops(backend):
    await _seed(backend)

    graph = await backend.get_node("acme", LoadOptions.of("children.children.predecessor"))

    assert graph.root.name == "Acme"
    assert [node.id for node in graph.children()] == ["router"]
    assert {node.id for node in graph.children("router")} == {"v1", "v2"}
    assert graph.predecessor("v2").id == "v1"
    assert graph.get("v1").released_at == date(2023, 5, 1)


@pytest.mark.asyncio
async def test_get_node_without_options_loads_only_the_root(backend):
    await _seed(backend)

    graph = await backend.get_node("router")

    assert set(graph.nodes) == {"router"}
    assert graph.parent() is None


@pytest.mark.asyncio
async def test_relationship_hops_bring_far_endpoints(backend):
    await _seed(backend)

    graph = await backend.get_node("v2", LoadOptions.of("source_rels.parent", "target_rels", "family"))

    assert [rel.id for rel in graph.outgoing()] == ["r1"]
    assert graph.get("os1").name == "11"
    assert graph.parent("os1").id == "os"

    reverse = await backend.get_node("v1", LoadOptions.of("target_rels", "parent.family"))
    assert [rel.id for rel in reverse.incoming()] == ["r2"]
    assert reverse.get("os1") is not None
    assert reverse.family("router").id == "fam"


@pytest.mark.asyncio
async def test_missing_records_raise_record_not_found(backend):
    with pytest.raises(RecordNotFound):
        await backend.get_node("nope")
    with pytest.raises(RecordNotFound):
        await backend.get_relationship("nope")
    with pytest.raises(RecordNotFound):
        await backend.get_identification_helper("nope")
    with pytest.raises(RecordNotFound):
        await backend.delete_node("nope")
    with pytest.raises(RecordNotFound):
        await backend.update_node(Node(id="nope", category=NodeCategory.VENDOR, name="x"))


@pytest.mark.asyncio
async def test_delete_cascades_to_descendants_edges_and_helpers(backend):
    await _seed(backend)

    await backend.delete_node("acme")

    assert await backend.nodes_by_ids(["acme", "router", "v1", "v2"]) == []
    assert await backend.helpers_by_node("v2") == []
    assert await backend.rels_by_source_and_category("os1", RelationshipCategory.DEFAULT_COMPONENT_OF) == []
    with pytest.raises(RecordNotFound):
        await backend.get_relationship("r1")

    survivors = await backend.nodes_by_category(NodeCategory.PRODUCT_VERSION)
    assert [node.id for node in survivors] == ["os1"]


@pytest.mark.asyncio
async def test_deleting_family_clears_product_reference(backend):
    await _seed(backend)

    await backend.delete_node("fam")

    router = (await backend.nodes_by_ids(["router"]))[0]
    assert router.family_id is None
    assert router.parent_id == "acme"


@pytest.mark.asyncio
async def test_bulk_relationship_delete_by_source_and_category(backend):
    await _seed(backend)
    await backend.create_relationship(
        Relationship(id="r3", category=RelationshipCategory.INSTALLED_ON, source_node_id="v2", target_node_id="v1")
    )

    deleted = await backend.delete_rels_by_source_and_category("v2", RelationshipCategory.INSTALLED_ON)

    assert deleted == 2
    assert await backend.rels_by_source_and_category("v2", RelationshipCategory.INSTALLED_ON) == []
    assert (await backend.get_relationship("r2")).relationship.id == "r2"


@pytest.mark.asyncio
async def test_relationship_and_helper_updates(backend):
    await _seed(backend)

    endpoints = await backend.get_relationship("r1")
    assert endpoints.source_node.id == "v2"
    assert endpoints.target_node.id == "os1"

    relationship = endpoints.relationship
    relationship.category = RelationshipCategory.INSTALLED_WITH
    await backend.update_relationship(relationship)
    assert (await backend.get_relationship("r1")).relationship.category == RelationshipCategory.INSTALLED_WITH

    helper = await backend.get_identification_helper("h1")
    helper.metadata = b'{"purl": "pkg:generic/router@2.0"}'
    helper.category = "purl"
    await backend.update_identification_helper(helper)

    stored = await backend.helpers_by_node("v2")
    assert [(item.category, item.metadata) for item in stored] == [("purl", b'{"purl": "pkg:generic/router@2.0"}')]


@pytest.mark.asyncio
async def test_nodes_by_ids_skips_missing_and_keeps_order(backend):
    await _seed(backend)

    nodes = await backend.nodes_by_ids(["v2", "missing", "acme"])

    assert [node.id for node in nodes] == ["v2", "acme"]
