import pytest

from productdb.core.exceptions import BadReferenceError, NotFoundError
from productdb.graph.models import Relationship, RelationshipCategory
from productdb.models import (
    ProductVersionCreateRequest,
    RelationshipCreateRequest,
    RelationshipReconcileRequest,
    RelationshipUpdateRequest,
)
from productdb.services.relationships import RelationshipService, plan_reconciliation
from productdb.services.versions import ProductVersionService

DEFAULT = RelationshipCategory.DEFAULT_COMPONENT_OF
OPTIONAL = RelationshipCategory.OPTIONAL_COMPONENT_OF


async def _targets(storage, catalog, count):
    versions = ProductVersionService(storage)
    created = []
    for index in range(count):
        version = await versions.create(
            ProductVersionCreateRequest(version=f"lib-{index}", product_id=catalog.other_product_id)
        )
        created.append(version.id)
    return created


async def _edges(storage, source_id, category):
    return {(rel.target_node_id, rel.category) for rel in await storage.rels_by_source_and_category(source_id, category)}


def test_plan_reconciliation_splits_existing_edges():
    existing = [
        Relationship(id="1", category=DEFAULT, source_node_id="s", target_node_id="a"),
        Relationship(id="2", category=DEFAULT, source_node_id="s", target_node_id="b"),
    ]

    plan = plan_reconciliation(existing, DEFAULT, DEFAULT, ["b", "c", "c"])

    assert [rel.id for rel in plan.to_delete] == ["1"]
    assert plan.to_recategorize == []
    assert plan.to_create == ["c"]


def test_plan_reconciliation_recategorizes_kept_edges():
    existing = [Relationship(id="1", category=DEFAULT, source_node_id="s", target_node_id="a")]

    plan = plan_reconciliation(existing, DEFAULT, OPTIONAL, ["a"])

    assert [rel.id for rel in plan.to_recategorize] == ["1"]
    assert plan.to_delete == []
    assert plan.to_create == []


def test_plan_reconciliation_collapses_duplicate_edges():
    existing = [
        Relationship(id="1", category=DEFAULT, source_node_id="s", target_node_id="a"),
        Relationship(id="2", category=DEFAULT, source_node_id="s", target_node_id="a"),
    ]

    plan = plan_reconciliation(existing, DEFAULT, DEFAULT, ["a"])

    assert [rel.id for rel in plan.to_delete] == ["2"]
    assert plan.to_create == []


@pytest.mark.asyncio
async def test_reconcile_replaces_target_set(storage, catalog):
    service = RelationshipService(storage)
    source = catalog.version_ids[1]
    a, b, c = await _targets(storage, catalog, 3)
    await service.create(RelationshipCreateRequest(category=DEFAULT, source_node_ids=[source], target_node_ids=[a, b]))
    kept_id = next(
        rel.id for rel in await storage.rels_by_source_and_category(source, DEFAULT) if rel.target_node_id == b
    )

    await service.reconcile(
        RelationshipReconcileRequest(
            source_node_id=source, previous_category=DEFAULT, new_category=DEFAULT, target_node_ids=[b, c]
        )
    )

    after = await storage.rels_by_source_and_category(source, DEFAULT)
    assert {(rel.target_node_id, rel.category) for rel in after} == {(b, DEFAULT), (c, DEFAULT)}
    assert kept_id in {rel.id for rel in after}


@pytest.mark.asyncio
async def test_reconcile_changes_category_in_place(storage, catalog):
    service = RelationshipService(storage)
    source = catalog.version_ids[1]
    (a,) = await _targets(storage, catalog, 1)
    await service.create(RelationshipCreateRequest(category=DEFAULT, source_node_ids=[source], target_node_ids=[a]))

    await service.reconcile(
        RelationshipReconcileRequest.model_validate(
            {"source": source, "previous_category": "default_component_of", "category": "optional_component_of",
             "target_node_ids": [a]}
        )
    )

    assert await _edges(storage, source, DEFAULT) == set()
    assert await _edges(storage, source, OPTIONAL) == {(a, OPTIONAL)}


@pytest.mark.asyncio
async def test_reconcile_reaches_a_fixed_point(storage, catalog):
    service = RelationshipService(storage)
    source = catalog.version_ids[0]
    a, b = await _targets(storage, catalog, 2)
    payload = RelationshipReconcileRequest(
        source_node_id=source, previous_category=DEFAULT, new_category=DEFAULT, target_node_ids=[a, b]
    )

    await service.reconcile(payload)
    once = await _edges(storage, source, DEFAULT)
    second = await service.reconcile(payload)

    assert await _edges(storage, source, DEFAULT) == once
    assert second.is_empty


def test_plan_reconciliation_skips_targets_already_in_new_category():
    existing = [Relationship(id="1", category=DEFAULT, source_node_id="s", target_node_id="a")]
    present = [Relationship(id="2", category=OPTIONAL, source_node_id="s", target_node_id="a")]

    plan = plan_reconciliation(existing, DEFAULT, OPTIONAL, ["a", "b"], present)

    assert [rel.id for rel in plan.to_delete] == ["1"]
    assert plan.to_recategorize == []
    assert plan.to_create == ["b"]


@pytest.mark.asyncio
async def test_reconcile_category_change_reaches_a_fixed_point(storage, catalog):
    service = RelationshipService(storage)
    source = catalog.version_ids[0]
    a, b = await _targets(storage, catalog, 2)
    await service.create(RelationshipCreateRequest(category=DEFAULT, source_node_ids=[source], target_node_ids=[a]))
    await service.create(RelationshipCreateRequest(category=OPTIONAL, source_node_ids=[source], target_node_ids=[b]))
    await service.create(RelationshipCreateRequest(category=DEFAULT, source_node_ids=[source], target_node_ids=[b]))
    payload = RelationshipReconcileRequest(
        source_node_id=source, previous_category=DEFAULT, new_category=OPTIONAL, target_node_ids=[a, b]
    )

    await service.reconcile(payload)
    once = sorted(
        (rel.target_node_id, rel.category.value) for rel in await storage.rels_by_source_and_category(source, OPTIONAL)
    )
    second = await service.reconcile(payload)
    twice = sorted(
        (rel.target_node_id, rel.category.value) for rel in await storage.rels_by_source_and_category(source, OPTIONAL)
    )

    assert once == sorted([(a, OPTIONAL.value), (b, OPTIONAL.value)])
    assert twice == once
    assert second.is_empty
    assert await storage.rels_by_source_and_category(source, DEFAULT) == []


@pytest.mark.asyncio
async def test_reconcile_with_empty_targets_removes_everything(storage, catalog):
    service = RelationshipService(storage)
    source = catalog.version_ids[0]
    (a,) = await _targets(storage, catalog, 1)
    await service.create(RelationshipCreateRequest(category=DEFAULT, source_node_ids=[source], target_node_ids=[a]))

    plan = await service.reconcile(
        RelationshipReconcileRequest(source_node_id=source, previous_category=DEFAULT, new_category=DEFAULT)
    )

    assert len(plan.to_delete) == 1
    assert await _edges(storage, source, DEFAULT) == set()


@pytest.mark.asyncio
async def test_reconcile_validates_every_endpoint(storage, catalog):
    service = RelationshipService(storage)
    source = catalog.version_ids[0]

    with pytest.raises(BadReferenceError):
        await service.reconcile(
            RelationshipReconcileRequest(
                source_node_id=catalog.product_id, previous_category=DEFAULT, new_category=DEFAULT
            )
        )
    with pytest.raises(BadReferenceError):
        await service.reconcile(
            RelationshipReconcileRequest(
                source_node_id=source,
                previous_category=DEFAULT,
                new_category=DEFAULT,
                target_node_ids=[catalog.version_ids[1], catalog.vendor_id],
            )
        )
    assert await _edges(storage, source, DEFAULT) == set()


@pytest.mark.asyncio
async def test_create_builds_cartesian_product_without_duplicates(storage, catalog):
    service = RelationshipService(storage)
    v1, v2, fw = catalog.version_ids

    created = await service.create(
        RelationshipCreateRequest(category=DEFAULT, source_node_ids=[v1, v2], target_node_ids=[fw])
    )
    again = await service.create(
        RelationshipCreateRequest(category=DEFAULT, source_node_ids=[v1, v2], target_node_ids=[fw])
    )

    assert len(created) == 2
    assert again == []


@pytest.mark.asyncio
async def test_groups_by_category_then_product(storage, catalog):
    service = RelationshipService(storage)
    v1, v2, fw = catalog.version_ids
    (lib,) = await _targets(storage, catalog, 1)
    await service.create(RelationshipCreateRequest(category=DEFAULT, source_node_ids=[v2], target_node_ids=[fw, lib]))
    await service.create(
        RelationshipCreateRequest(category=RelationshipCategory.INSTALLED_ON, source_node_ids=[v2], target_node_ids=[v1])
    )

    groups = await service.list_for_version(v2)

    assert [group.category for group in groups] == [DEFAULT, RelationshipCategory.INSTALLED_ON]
    default_group = groups[0]
    assert [item.product.name for item in default_group.products] == ["Firmware"]
    assert [entry.version.id for entry in default_group.products[0].version_relationships] == [fw, lib]
    assert default_group.products[0].product.full_name == "Acme Firmware"
    assert groups[1].products[0].version_relationships[0].version.full_name == "Router 1.0"


@pytest.mark.asyncio
async def test_single_edge_operations(storage, catalog):
    service = RelationshipService(storage)
    v1, v2, fw = catalog.version_ids
    (relationship_id,) = await service.create(
        RelationshipCreateRequest(category=DEFAULT, source_node_ids=[v1], target_node_ids=[fw])
    )

    fetched = await service.get(relationship_id)
    assert fetched.source.id == v1
    assert fetched.target.full_name == "Firmware 7.1"

    updated = await service.update(relationship_id, RelationshipUpdateRequest(category=OPTIONAL, source_node_id=v2))
    assert updated.category == OPTIONAL
    assert updated.source.id == v2

    with pytest.raises(BadReferenceError):
        await service.update(relationship_id, RelationshipUpdateRequest(target_node_id=catalog.product_id))

    assert await service.delete_by_version_and_category(v2, OPTIONAL) == 1
    with pytest.raises(NotFoundError):
        await service.get(relationship_id)
    with pytest.raises(NotFoundError):
        await service.delete(relationship_id)
