from datetime import date

import pytest

from productdb.core.exceptions import BackendError, BadInputError, BadReferenceError, NotFoundError
from productdb.graph.models import NodeCategory, ProductType
from productdb.graph.storage.base import BackendFailure
from productdb.graph.storage.memory import InMemoryStorage
from productdb.models import (
    ProductCreateRequest,
    ProductFamilyCreateRequest,
    ProductFamilyUpdateRequest,
    ProductUpdateRequest,
    ProductVersionCreateRequest,
    ProductVersionUpdateRequest,
    VendorCreateRequest,
    VendorUpdateRequest,
)
from productdb.services.families import ProductFamilyService
from productdb.services.products import ProductService
from productdb.services.vendors import VendorService
from productdb.services.versions import ProductVersionService


class FailingStorage(InMemoryStorage):
    async def create_node(self, node):
        raise BackendFailure("disk full")

    async def nodes_by_category(self, category):
        raise BackendFailure("connection reset")


@pytest.mark.asyncio
async def test_vendor_lifecycle(storage):
    vendors = VendorService(storage)

    created = await vendors.create(VendorCreateRequest(name="Acme", description="x"))
    assert created.product_count == 0

    updated = await vendors.update(created.id, VendorUpdateRequest(description="tools"))
    assert updated.name == "Acme"
    assert updated.description == "tools"

    assert [vendor.id for vendor in await vendors.list()] == [created.id]

    await vendors.delete(created.id)
    with pytest.raises(NotFoundError):
        await vendors.get(created.id)


@pytest.mark.asyncio
async def test_vendor_update_is_idempotent(storage):
    vendors = VendorService(storage)
    created = await vendors.create(VendorCreateRequest(name="Acme"))
    payload = VendorUpdateRequest(name="Acme Corp")

    first = await vendors.update(created.id, payload)
    second = await vendors.update(created.id, payload)

    assert first == second


@pytest.mark.asyncio
async def test_vendor_counts_and_lists_products(storage, catalog):
    vendors = VendorService(storage)

    vendor = await vendors.get(catalog.vendor_id)
    products = await vendors.list_products(catalog.vendor_id)

    assert vendor.product_count == 2
    assert {product.name for product in products} == {"Router", "Firmware"}
    router = next(product for product in products if product.name == "Router")
    assert [version.name for version in router.latest_versions] == ["2.0"]


@pytest.mark.asyncio
async def test_get_with_wrong_category_is_not_found(storage, catalog):
    with pytest.raises(NotFoundError):
        await VendorService(storage).get(catalog.product_id)
    with pytest.raises(NotFoundError):
        await ProductService(storage).get(catalog.vendor_id)


@pytest.mark.asyncio
async def test_product_requires_vendor_reference(storage, catalog):
    products = ProductService(storage)

    with pytest.raises(BadReferenceError):
        await products.create(
            ProductCreateRequest(name="Switch", vendor_id=catalog.product_id, type=ProductType.HARDWARE)
        )
    with pytest.raises(BadReferenceError):
        await products.create(
            ProductCreateRequest(
                name="Switch",
                vendor_id="00000000-0000-4000-8000-000000000000",
                type=ProductType.HARDWARE,
            )
        )


@pytest.mark.asyncio
async def test_product_update_changes_only_present_fields(storage, catalog):
    products = ProductService(storage)
    other_vendor = await VendorService(storage).create(VendorCreateRequest(name="Globex"))

    updated = await products.update(catalog.product_id, ProductUpdateRequest(vendor_id=other_vendor.id))

    assert updated.vendor_id == other_vendor.id
    assert updated.full_name == "Globex Router"
    assert updated.type == ProductType.HARDWARE
    # versions travel with the product
    assert [version.name for version in await products.list_versions(catalog.product_id)] == ["1.0", "2.0"]

    with pytest.raises(BadReferenceError):
        await products.update(catalog.product_id, ProductUpdateRequest(vendor_id=catalog.other_product_id))


@pytest.mark.asyncio
async def test_product_family_assignment_and_removal(storage, catalog):
    family = await ProductFamilyService(storage).create(ProductFamilyCreateRequest(name="Routers"))
    products = ProductService(storage)

    assigned = await products.update(catalog.product_id, ProductUpdateRequest(family_id=family.id))
    assert assigned.family_id == family.id

    cleared = await products.update(catalog.product_id, ProductUpdateRequest.model_validate({"family_id": None}))
    assert cleared.family_id is None

    with pytest.raises(BadReferenceError):
        await products.update(catalog.product_id, ProductUpdateRequest(family_id=catalog.vendor_id))


@pytest.mark.asyncio
async def test_version_create_parses_release_date(storage, catalog):
    versions = ProductVersionService(storage)

    created = await versions.create(
        ProductVersionCreateRequest(version="3.0", product_id=catalog.product_id, release_date="2024-02-29")
    )

    assert created.released_at == date(2024, 2, 29)
    assert created.full_name == "Router 3.0"
    assert created.product_id == catalog.product_id


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["2024-13-01", "2024-2-1", "yesterday", "2024-02-30"])
async def test_version_rejects_malformed_release_date(storage, catalog, raw):
    with pytest.raises(BadInputError):
        await ProductVersionService(storage).create(
            ProductVersionCreateRequest(version="3.0", product_id=catalog.product_id, release_date=raw)
        )


@pytest.mark.asyncio
async def test_version_requires_product_reference(storage, catalog):
    with pytest.raises(BadReferenceError):
        await ProductVersionService(storage).create(
            ProductVersionCreateRequest(version="3.0", product_id=catalog.vendor_id)
        )


@pytest.mark.asyncio
async def test_version_predecessor_is_recorded_on_the_predecessor(storage, catalog):
    versions = ProductVersionService(storage)
    v1, v2, fw = catalog.version_ids

    updated = await versions.update(v2, ProductVersionUpdateRequest(predecessor_id=v1))

    assert updated.predecessor_id == v1
    stored_v1 = (await storage.nodes_by_ids([v1]))[0]
    assert stored_v1.successor_id == v2
    assert (await versions.get(v2)).predecessor_id == v1

    # re-pointing releases the old predecessor
    await versions.update(v2, ProductVersionUpdateRequest(predecessor_id=fw))
    assert (await storage.nodes_by_ids([v1]))[0].successor_id is None
    assert (await versions.get(v2)).predecessor_id == fw

    cleared = await versions.update(v2, ProductVersionUpdateRequest.model_validate({"predecessor_id": None}))
    assert cleared.predecessor_id is None
    assert (await storage.nodes_by_ids([fw]))[0].successor_id is None


@pytest.mark.asyncio
async def test_version_cannot_be_its_own_predecessor(storage, catalog):
    v1 = catalog.version_ids[0]

    with pytest.raises(BadReferenceError):
        await ProductVersionService(storage).update(v1, ProductVersionUpdateRequest(predecessor_id=v1))
    with pytest.raises(BadReferenceError):
        await ProductVersionService(storage).update(
            v1, ProductVersionUpdateRequest(predecessor_id=catalog.product_id)
        )


@pytest.mark.asyncio
async def test_version_predecessors_cannot_form_a_loop(storage, catalog):
    versions = ProductVersionService(storage)
    v1, v2, fw = catalog.version_ids
    await versions.update(v2, ProductVersionUpdateRequest(predecessor_id=v1))
    await versions.update(fw, ProductVersionUpdateRequest(predecessor_id=v2))

    with pytest.raises(BadReferenceError):
        await versions.update(v1, ProductVersionUpdateRequest(predecessor_id=v2))
    with pytest.raises(BadReferenceError):
        await versions.update(v1, ProductVersionUpdateRequest(predecessor_id=fw))

    assert (await versions.get(v1)).predecessor_id is None
    assert (await versions.get(v2)).predecessor_id == v1
    assert (await versions.get(fw)).predecessor_id == v2


@pytest.mark.asyncio
async def test_version_cannot_take_a_predecessor_that_already_has_a_successor(storage, catalog):
    versions = ProductVersionService(storage)
    v1, v2, fw = catalog.version_ids
    await versions.update(v2, ProductVersionUpdateRequest(predecessor_id=v1))

    with pytest.raises(BadReferenceError):
        await versions.update(fw, ProductVersionUpdateRequest(predecessor_id=v1))
    with pytest.raises(BadReferenceError):
        await versions.create(
            ProductVersionCreateRequest(version="3.0", product_id=catalog.product_id, predecessor_id=v1)
        )

    assert (await versions.get(v2)).predecessor_id == v1
    # repeating the existing link is allowed
    assert (await versions.update(v2, ProductVersionUpdateRequest(predecessor_id=v1))).predecessor_id == v1


@pytest.mark.asyncio
async def test_version_update_keeps_absent_fields(storage, catalog):
    versions = ProductVersionService(storage)
    created = await versions.create(
        ProductVersionCreateRequest(
            version="3.0", product_id=catalog.product_id, release_date="2024-01-01", is_latest=True
        )
    )

    updated = await versions.update(created.id, ProductVersionUpdateRequest(description="patch"))

    assert updated.name == "3.0"
    assert updated.released_at == date(2024, 1, 1)
    assert updated.is_latest is True
    assert updated.description == "patch"

    undated = await versions.update(created.id, ProductVersionUpdateRequest.model_validate({"release_date": None}))
    assert undated.released_at is None


@pytest.mark.asyncio
async def test_family_paths_and_cycle_rejection(storage):
    families = ProductFamilyService(storage)
    root = await families.create(ProductFamilyCreateRequest(name="Network"))
    child = await families.create(ProductFamilyCreateRequest(name="Routers", parent_id=root.id))

    assert child.path == ["Network", "Routers"]

    with pytest.raises(BadReferenceError):
        await families.update(root.id, ProductFamilyUpdateRequest(parent_id=child.id))
    with pytest.raises(BadReferenceError):
        await families.update(root.id, ProductFamilyUpdateRequest(parent_id=root.id))

    await families.delete(root.id)
    assert await storage.nodes_by_category(NodeCategory.PRODUCT_FAMILY) == []


@pytest.mark.asyncio
async def test_backend_failures_surface_as_backend_errors():
    storage = FailingStorage()

    with pytest.raises(BackendError):
        await VendorService(storage).create(VendorCreateRequest(name="Acme"))
    with pytest.raises(BackendError):
        await VendorService(storage).list()
