from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator

import httpx
import pytest

from productdb.api.dependencies import get_storage
from productdb.api.main import app
from productdb.graph.models import ProductType
from productdb.graph.storage.memory import InMemoryStorage
from productdb.models import (
    ProductCreateRequest,
    ProductVersionCreateRequest,
    VendorCreateRequest,
)
from productdb.services.products import ProductService
from productdb.services.vendors import VendorService
from productdb.services.versions import ProductVersionService


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
async def client(storage: InMemoryStorage) -> AsyncIterator[httpx.AsyncClient]:
    async def _storage_override() -> InMemoryStorage:
        return storage

    app.dependency_overrides[get_storage] = _storage_override
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@dataclass
class Catalog:
    """Small fixture catalog: one vendor, two products, three versions."""

    vendor_id: str
    product_id: str
    other_product_id: str
    version_ids: list


@pytest.fixture
async def catalog(storage: InMemoryStorage) -> Catalog:
    vendor = await VendorService(storage).create(VendorCreateRequest(name="Acme", description="tools"))
    products = ProductService(storage)
    router = await products.create(
        ProductCreateRequest(name="Router", vendor_id=vendor.id, type=ProductType.HARDWARE)
    )
    firmware = await products.create(
        ProductCreateRequest(name="Firmware", vendor_id=vendor.id, type=ProductType.FIRMWARE)
    )

    versions = ProductVersionService(storage)
    v1 = await versions.create(ProductVersionCreateRequest(version="1.0", product_id=router.id))
    v2 = await versions.create(ProductVersionCreateRequest(version="2.0", product_id=router.id, is_latest=True))
    fw = await versions.create(ProductVersionCreateRequest(version="7.1", product_id=firmware.id))

    return Catalog(
        vendor_id=vendor.id,
        product_id=router.id,
        other_product_id=firmware.id,
        version_ids=[v1.id, v2.id, fw.id],
    )
