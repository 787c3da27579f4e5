from __future__ import annotations

from fastapi import Depends, Path

from productdb.core.database import database_manager
from productdb.graph.storage.base import CatalogStorage
from productdb.services.export import ProductTreeExportService
from productdb.services.families import ProductFamilyService
from productdb.services.helpers import IdentificationHelperService
from productdb.services.products import ProductService
from productdb.services.relationships import RelationshipService
from productdb.services.vendors import VendorService
from productdb.services.versions import ProductVersionService
from productdb.utils.validators import UUID_PATTERN


def resource_id(description: str = "Resource id"):
    """UUID path parameter; malformed ids are rejected as bad input."""

    return Path(..., pattern=UUID_PATTERN.pattern, description=description)


async def get_storage() -> CatalogStorage:
    return await database_manager.initialize()


async def get_vendor_service(storage: CatalogStorage = Depends(get_storage)) -> VendorService:
    return VendorService(storage)


async def get_family_service(storage: CatalogStorage = Depends(get_storage)) -> ProductFamilyService:
    return ProductFamilyService(storage)


async def get_product_service(storage: CatalogStorage = Depends(get_storage)) -> ProductService:
    return ProductService(storage)


async def get_version_service(storage: CatalogStorage = Depends(get_storage)) -> ProductVersionService:
    return ProductVersionService(storage)


async def get_relationship_service(storage: CatalogStorage = Depends(get_storage)) -> RelationshipService:
    return RelationshipService(storage)


async def get_helper_service(storage: CatalogStorage = Depends(get_storage)) -> IdentificationHelperService:
    return IdentificationHelperService(storage)


async def get_export_service(storage: CatalogStorage = Depends(get_storage)) -> ProductTreeExportService:
    return ProductTreeExportService(storage)
