from .family import ProductFamilyCreateRequest, ProductFamilyResponse, ProductFamilyUpdateRequest
from .helper import IdentificationHelperCreateRequest, IdentificationHelperResponse, IdentificationHelperUpdateRequest
from .product import ProductCreateRequest, ProductResponse, ProductTreeExportRequest, ProductUpdateRequest
from .relationship import (
    RelationshipCreateRequest,
    RelationshipGroup,
    RelationshipGroupItem,
    RelationshipReconcileRequest,
    RelationshipResponse,
    RelationshipUpdateRequest,
    VersionRelationship,
)
from .vendor import VendorCreateRequest, VendorResponse, VendorUpdateRequest
from .version import ProductVersionCreateRequest, ProductVersionResponse, ProductVersionUpdateRequest

__all__ = [
    "IdentificationHelperCreateRequest",
    "IdentificationHelperResponse",
    "IdentificationHelperUpdateRequest",
    "ProductCreateRequest",
    "ProductFamilyCreateRequest",
    "ProductFamilyResponse",
    "ProductFamilyUpdateRequest",
    "ProductResponse",
    "ProductTreeExportRequest",
    "ProductUpdateRequest",
    "ProductVersionCreateRequest",
    "ProductVersionResponse",
    "ProductVersionUpdateRequest",
    "RelationshipCreateRequest",
    "RelationshipGroup",
    "RelationshipGroupItem",
    "RelationshipReconcileRequest",
    "RelationshipResponse",
    "RelationshipUpdateRequest",
    "VendorCreateRequest",
    "VendorResponse",
    "VendorUpdateRequest",
    "VersionRelationship",
]
