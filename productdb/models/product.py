"""Product request and response models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from productdb.graph.models import ProductType
from productdb.models.version import ProductVersionResponse
from productdb.utils.validators import optional_non_empty, optional_uuid, require_non_empty, require_uuid


class ProductCreateRequest(BaseModel):
    name: str = Field(..., description="Product name")
    description: str = Field("", description="Product description")
    vendor_id: str = Field(..., description="Owning vendor")
    type: ProductType = Field(..., description="software, hardware or firmware")
    family_id: Optional[str] = Field(None, description="Product family the product belongs to")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return require_non_empty(v)

    @field_validator("vendor_id")
    @classmethod
    def validate_vendor_id(cls, v: str) -> str:
        return require_uuid(v)

    @field_validator("family_id")
    @classmethod
    def validate_family_id(cls, v: Optional[str]) -> Optional[str]:
        return optional_uuid(v)


class ProductUpdateRequest(BaseModel):
    """Partial update; an explicit null `family_id` removes the family."""

    name: Optional[str] = None
    description: Optional[str] = None
    vendor_id: Optional[str] = None
    type: Optional[ProductType] = None
    family_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return optional_non_empty(v)

    @field_validator("vendor_id", "family_id")
    @classmethod
    def validate_ids(cls, v: Optional[str]) -> Optional[str]:
        return optional_uuid(v)


class ProductResponse(BaseModel):
    id: str
    vendor_id: Optional[str] = None
    family_id: Optional[str] = None
    name: str
    full_name: str
    description: str = ""
    type: Optional[ProductType] = None
    latest_versions: List[ProductVersionResponse] = Field(default_factory=list)


class ProductTreeExportRequest(BaseModel):
    product_ids: List[str] = Field(..., min_length=1, description="Products to include in the CSAF product tree")

    @field_validator("product_ids")
    @classmethod
    def validate_product_ids(cls, v: List[str]) -> List[str]:
        return [require_uuid(item) for item in v]
