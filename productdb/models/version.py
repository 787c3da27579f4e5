"""Product version request and response models."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from productdb.utils.validators import optional_non_empty, optional_uuid, require_non_empty, require_uuid


class ProductVersionCreateRequest(BaseModel):
    version: str = Field(..., description="Version string")
    product_id: str = Field(..., description="Owning product")
    description: str = Field("", description="Version description")
    release_date: Optional[str] = Field(None, description="Release date (YYYY-MM-DD)")
    is_latest: bool = Field(False, description="Whether this is the latest version of the product")
    predecessor_id: Optional[str] = Field(None, description="Version this one succeeds")

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        return require_non_empty(v)

    @field_validator("product_id")
    @classmethod
    def validate_product_id(cls, v: str) -> str:
        return require_uuid(v)

    @field_validator("predecessor_id")
    @classmethod
    def validate_predecessor_id(cls, v: Optional[str]) -> Optional[str]:
        return optional_uuid(v)


class ProductVersionUpdateRequest(BaseModel):
    """Partial update; explicit nulls clear `release_date` and `predecessor_id`."""

    version: Optional[str] = None
    description: Optional[str] = None
    product_id: Optional[str] = None
    release_date: Optional[str] = None
    is_latest: Optional[bool] = None
    predecessor_id: Optional[str] = None

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: Optional[str]) -> Optional[str]:
        return optional_non_empty(v)

    @field_validator("product_id", "predecessor_id")
    @classmethod
    def validate_ids(cls, v: Optional[str]) -> Optional[str]:
        return optional_uuid(v)


class ProductVersionResponse(BaseModel):
    id: str
    product_id: Optional[str] = None
    name: str
    full_name: str
    description: str = ""
    is_latest: bool = False
    released_at: Optional[date] = None
    predecessor_id: Optional[str] = None
