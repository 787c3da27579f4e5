"""Identification helper operations."""

from __future__ import annotations

import logging
from typing import List

from productdb.core.exceptions import NotFoundError
from productdb.graph.models import IdentificationHelper, NodeCategory
from productdb.graph.storage.base import RecordNotFound
from productdb.models import (
    IdentificationHelperCreateRequest,
    IdentificationHelperResponse,
    IdentificationHelperUpdateRequest,
)
from productdb.services.base import CatalogService, backend_errors, new_id
from productdb.services.projections import helper_response

logger = logging.getLogger(__name__)


class IdentificationHelperService(CatalogService):
    """Metadata is stored as given; it is only interpreted at export time."""

    async def create(self, payload: IdentificationHelperCreateRequest) -> IdentificationHelperResponse:
        version = await self._resolve_node(
            payload.product_version_id, NodeCategory.PRODUCT_VERSION, "product_version_id"
        )
        helper = IdentificationHelper(
            id=new_id(),
            node_id=version.id,
            category=payload.category,
            metadata=payload.metadata.encode("utf-8"),
        )
        with backend_errors("create identification helper"):
            helper = await self.storage.create_identification_helper(helper)

        logger.info(
            "Identification helper created",
            extra={"helper_id": helper.id, "version_id": version.id, "category": helper.category},
        )
        return helper_response(helper)

    async def _load(self, helper_id: str) -> IdentificationHelper:
        with backend_errors("fetch identification helper"):
            try:
                return await self.storage.get_identification_helper(helper_id)
            except RecordNotFound as exc:
                raise NotFoundError("Identification helper not found") from exc

    async def get(self, helper_id: str) -> IdentificationHelperResponse:
        return helper_response(await self._load(helper_id))

    async def update(
        self, helper_id: str, payload: IdentificationHelperUpdateRequest
    ) -> IdentificationHelperResponse:
        helper = await self._load(helper_id)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("category") is not None:
            helper.category = changes["category"]
        if changes.get("metadata") is not None:
            helper.metadata = changes["metadata"].encode("utf-8")
        if changes.get("product_version_id") is not None:
            version = await self._resolve_node(
                changes["product_version_id"], NodeCategory.PRODUCT_VERSION, "product_version_id"
            )
            helper.node_id = version.id

        with backend_errors("update identification helper"):
            helper = await self.storage.update_identification_helper(helper)

        logger.info("Identification helper updated", extra={"helper_id": helper_id, "fields": sorted(changes)})
        return helper_response(helper)

    async def delete(self, helper_id: str) -> None:
        with backend_errors("delete identification helper"):
            try:
                await self.storage.delete_identification_helper(helper_id)
            except RecordNotFound as exc:
                raise NotFoundError("Identification helper not found") from exc
        logger.info("Identification helper deleted", extra={"helper_id": helper_id})

    async def list_for_version(self, version_id: str) -> List[IdentificationHelperResponse]:
        await self._load_primary(version_id, NodeCategory.PRODUCT_VERSION)
        with backend_errors("fetch identification helpers"):
            helpers = await self.storage.helpers_by_node(version_id)
        return [helper_response(helper) for helper in helpers]
