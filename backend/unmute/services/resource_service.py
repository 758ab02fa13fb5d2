"""
unMute Backend: Resource Service
=================================

Public reads, admin-only writes. Admin checks happen in the route
dependencies; this service only validates and persists.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.exceptions import NotFoundError, ValidationError
from unmute.models.resource import Resource
from unmute.schemas.resource import ResourceCreateRequest, ResourceOut

logger = logging.getLogger(__name__)

RESOURCE_LIMIT = 200
TITLE_MAX = 255
URL_MAX = 255
DESCRIPTION_MAX = 20000


class ResourceService:

    async def get_resource_or_404(self, db: AsyncSession, resource_id: int) -> Resource:
        resource = await db.get(Resource, resource_id)
        if resource is None:
            raise NotFoundError(resource="Resource", resource_id=resource_id)
        return resource

    async def list_resources(self, db: AsyncSession) -> List[ResourceOut]:
        result = await db.execute(
            select(Resource)
            .order_by(Resource.created_at.desc(), Resource.resource_id.desc())
            .limit(RESOURCE_LIMIT)
        )
        return [ResourceOut.model_validate(r) for r in result.scalars().all()]

    async def get_resource(self, db: AsyncSession, resource_id: int) -> ResourceOut:
        return ResourceOut.model_validate(await self.get_resource_or_404(db, resource_id))

    async def create_resource(
        self, db: AsyncSession, payload: ResourceCreateRequest
    ) -> ResourceOut:
        title = (payload.title or "").strip()
        description = (payload.description or "").strip()
        if not title or not description:
            raise ValidationError(
                message="Title and description are required",
                context={"required": ["title", "description"]},
            )
        url = (payload.url or "").strip() or None

        resource = Resource(
            title=title[:TITLE_MAX],
            url=url[:URL_MAX] if url else None,
            description=description[:DESCRIPTION_MAX],
        )
        db.add(resource)
        await db.flush()
        logger.info("Resource %s created", resource.resource_id)
        return ResourceOut.model_validate(resource)

    async def delete_resource(self, db: AsyncSession, resource_id: int) -> None:
        resource = await self.get_resource_or_404(db, resource_id)
        await db.delete(resource)
        await db.flush()
        logger.info("Resource %s deleted", resource_id)


resource_service = ResourceService()
