"""
unMute Backend: Resource Route Handlers
=========================================

Route Inventory:
    GET    /resources        public, newest first
    GET    /resources/{id}   public
    POST   /resources        admin
    DELETE /resources/{id}   admin
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.database import get_db_session
from unmute.schemas.common import ERROR_RESPONSES, DbId, Envelope
from unmute.schemas.resource import ResourceCreateRequest, ResourceOut
from unmute.security import Principal, require_admin
from unmute.services.resource_service import resource_service

router = APIRouter(prefix="/resources", tags=["Resources"])


@router.get("", response_model=Envelope[List[ResourceOut]], summary="List resources")
async def list_resources(
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[ResourceOut]]:
    return Envelope[List[ResourceOut]](data=await resource_service.list_resources(db))


@router.get(
    "/{resource_id}",
    response_model=Envelope[ResourceOut],
    responses={404: ERROR_RESPONSES[404]},
    summary="Get one resource",
)
async def get_resource(
    resource_id: DbId,
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ResourceOut]:
    return Envelope[ResourceOut](data=await resource_service.get_resource(db, resource_id))


@router.post(
    "",
    status_code=201,
    response_model=Envelope[ResourceOut],
    responses={
        400: ERROR_RESPONSES[400],
        401: ERROR_RESPONSES[401],
        403: ERROR_RESPONSES[403],
    },
    summary="Add a resource (admin)",
)
async def create_resource(
    payload: ResourceCreateRequest,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ResourceOut]:
    resource = await resource_service.create_resource(db, payload)
    return Envelope[ResourceOut](data=resource, message="Resource created")


@router.delete(
    "/{resource_id}",
    response_model=Envelope[None],
    responses={
        401: ERROR_RESPONSES[401],
        403: ERROR_RESPONSES[403],
        404: ERROR_RESPONSES[404],
    },
    summary="Delete a resource (admin)",
)
async def delete_resource(
    resource_id: DbId,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await resource_service.delete_resource(db, resource_id)
    return Envelope[None](message="Resource deleted")
