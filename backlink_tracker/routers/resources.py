from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from backlink_tracker.database import get_db
from backlink_tracker.schemas import (
    ApiResponse, PaginatedResponse, ResourceCreate, ResourceDeleteResult, ResourceUpdate, ResourceWithStats
)
from backlink_tracker.services.query_builder import PageRequest, ResourceFilter
from backlink_tracker.services.resource_service import ResourceService

router = APIRouter(prefix="/api/resources", tags=["resources"])
resource_service = ResourceService()


@router.get("", response_model=PaginatedResponse[ResourceWithStats])
async def list_resources(
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    session: AsyncSession = Depends(get_db)
):
    """List active resources, highest domain authority first.

    ``page`` and ``limit`` are taken as raw strings: anything missing,
    non-numeric or below 1 falls back to page 1 / 50 per page.
    """
    page_request = PageRequest.from_params(page, limit)
    resources, total = await resource_service.list_page(
        session,
        ResourceFilter.from_params(category, search),
        page_request
    )
    return PaginatedResponse(data=resources, pagination=page_request.pagination(total))


@router.post("", response_model=ApiResponse[ResourceWithStats])
async def create_resource(
    resource_data: ResourceCreate,
    session: AsyncSession = Depends(get_db)
):
    """Create a new resource"""
    resource = await resource_service.create(session, resource_data)
    return ApiResponse(data=resource, message="Resource created successfully")


@router.get("/{resource_id}", response_model=ApiResponse[ResourceWithStats])
async def get_resource(
    resource_id: int,
    session: AsyncSession = Depends(get_db)
):
    """Get a single active resource with its backlink counts"""
    return ApiResponse(data=await resource_service.get(session, resource_id))


@router.put("/{resource_id}", response_model=ApiResponse[ResourceWithStats])
async def update_resource(
    resource_id: int,
    update_data: ResourceUpdate,
    session: AsyncSession = Depends(get_db)
):
    """Partially update a resource"""
    resource = await resource_service.update(session, resource_id, update_data)
    return ApiResponse(data=resource, message="Resource updated successfully")


@router.delete("/{resource_id}", response_model=ApiResponse[ResourceDeleteResult])
async def delete_resource(
    resource_id: int,
    session: AsyncSession = Depends(get_db)
):
    """Soft-delete a resource and remove its backlinks from every website"""
    removed = await resource_service.delete(session, resource_id)
    return ApiResponse(
        data=ResourceDeleteResult(removed_backlinks=removed),
        message=(
            f"Resource deleted successfully. Removed {removed} backlink "
            f"tracking entries from all websites."
        ),
    )
