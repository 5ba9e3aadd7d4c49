from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backlink_tracker.database import get_db
from backlink_tracker.schemas import (
    ApiResponse, BacklinkBulkUpdate, BacklinkCreate, BacklinkResponse, BacklinkUpdate, BulkUpdateResult
)
from backlink_tracker.services.backlink_service import BacklinkService

router = APIRouter(prefix="/api/backlinks", tags=["backlinks"])
backlink_service = BacklinkService()


@router.post("", response_model=ApiResponse[BacklinkResponse])
async def create_backlink(
    backlink_data: BacklinkCreate,
    session: AsyncSession = Depends(get_db)
):
    """Track a new placement opportunity for a website on a resource"""
    backlink = await backlink_service.create(session, backlink_data)
    return ApiResponse(data=backlink, message="Backlink created successfully")


# Registered before /{backlink_id} so "bulk" is not parsed as an id.
@router.patch("/bulk", response_model=ApiResponse[BulkUpdateResult])
async def bulk_update_backlinks(
    bulk_data: BacklinkBulkUpdate,
    session: AsyncSession = Depends(get_db)
):
    """Apply the same changes to several backlinks"""
    updated = await backlink_service.bulk_update(session, bulk_data)
    return ApiResponse(
        data=BulkUpdateResult(updated=updated),
        message=f"Updated {updated} backlinks"
    )


@router.get("/{backlink_id}", response_model=ApiResponse[BacklinkResponse])
async def get_backlink(
    backlink_id: int,
    session: AsyncSession = Depends(get_db)
):
    """Get a single backlink"""
    return ApiResponse(data=await backlink_service.get(session, backlink_id))


@router.patch("/{backlink_id}", response_model=ApiResponse[BacklinkResponse])
async def update_backlink(
    backlink_id: int,
    update_data: BacklinkUpdate,
    session: AsyncSession = Depends(get_db)
):
    """Update backlink status and placement details"""
    backlink = await backlink_service.update(session, backlink_id, update_data)
    return ApiResponse(data=backlink, message="Backlink updated successfully")


@router.delete("/{backlink_id}", response_model=ApiResponse[None])
async def delete_backlink(
    backlink_id: int,
    session: AsyncSession = Depends(get_db)
):
    """Delete a backlink"""
    await backlink_service.delete(session, backlink_id)
    return ApiResponse(message="Backlink deleted successfully")
