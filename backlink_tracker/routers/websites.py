from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from backlink_tracker.database import get_db
from backlink_tracker.schemas import ApiResponse, BacklinkWithDetails, WebsiteCreate, WebsiteUpdate, WebsiteWithStats
from backlink_tracker.services.backlink_service import BacklinkService
from backlink_tracker.services.query_builder import BacklinkFilter, WebsiteFilter
from backlink_tracker.services.stats_service import StatsService
from backlink_tracker.services.website_service import WebsiteService

router = APIRouter(prefix="/api/websites", tags=["websites"])
stats_service = StatsService()
website_service = WebsiteService(stats_service)
backlink_service = BacklinkService(website_service)


@router.get("", response_model=ApiResponse[List[WebsiteWithStats]])
async def list_websites(
    category: Optional[str] = None,
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_db)
):
    """List active websites with their backlink statistics"""
    outcome = await stats_service.safe_website_stats(session, WebsiteFilter.from_params(category, search))
    if not outcome.ok:
        return JSONResponse(
            status_code=500,
            content={"data": [], "success": False, "message": "Failed to fetch websites"}
        )
    return ApiResponse(data=outcome.data)


@router.post("", response_model=ApiResponse[WebsiteWithStats])
async def create_website(
    website_data: WebsiteCreate,
    session: AsyncSession = Depends(get_db)
):
    """Create a new website"""
    website = await website_service.create(session, website_data)
    return ApiResponse(data=website, message="Website created successfully")


@router.get("/{website_id}", response_model=ApiResponse[WebsiteWithStats])
async def get_website(
    website_id: int,
    session: AsyncSession = Depends(get_db)
):
    """Get a single active website"""
    return ApiResponse(data=await website_service.get(session, website_id))


@router.put("/{website_id}", response_model=ApiResponse[WebsiteWithStats])
async def update_website(
    website_id: int,
    update_data: WebsiteUpdate,
    session: AsyncSession = Depends(get_db)
):
    """Partially update a website"""
    website = await website_service.update(session, website_id, update_data)
    return ApiResponse(data=website, message="Website updated successfully")


@router.delete("/{website_id}", response_model=ApiResponse[None])
async def delete_website(
    website_id: int,
    session: AsyncSession = Depends(get_db)
):
    """Soft-delete a website"""
    await website_service.delete(session, website_id)
    return ApiResponse(message="Website deleted successfully")


@router.get("/{website_id}/backlinks", response_model=ApiResponse[List[BacklinkWithDetails]])
async def list_website_backlinks(
    website_id: int,
    status: Optional[List[str]] = Query(None),
    minDomainAuthority: Optional[str] = None,
    maxCost: Optional[str] = None,
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_db)
):
    """Backlinks of a website with resource details, best status first"""
    filters = BacklinkFilter.from_params(status, minDomainAuthority, maxCost, search)
    backlinks = await backlink_service.list_for_website(session, website_id, filters)
    return ApiResponse(data=backlinks)
