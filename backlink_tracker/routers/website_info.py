from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from backlink_tracker.database import get_db
from backlink_tracker.schemas import ApiResponse, WebsiteInfoResponse, WebsiteInfoSave, WebsiteInfoUpdate
from backlink_tracker.services.website_info_service import WebsiteInfoService

router = APIRouter(prefix="/api/website-info", tags=["website-info"])
website_info_service = WebsiteInfoService()


@router.get("", response_model=ApiResponse[List[WebsiteInfoResponse]])
async def list_website_info(session: AsyncSession = Depends(get_db)):
    """All stored website information"""
    return ApiResponse(data=await website_info_service.list_all(session))


@router.post("", response_model=ApiResponse[WebsiteInfoResponse])
async def save_website_info(
    info_data: WebsiteInfoSave,
    session: AsyncSession = Depends(get_db)
):
    """Create or replace the information of a website"""
    info = await website_info_service.save(session, info_data.websiteId, info_data)
    return ApiResponse(data=info, message="Website information saved successfully")


@router.get("/{website_id}", response_model=ApiResponse[Optional[WebsiteInfoResponse]])
async def get_website_info(
    website_id: int,
    session: AsyncSession = Depends(get_db)
):
    """Information for one website; data is null when none was saved"""
    return ApiResponse(data=await website_info_service.get(session, website_id))


@router.put("/{website_id}", response_model=ApiResponse[WebsiteInfoResponse])
async def update_website_info(
    website_id: int,
    info_data: WebsiteInfoUpdate,
    session: AsyncSession = Depends(get_db)
):
    """Replace the information of a website"""
    info = await website_info_service.save(session, website_id, info_data)
    return ApiResponse(data=info, message="Website information updated successfully")


@router.delete("/{website_id}", response_model=ApiResponse[None])
async def delete_website_info(
    website_id: int,
    session: AsyncSession = Depends(get_db)
):
    """Remove the information of a website"""
    await website_info_service.delete(session, website_id)
    return ApiResponse(message="Website information deleted successfully")
