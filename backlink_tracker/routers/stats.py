from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from backlink_tracker.database import get_db
from backlink_tracker.schemas import ApiResponse, DashboardStats
from backlink_tracker.services.stats_service import StatsService

router = APIRouter(prefix="/api/stats", tags=["stats"])
stats_service = StatsService()


@router.get("", response_model=ApiResponse[DashboardStats])
async def get_dashboard_stats(session: AsyncSession = Depends(get_db)):
    """Overall statistics for the dashboard"""
    outcome = await stats_service.safe_dashboard(session)
    if not outcome.ok:
        return JSONResponse(
            status_code=500,
            content={
                "data": outcome.data.model_dump(),
                "success": False,
                "message": "Failed to fetch statistics",
            }
        )
    return ApiResponse(data=outcome.data)
