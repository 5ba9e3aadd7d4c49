"""Rollup statistics over websites, resources and backlinks.

Nothing here is stored: every figure is recomputed from the current rows.
Two completion metrics exist and are intentionally different:

* per website, ``completionRate`` counts *placed* backlinks;
* on the dashboard, ``averageCompletionRate`` counts *live* backlinks.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Generic, List, Optional, TypeVar

from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backlink_tracker.models import Backlink, BacklinkStatus, Resource, Website
from backlink_tracker.schemas import (
    DashboardStats, ResourceResponse, ResourceWithStats, WebsiteResponse, WebsiteWithStats
)
from backlink_tracker.services.query_builder import WebsiteFilter

logger = logging.getLogger(__name__)

T = TypeVar("T")


def completion_rate(numerator: int, total: int) -> float:
    """Percentage rounded half-up to one decimal; 0 when there is nothing to divide."""
    if not total or total <= 0:
        return 0.0
    rate = Decimal(numerator * 100) / Decimal(total)
    return float(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def count_status(status: BacklinkStatus):
    return func.count(case((Backlink.status == status.value, Backlink.id)))


@dataclass
class StatsResult(Generic[T]):
    """An aggregate plus the failure that replaced it with defaults, if any."""
    data: T
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class StatsService:
    def website_stats_query(self, filters: WebsiteFilter):
        total = func.count(Backlink.id)
        return (
            select(
                Website,
                total.label("total_opportunities"),
                count_status(BacklinkStatus.live).label("live_backlinks"),
                count_status(BacklinkStatus.pending).label("pending_backlinks"),
                count_status(BacklinkStatus.placed).label("placed_backlinks"),
                count_status(BacklinkStatus.rejected).label("rejected_backlinks"),
                func.max(Backlink.updated_at).label("last_activity"),
            )
            # Outer join keeps websites without any backlinks.
            .outerjoin(Backlink, Backlink.website_id == Website.id)
            .where(*filters.predicates())
            .group_by(Website.id)
            .order_by(Website.name, Website.id)
            .execution_options(populate_existing=True)
        )

    def _website_row(self, row) -> WebsiteWithStats:
        website = WebsiteResponse.model_validate(row.Website)
        total = row.total_opportunities or 0
        placed = row.placed_backlinks or 0
        return WebsiteWithStats(
            **website.model_dump(),
            totalOpportunities=total,
            liveBacklinks=row.live_backlinks or 0,
            pendingBacklinks=row.pending_backlinks or 0,
            placedBacklinks=placed,
            rejectedBacklinks=row.rejected_backlinks or 0,
            completionRate=completion_rate(placed, total),
            lastActivity=row.last_activity,
        )

    async def website_stats(
        self,
        session: AsyncSession,
        filters: Optional[WebsiteFilter] = None
    ) -> List[WebsiteWithStats]:
        """Every active website matching ``filters`` with its backlink rollup."""
        result = await session.execute(self.website_stats_query(filters or WebsiteFilter()))
        return [self._website_row(row) for row in result.all()]

    async def website_summary(self, session: AsyncSession, website_id: int) -> Optional[WebsiteWithStats]:
        rows = await self.website_stats(session, WebsiteFilter(website_id=website_id))
        return rows[0] if rows else None

    def resource_stats_query(self):
        return (
            select(
                Resource,
                func.count(Backlink.id).label("backlink_count"),
                count_status(BacklinkStatus.live).label("live_backlinks"),
            )
            .outerjoin(Backlink, Backlink.resource_id == Resource.id)
            .group_by(Resource.id)
            .execution_options(populate_existing=True)
        )

    def resource_row(self, row) -> ResourceWithStats:
        resource = ResourceResponse.model_validate(row.Resource)
        return ResourceWithStats(
            **resource.model_dump(),
            backlink_count=row.backlink_count or 0,
            live_backlinks=row.live_backlinks or 0,
        )

    async def resource_summary(self, session: AsyncSession, resource_id: int) -> Optional[ResourceWithStats]:
        stmt = self.resource_stats_query().where(
            Resource.id == resource_id,
            Resource.is_active == True
        )
        row = (await session.execute(stmt)).first()
        return self.resource_row(row) if row else None

    async def dashboard(self, session: AsyncSession) -> DashboardStats:
        total_websites = await session.scalar(
            select(func.count()).select_from(Website).where(Website.is_active == True)
        )
        total_resources = await session.scalar(
            select(func.count()).select_from(Resource).where(Resource.is_active == True)
        )
        opportunities = (await session.execute(
            select(
                func.count(Backlink.id).label("total"),
                count_status(BacklinkStatus.live).label("live"),
            )
            .select_from(Backlink)
            .join(Website, Backlink.website_id == Website.id)
            .join(Resource, Backlink.resource_id == Resource.id)
            .where(Website.is_active == True, Resource.is_active == True)
        )).one()

        total = opportunities.total or 0
        live = opportunities.live or 0
        return DashboardStats(
            totalWebsites=total_websites or 0,
            totalResources=total_resources or 0,
            totalOpportunities=total,
            liveBacklinks=live,
            averageCompletionRate=completion_rate(live, total),
        )

    async def safe_dashboard(self, session: AsyncSession) -> StatsResult[DashboardStats]:
        """Dashboard figures, or zeroed defaults plus the error if the store failed."""
        try:
            return StatsResult(await self.dashboard(session))
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            logger.error(f"Dashboard aggregation failed: {e}")
            return StatsResult(DashboardStats(), error=e)

    async def safe_website_stats(
        self,
        session: AsyncSession,
        filters: Optional[WebsiteFilter] = None
    ) -> StatsResult[List[WebsiteWithStats]]:
        try:
            return StatsResult(await self.website_stats(session, filters))
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            logger.error(f"Website aggregation failed: {e}")
            return StatsResult([], error=e)
