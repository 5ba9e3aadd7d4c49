from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from backlink_tracker.errors import NotFoundError
from backlink_tracker.models import Website, WebsiteExtendedInfo
from backlink_tracker.schemas import WebsiteInfoResponse, WebsiteInfoUpdate


def _to_response(info: WebsiteExtendedInfo) -> WebsiteInfoResponse:
    return WebsiteInfoResponse(
        websiteId=info.website_id,
        supportEmail=info.support_email,
        title=info.title,
        description=info.description,
        url=info.url,
        lastUpdated=info.updated_at,
    )


def _blank(value: Optional[str]) -> Optional[str]:
    return value or None


class WebsiteInfoService:
    """Extra descriptive fields for a website, one row per website."""

    async def list_all(self, session: AsyncSession) -> List[WebsiteInfoResponse]:
        result = await session.execute(
            select(WebsiteExtendedInfo).order_by(WebsiteExtendedInfo.website_id)
        )
        return [_to_response(info) for info in result.scalars().all()]

    async def get(self, session: AsyncSession, website_id: int) -> Optional[WebsiteInfoResponse]:
        result = await session.execute(
            select(WebsiteExtendedInfo).where(WebsiteExtendedInfo.website_id == website_id)
        )
        info = result.scalar_one_or_none()
        return _to_response(info) if info else None

    async def save(self, session: AsyncSession, website_id: int, data: WebsiteInfoUpdate) -> WebsiteInfoResponse:
        """Create or replace the extended info of an active website."""
        website = await session.get(Website, website_id)
        if not website or not website.is_active:
            raise NotFoundError("Website not found")

        result = await session.execute(
            select(WebsiteExtendedInfo).where(WebsiteExtendedInfo.website_id == website_id)
        )
        info = result.scalar_one_or_none()
        if info is None:
            info = WebsiteExtendedInfo(website_id=website_id)
            session.add(info)

        info.support_email = _blank(data.supportEmail)
        info.title = _blank(data.title)
        info.description = _blank(data.description)
        info.url = _blank(data.url)

        await session.commit()
        await session.refresh(info)
        return _to_response(info)

    async def delete(self, session: AsyncSession, website_id: int) -> None:
        result = await session.execute(
            delete(WebsiteExtendedInfo).where(WebsiteExtendedInfo.website_id == website_id)
        )
        if result.rowcount == 0:
            await session.rollback()
            raise NotFoundError("Website information not found")
        await session.commit()
