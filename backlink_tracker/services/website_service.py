import logging
from typing import Optional
from urllib.parse import urlparse

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backlink_tracker.errors import ConflictError, InvalidRequestError, NotFoundError, is_unique_violation
from backlink_tracker.models import Website
from backlink_tracker.schemas import WebsiteCreate, WebsiteResponse, WebsiteUpdate, WebsiteWithStats
from backlink_tracker.services.lookup_service import website_categories
from backlink_tracker.services.query_builder import UpdateSet
from backlink_tracker.services.stats_service import StatsService

logger = logging.getLogger(__name__)

DUPLICATE_DOMAIN = "A website with this domain already exists"


def normalize_domain(value: str) -> str:
    """Reduce a domain or URL to its lowercase host.

    ``https://Example.com/path`` and ``example.com`` both become ``example.com``.
    """
    value = (value or "").strip().lower()
    if not value:
        return ""
    parsed = urlparse(value if "://" in value else f"//{value}")
    return parsed.hostname or ""


class WebsiteService:
    def __init__(self, stats: Optional[StatsService] = None):
        self.stats = stats or StatsService()

    async def _check_category(self, session: AsyncSession, category: str) -> str:
        category = category.strip().lower()
        if not await website_categories.is_active_name(session, category):
            raise InvalidRequestError("Invalid category")
        return category

    async def _check_domain_free(self, session: AsyncSession, domain: str, exclude_id: Optional[int] = None):
        stmt = select(Website.id).where(Website.domain == domain)
        if exclude_id is not None:
            stmt = stmt.where(Website.id != exclude_id)
        if (await session.execute(stmt)).first():
            raise ConflictError(DUPLICATE_DOMAIN)

    def _clean_domain(self, raw: str) -> str:
        domain = normalize_domain(raw)
        if not domain:
            raise InvalidRequestError("Invalid domain")
        return domain

    async def get(self, session: AsyncSession, website_id: int) -> WebsiteWithStats:
        website = await self.stats.website_summary(session, website_id)
        if not website:
            raise NotFoundError("Website not found")
        return website

    async def require_active(self, session: AsyncSession, website_id: int) -> Website:
        website = await session.get(Website, website_id)
        if not website or not website.is_active:
            raise NotFoundError("Website not found")
        return website

    async def create(self, session: AsyncSession, data: WebsiteCreate) -> WebsiteWithStats:
        domain = self._clean_domain(data.domain)
        category = await self._check_category(session, data.category)
        await self._check_domain_free(session, domain)

        website = Website(domain=domain, name=data.name.strip(), category=category, is_active=True)
        session.add(website)
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            if is_unique_violation(e, "websites", "domain"):
                raise ConflictError(DUPLICATE_DOMAIN)
            raise
        await session.refresh(website)

        logger.info(f"Created website {website.id} ({domain})")
        return WebsiteWithStats(**WebsiteResponse.model_validate(website).model_dump())

    async def update(self, session: AsyncSession, website_id: int, data: WebsiteUpdate) -> WebsiteWithStats:
        changes = UpdateSet.from_model(data)
        if not changes:
            raise InvalidRequestError("No fields to update")
        await self.require_active(session, website_id)

        if "domain" in changes:
            domain = self._clean_domain(changes.values["domain"])
            await self._check_domain_free(session, domain, exclude_id=website_id)
            changes.set("domain", domain)
        if "category" in changes:
            changes.set("category", await self._check_category(session, changes.values["category"]))
        if "name" in changes:
            changes.set("name", changes.values["name"].strip())

        try:
            result = await session.execute(
                changes.lower(Website, Website.id == website_id, Website.is_active == True)
            )
            if result.rowcount == 0:
                await session.rollback()
                raise NotFoundError("Website not found")
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            if is_unique_violation(e, "websites", "domain"):
                raise ConflictError(DUPLICATE_DOMAIN)
            raise

        return await self.get(session, website_id)

    async def delete(self, session: AsyncSession, website_id: int) -> None:
        """Soft delete; a second delete of the same website is a not-found."""
        result = await session.execute(
            UpdateSet({"is_active": False}).lower(Website, Website.id == website_id, Website.is_active == True)
        )
        if result.rowcount == 0:
            await session.rollback()
            raise NotFoundError("Website not found")
        await session.commit()
        logger.info(f"Soft-deleted website {website_id}")
