import logging
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backlink_tracker.errors import ConflictError, InvalidRequestError, NotFoundError, is_unique_violation
from backlink_tracker.models import RESOURCE_CATEGORIES, Backlink, Resource
from backlink_tracker.schemas import ResourceCreate, ResourceUpdate, ResourceWithStats
from backlink_tracker.services.query_builder import PageRequest, ResourceFilter, UpdateSet
from backlink_tracker.services.stats_service import StatsService
from backlink_tracker.services.website_service import normalize_domain

logger = logging.getLogger(__name__)

DUPLICATE_DOMAIN = "A resource with this domain already exists"


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ResourceService:
    def __init__(self, stats: Optional[StatsService] = None):
        self.stats = stats or StatsService()

    def _check_category(self, category: str) -> str:
        if category not in RESOURCE_CATEGORIES:
            raise InvalidRequestError("Invalid category")
        return category

    def _clean_domain(self, raw: str) -> str:
        domain = normalize_domain(raw)
        if not domain:
            raise InvalidRequestError("Invalid domain")
        return domain

    async def _check_domain_free(self, session: AsyncSession, domain: str, exclude_id: Optional[int] = None):
        stmt = select(Resource.id).where(Resource.domain == domain)
        if exclude_id is not None:
            stmt = stmt.where(Resource.id != exclude_id)
        if (await session.execute(stmt)).first():
            raise ConflictError(DUPLICATE_DOMAIN)

    async def list_page(
        self,
        session: AsyncSession,
        filters: ResourceFilter,
        page: PageRequest
    ) -> Tuple[List[ResourceWithStats], int]:
        """One page of matching resources plus the total match count.

        Both queries are built from the same predicate list, so ``total``
        always describes the filter the page was cut from.
        """
        predicates = filters.predicates()

        total = await session.scalar(
            select(func.count()).select_from(Resource).where(*predicates)
        ) or 0

        # Past the last row there is nothing to fetch; the bounds also keep
        # oversized page/limit values out of the store's integer range.
        if page.offset >= total:
            return [], total

        stmt = (
            self.stats.resource_stats_query()
            .where(*predicates)
            .order_by(Resource.domain_authority.desc(), Resource.domain.asc())
            .limit(min(page.limit, total))
            .offset(page.offset)
        )
        rows = (await session.execute(stmt)).all()
        return [self.stats.resource_row(row) for row in rows], total

    async def get(self, session: AsyncSession, resource_id: int) -> ResourceWithStats:
        resource = await self.stats.resource_summary(session, resource_id)
        if not resource:
            raise NotFoundError("Resource not found")
        return resource

    async def require_active(self, session: AsyncSession, resource_id: int) -> Resource:
        resource = await session.get(Resource, resource_id)
        if not resource or not resource.is_active:
            raise NotFoundError("Resource not found")
        return resource

    async def create(self, session: AsyncSession, data: ResourceCreate) -> ResourceWithStats:
        category = self._check_category(data.category)
        domain = self._clean_domain(data.domain)
        await self._check_domain_free(session, domain)

        resource = Resource(
            domain=domain,
            url=data.url.strip(),
            contact_email=_blank_to_none(data.contact_email),
            domain_authority=data.domain_authority,
            category=category,
            cost=data.cost,
            notes=_blank_to_none(data.notes),
            is_active=True,
        )
        session.add(resource)
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            if is_unique_violation(e, "resources", "domain"):
                raise ConflictError(DUPLICATE_DOMAIN)
            raise
        await session.refresh(resource)

        logger.info(f"Created resource {resource.id} ({domain})")
        return await self.get(session, resource.id)

    async def update(self, session: AsyncSession, resource_id: int, data: ResourceUpdate) -> ResourceWithStats:
        changes = UpdateSet.from_model(data, nullable=("contact_email", "notes"))
        if not changes:
            raise InvalidRequestError("No fields to update")
        await self.require_active(session, resource_id)

        if "category" in changes:
            self._check_category(changes.values["category"])
        if "domain" in changes:
            domain = self._clean_domain(changes.values["domain"])
            await self._check_domain_free(session, domain, exclude_id=resource_id)
            changes.set("domain", domain)

        try:
            result = await session.execute(
                changes.lower(Resource, Resource.id == resource_id, Resource.is_active == True)
            )
            if result.rowcount == 0:
                await session.rollback()
                raise NotFoundError("Resource not found")
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            if is_unique_violation(e, "resources", "domain"):
                raise ConflictError(DUPLICATE_DOMAIN)
            raise

        return await self.get(session, resource_id)

    async def delete(self, session: AsyncSession, resource_id: int) -> int:
        """Remove the resource's backlinks and soft-delete it atomically.

        Returns the number of backlink rows removed. If the resource is
        missing or already inactive the whole transaction rolls back.
        """
        async with session.begin():
            removed = await session.execute(
                delete(Backlink)
                .where(Backlink.resource_id == resource_id)
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(
                UpdateSet({"is_active": False}).lower(
                    Resource, Resource.id == resource_id, Resource.is_active == True
                )
            )
            if result.rowcount == 0:
                raise NotFoundError("Resource not found")

        removed_count = removed.rowcount or 0
        logger.info(f"Deleted resource {resource_id}, removed {removed_count} backlinks")
        return removed_count
