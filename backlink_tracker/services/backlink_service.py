import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backlink_tracker.errors import ConflictError, InvalidRequestError, NotFoundError, is_unique_violation
from backlink_tracker.models import BACKLINK_STATUSES, Backlink, Resource, Website
from backlink_tracker.schemas import (
    BacklinkBulkUpdate, BacklinkCreate, BacklinkResponse, BacklinkUpdate, BacklinkWithDetails,
    ResourceResponse, WebsiteResponse
)
from backlink_tracker.services.query_builder import BacklinkFilter, UpdateSet, backlink_detail_order
from backlink_tracker.services.resource_service import ResourceService
from backlink_tracker.services.website_service import WebsiteService

logger = logging.getLogger(__name__)

DUPLICATE_PAIR = "A backlink for this website and resource already exists"


def check_status(status: Optional[str]) -> Optional[str]:
    if status is None:
        return None
    if status not in BACKLINK_STATUSES:
        raise InvalidRequestError("Invalid status value")
    return status


class BacklinkService:
    def __init__(
        self,
        websites: Optional[WebsiteService] = None,
        resources: Optional[ResourceService] = None
    ):
        self.websites = websites or WebsiteService()
        self.resources = resources or ResourceService()

    async def list_for_website(
        self,
        session: AsyncSession,
        website_id: int,
        filters: Optional[BacklinkFilter] = None
    ) -> List[BacklinkWithDetails]:
        """Backlinks of one website joined with resource and website, filtered in process."""
        await self.websites.require_active(session, website_id)

        stmt = (
            select(Backlink, Resource, Website)
            .join(Resource, Backlink.resource_id == Resource.id)
            .join(Website, Backlink.website_id == Website.id)
            .where(Backlink.website_id == website_id, Resource.is_active == True)
            .order_by(*backlink_detail_order(), Backlink.id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        details = [
            BacklinkWithDetails(
                **BacklinkResponse.model_validate(backlink).model_dump(),
                resource=ResourceResponse.model_validate(resource),
                website=WebsiteResponse.model_validate(website),
            )
            for backlink, resource, website in result.all()
        ]
        return (filters or BacklinkFilter()).apply(details)

    async def get(self, session: AsyncSession, backlink_id: int) -> BacklinkResponse:
        backlink = await session.get(Backlink, backlink_id, populate_existing=True)
        if not backlink:
            raise NotFoundError("Backlink not found")
        return BacklinkResponse.model_validate(backlink)

    async def create(self, session: AsyncSession, data: BacklinkCreate) -> BacklinkResponse:
        status = check_status(data.status)
        await self.websites.require_active(session, data.website_id)
        await self.resources.require_active(session, data.resource_id)

        existing = await session.execute(
            select(Backlink.id).where(
                Backlink.website_id == data.website_id,
                Backlink.resource_id == data.resource_id
            )
        )
        if existing.first():
            raise ConflictError(DUPLICATE_PAIR)

        backlink = Backlink(**data.model_dump(exclude={"status"}), status=status)
        session.add(backlink)
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            if is_unique_violation(e, "backlinks", "website_id", constraint="uq_backlinks_website_resource"):
                raise ConflictError(DUPLICATE_PAIR)
            raise
        await session.refresh(backlink)
        return BacklinkResponse.model_validate(backlink)

    async def update(self, session: AsyncSession, backlink_id: int, data: BacklinkUpdate) -> BacklinkResponse:
        changes = UpdateSet.from_model(data)
        if not changes:
            raise InvalidRequestError("No fields to update")
        check_status(changes.values.get("status"))

        result = await session.execute(changes.lower(Backlink, Backlink.id == backlink_id))
        if result.rowcount == 0:
            await session.rollback()
            raise NotFoundError("Backlink not found")
        await session.commit()
        return await self.get(session, backlink_id)

    async def bulk_update(self, session: AsyncSession, data: BacklinkBulkUpdate) -> int:
        """Apply one partial update to many backlinks in a single statement."""
        changes = UpdateSet.from_model(data.updates)
        if not changes:
            raise InvalidRequestError("No fields to update")
        check_status(changes.values.get("status"))

        ids = sorted(set(data.backlink_ids))
        async with session.begin():
            result = await session.execute(changes.lower(Backlink, Backlink.id.in_(ids)))
        logger.info(f"Bulk-updated {result.rowcount} of {len(ids)} backlinks ({', '.join(changes.fields())})")
        return result.rowcount

    async def delete(self, session: AsyncSession, backlink_id: int) -> None:
        result = await session.execute(
            delete(Backlink)
            .where(Backlink.id == backlink_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await session.rollback()
            raise NotFoundError("Backlink not found")
        await session.commit()
