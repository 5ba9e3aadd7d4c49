"""Reference lists kept as rows: website categories and backlink statuses."""

import logging
import re
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backlink_tracker.errors import ConflictError, InvalidRequestError, NotFoundError
from backlink_tracker.models import BACKLINK_STATUSES, BacklinkStatusDefinition, WebsiteCategory
from backlink_tracker.schemas import LookupCreate, LookupUpdate

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#6b7280"

DEFAULT_WEBSITE_CATEGORIES = [
    ("music", "Music-related websites and platforms", "#e11d48"),
    ("photo", "Photography and image-related services", "#0ea5e9"),
    ("text-to-speech", "TTS and voice generation platforms", "#8b5cf6"),
    ("image-editing", "Image editing and manipulation tools", "#f59e0b"),
    ("productivity", "Productivity and workflow tools", "#10b981"),
    ("saas", "Software as a Service platforms", "#3b82f6"),
    ("other", "Other miscellaneous categories", "#6b7280"),
]

DEFAULT_BACKLINK_STATUSES = [
    ("pending", "Backlink request is pending", "#f59e0b"),
    ("requested", "Backlink has been requested", "#3b82f6"),
    ("placed", "Backlink has been placed but not yet live", "#8b5cf6"),
    ("live", "Backlink is live and active", "#10b981"),
    ("removed", "Backlink has been removed", "#ef4444"),
    ("rejected", "Backlink request was rejected", "#dc2626"),
]


def normalize_name(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


class LookupService:
    """CRUD over one reference table with soft delete and unique names."""

    def __init__(self, model, label: str, allowed_names: Optional[Sequence[str]] = None):
        self.model = model
        self.label = label
        self.allowed_names = list(allowed_names) if allowed_names else None

    def _validate_name(self, name: str) -> str:
        name = normalize_name(name)
        if not name:
            raise InvalidRequestError(f"{self.label.capitalize()} name is required")
        if self.allowed_names is not None and name not in self.allowed_names:
            raise InvalidRequestError(
                f"{self.label.capitalize()} must be one of: {', '.join(self.allowed_names)}"
            )
        return name

    async def _by_name(self, session: AsyncSession, name: str):
        result = await session.execute(select(self.model).where(self.model.name == name))
        return result.scalar_one_or_none()

    async def _get_active(self, session: AsyncSession, item_id: int):
        item = await session.get(self.model, item_id)
        if not item or not item.is_active:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        return item

    async def list_active(self, session: AsyncSession) -> List:
        result = await session.execute(
            select(self.model).where(self.model.is_active == True).order_by(self.model.id)
        )
        return list(result.scalars().all())

    async def is_active_name(self, session: AsyncSession, name: str) -> bool:
        item = await self._by_name(session, normalize_name(name))
        return bool(item and item.is_active)

    async def create(self, session: AsyncSession, data: LookupCreate):
        name = self._validate_name(data.name)
        existing = await self._by_name(session, name)

        if existing and existing.is_active:
            raise ConflictError(f"A {self.label} with this name already exists")

        if existing:
            # Bring a soft-deleted entry back instead of tripping the unique name.
            existing.is_active = True
            existing.description = data.description or ""
            existing.color = data.color or DEFAULT_COLOR
            item = existing
        else:
            item = self.model(
                name=name,
                description=data.description or "",
                color=data.color or DEFAULT_COLOR,
                is_active=True,
            )
            session.add(item)

        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise ConflictError(f"A {self.label} with this name already exists")
        await session.refresh(item)
        return item

    async def update(self, session: AsyncSession, item_id: int, data: LookupUpdate):
        item = await self._get_active(session, item_id)

        if data.name:
            name = self._validate_name(data.name)
            other = await self._by_name(session, name)
            if other and other.id != item.id:
                raise ConflictError(f"A {self.label} with this name already exists")
            item.name = name
        if data.description is not None:
            item.description = data.description
        if data.color:
            item.color = data.color

        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise ConflictError(f"A {self.label} with this name already exists")
        await session.refresh(item)
        return item

    async def delete(self, session: AsyncSession, item_id: int) -> None:
        item = await self._get_active(session, item_id)
        item.is_active = False
        await session.commit()

    async def seed(self, session: AsyncSession, defaults) -> int:
        """Insert missing default rows; existing rows are left untouched."""
        existing = set((await session.execute(select(self.model.name))).scalars().all())
        added = 0
        for name, description, color in defaults:
            if name not in existing:
                session.add(self.model(name=name, description=description, color=color, is_active=True))
                added += 1
        if added:
            await session.flush()
            logger.info(f"Seeded {added} {self.label} rows")
        return added


website_categories = LookupService(WebsiteCategory, "category")
backlink_statuses = LookupService(BacklinkStatusDefinition, "status", allowed_names=BACKLINK_STATUSES)


async def seed_defaults(session: AsyncSession) -> None:
    await website_categories.seed(session, DEFAULT_WEBSITE_CATEGORIES)
    await backlink_statuses.seed(session, DEFAULT_BACKLINK_STATUSES)
