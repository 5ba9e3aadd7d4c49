"""Reference-list endpoints: website categories and backlink statuses.

Both lists share one handler set; each router binds it to its own service.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from backlink_tracker.database import get_db
from backlink_tracker.schemas import ApiResponse, LookupCreate, LookupResponse, LookupUpdate
from backlink_tracker.services.lookup_service import LookupService, backlink_statuses, website_categories


def build_router(prefix: str, tag: str, service: LookupService, title: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("", response_model=ApiResponse[List[LookupResponse]])
    async def list_items(session: AsyncSession = Depends(get_db)):
        items = await service.list_active(session)
        return ApiResponse(data=[LookupResponse.model_validate(item) for item in items])

    @router.post("", response_model=ApiResponse[LookupResponse])
    async def create_item(
        item_data: LookupCreate,
        session: AsyncSession = Depends(get_db)
    ):
        item = await service.create(session, item_data)
        return ApiResponse(
            data=LookupResponse.model_validate(item),
            message=f"{title} created successfully"
        )

    @router.put("/{item_id}", response_model=ApiResponse[LookupResponse])
    async def update_item(
        item_id: int,
        item_data: LookupUpdate,
        session: AsyncSession = Depends(get_db)
    ):
        item = await service.update(session, item_id, item_data)
        return ApiResponse(
            data=LookupResponse.model_validate(item),
            message=f"{title} updated successfully"
        )

    @router.delete("/{item_id}", response_model=ApiResponse[None])
    async def delete_item(
        item_id: int,
        session: AsyncSession = Depends(get_db)
    ):
        await service.delete(session, item_id)
        return ApiResponse(message=f"{title} deleted successfully")

    return router


website_categories_router = build_router(
    "/api/website-categories", "website-categories", website_categories, "Category"
)
backlink_statuses_router = build_router(
    "/api/backlink-statuses", "backlink-statuses", backlink_statuses, "Status"
)
