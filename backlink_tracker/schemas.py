from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, date
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


# Envelopes
class ApiResponse(BaseModel, Generic[T]):
    data: Optional[T] = None
    success: bool = True
    message: Optional[str] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    pagination: Pagination
    success: bool = True
    message: Optional[str] = None


# Websites
class WebsiteCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    domain: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)


class WebsiteUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    domain: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)


class WebsiteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    domain: str
    name: str
    category: str
    created_at: datetime
    updated_at: datetime
    is_active: bool


class WebsiteWithStats(WebsiteResponse):
    totalOpportunities: int = 0
    liveBacklinks: int = 0
    pendingBacklinks: int = 0
    placedBacklinks: int = 0
    rejectedBacklinks: int = 0
    completionRate: float = 0
    lastActivity: Optional[datetime] = None


# Resources
class ResourceCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    domain: str = Field(min_length=1)
    url: str = Field(min_length=1)
    contact_email: Optional[str] = None
    domain_authority: int = Field(default=0, ge=0, le=100)
    category: str = Field(min_length=1)
    cost: float = Field(default=0, ge=0)
    notes: Optional[str] = None


class ResourceUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    domain: Optional[str] = Field(default=None, min_length=1)
    url: Optional[str] = Field(default=None, min_length=1)
    contact_email: Optional[str] = None
    domain_authority: Optional[int] = Field(default=None, ge=0, le=100)
    category: Optional[str] = None
    cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class ResourceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    domain: str
    url: str
    contact_email: Optional[str] = None
    domain_authority: int = 0
    category: str
    cost: float = 0
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    is_active: bool


class ResourceWithStats(ResourceResponse):
    backlink_count: int = 0
    live_backlinks: int = 0


# Backlinks
class BacklinkCreate(BaseModel):
    website_id: int
    resource_id: int
    status: str = "pending"
    anchor_text: Optional[str] = None
    target_url: Optional[str] = None
    placement_date: Optional[date] = None
    removal_date: Optional[date] = None
    cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class BacklinkUpdate(BaseModel):
    status: Optional[str] = None
    anchor_text: Optional[str] = None
    target_url: Optional[str] = None
    placement_date: Optional[date] = None
    removal_date: Optional[date] = None
    cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class BacklinkBulkUpdate(BaseModel):
    backlink_ids: List[int] = Field(min_length=1)
    updates: BacklinkUpdate


class BacklinkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    website_id: int
    resource_id: int
    status: str
    anchor_text: Optional[str] = None
    target_url: Optional[str] = None
    placement_date: Optional[date] = None
    removal_date: Optional[date] = None
    cost: Optional[float] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class BacklinkWithDetails(BacklinkResponse):
    resource: ResourceResponse
    website: WebsiteResponse


class BulkUpdateResult(BaseModel):
    updated: int


class ResourceDeleteResult(BaseModel):
    removed_backlinks: int


# Dashboard
class DashboardStats(BaseModel):
    totalWebsites: int = 0
    totalResources: int = 0
    totalOpportunities: int = 0
    liveBacklinks: int = 0
    averageCompletionRate: float = 0


# Lookup lists (website categories, backlink statuses)
class LookupCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    color: Optional[str] = None


class LookupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    color: Optional[str] = None


class LookupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str = ""
    color: str
    is_active: bool


# Website extended info
class WebsiteInfoUpdate(BaseModel):
    supportEmail: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None


class WebsiteInfoSave(WebsiteInfoUpdate):
    websiteId: int


class WebsiteInfoResponse(BaseModel):
    websiteId: int
    supportEmail: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    lastUpdated: datetime
