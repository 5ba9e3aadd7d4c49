"""Filter, pagination and update-set building.

Criteria are collected into small value objects first and only then lowered
to SQLAlchemy clauses, so the count query and the page query of a listing
always share one predicate list and every value travels as a bound parameter.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import String, case, func, or_, update

from backlink_tracker.models import Backlink, Resource, Website

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50

# Lower rank sorts first; unknown statuses go last.
STATUS_PRIORITY = {
    "live": 1,
    "placed": 2,
    "pending": 3,
    "rejected": 5,
    "removed": 6,
}
OTHER_STATUS_RANK = 7


def coerce_positive_int(value: Any, default: int) -> int:
    """Parse query-string numbers; absent, non-numeric or non-positive gives ``default``."""
    if value is None:
        return default
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def coerce_number(value: Any) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def contains_ci(column, term: str):
    """Case-insensitive substring match with LIKE wildcards escaped."""
    return func.lower(column, type_=String).contains(term.lower(), autoescape=True)


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_params(cls, page: Any = None, limit: Any = None) -> "PageRequest":
        return cls(
            page=coerce_positive_int(page, DEFAULT_PAGE),
            limit=coerce_positive_int(limit, DEFAULT_LIMIT),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit) if total > 0 else 0

    def pagination(self, total: int) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "totalPages": self.total_pages(total),
        }


@dataclass(frozen=True)
class ResourceFilter:
    category: Optional[str] = None
    search: Optional[str] = None

    @classmethod
    def from_params(cls, category: Optional[str] = None, search: Optional[str] = None) -> "ResourceFilter":
        return cls(category=clean_text(category), search=clean_text(search))

    def predicates(self) -> list:
        clauses = [Resource.is_active == True]
        if self.category:
            clauses.append(Resource.category == self.category)
        if self.search:
            clauses.append(or_(
                contains_ci(Resource.domain, self.search),
                contains_ci(Resource.url, self.search),
            ))
        return clauses


@dataclass(frozen=True)
class WebsiteFilter:
    category: Optional[str] = None
    search: Optional[str] = None
    website_id: Optional[int] = None

    @classmethod
    def from_params(cls, category: Optional[str] = None, search: Optional[str] = None) -> "WebsiteFilter":
        return cls(category=clean_text(category), search=clean_text(search))

    def predicates(self) -> list:
        clauses = [Website.is_active == True]
        if self.website_id is not None:
            clauses.append(Website.id == self.website_id)
        if self.category:
            clauses.append(Website.category == self.category)
        if self.search:
            clauses.append(or_(
                contains_ci(Website.domain, self.search),
                contains_ci(Website.name, self.search),
            ))
        return clauses


def backlink_detail_order() -> list:
    """Status priority, then domain authority (high first), then domain."""
    status_rank = case(STATUS_PRIORITY, value=Backlink.status, else_=OTHER_STATUS_RANK)
    return [status_rank, Resource.domain_authority.desc(), Resource.domain.asc()]


def _split_statuses(values: Optional[Iterable[str]]) -> frozenset:
    statuses = set()
    for value in values or ():
        for part in value.split(","):
            part = part.strip().lower()
            if part and part != "all":
                statuses.add(part)
    return frozenset(statuses)


@dataclass(frozen=True)
class BacklinkFilter:
    """In-process filter over a website's backlink detail list."""
    statuses: frozenset = field(default_factory=frozenset)
    min_domain_authority: Optional[float] = None
    max_cost: Optional[float] = None
    search: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        status: Optional[Iterable[str]] = None,
        min_domain_authority: Any = None,
        max_cost: Any = None,
        search: Optional[str] = None,
    ) -> "BacklinkFilter":
        return cls(
            statuses=_split_statuses(status),
            min_domain_authority=coerce_number(min_domain_authority),
            max_cost=coerce_number(max_cost),
            search=clean_text(search),
        )

    def matches(self, backlink) -> bool:
        resource = backlink.resource
        if self.statuses and backlink.status not in self.statuses:
            return False
        if self.min_domain_authority is not None and resource.domain_authority < self.min_domain_authority:
            return False
        if self.max_cost is not None and (resource.cost or 0) > self.max_cost:
            return False
        if self.search and self.search.lower() not in resource.domain.lower():
            return False
        return True

    def apply(self, backlinks: Sequence) -> list:
        return [b for b in backlinks if self.matches(b)]


@dataclass
class UpdateSet:
    """Column assignments for a partial update, lowered to an UPDATE statement."""
    values: dict = field(default_factory=dict)

    @classmethod
    def from_model(cls, model: BaseModel, nullable: Sequence[str] = ()) -> "UpdateSet":
        """Keep explicitly provided fields.

        ``None`` means "not given" except for the ``nullable`` fields, where
        ``None`` or an empty string clears the column.
        """
        values = {}
        for key, value in model.model_dump(exclude_unset=True).items():
            if key in nullable:
                values[key] = value if value != "" else None
            elif value is not None:
                values[key] = value
        return cls(values)

    def __bool__(self) -> bool:
        return bool(self.values)

    def __contains__(self, key: str) -> bool:
        return key in self.values

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value

    def fields(self) -> List[str]:
        return sorted(self.values)

    def lower(self, model, *where):
        """Build ``UPDATE <table> SET ..., updated_at = now() WHERE ...``."""
        return (
            update(model)
            .where(*where)
            .values(**self.values, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
