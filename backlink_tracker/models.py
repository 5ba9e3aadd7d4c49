from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Text, Numeric, Boolean, ForeignKey,
    UniqueConstraint, CheckConstraint, Index
)
from sqlalchemy.sql import func
import enum
from backlink_tracker.database import Base


class BacklinkStatus(str, enum.Enum):
    pending = "pending"
    requested = "requested"
    placed = "placed"
    live = "live"
    removed = "removed"
    rejected = "rejected"


class ResourceCategory(str, enum.Enum):
    ai_directory = "ai-directory"
    tools_directory = "tools-directory"
    startup_directory = "startup-directory"
    saas_directory = "saas-directory"
    project_directory = "project-directory"


BACKLINK_STATUSES = [s.value for s in BacklinkStatus]
RESOURCE_CATEGORIES = [c.value for c in ResourceCategory]


def _in_list(column: str, values: list[str]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class Website(Base):
    __tablename__ = "websites"

    id = Column(Integer, primary_key=True, index=True)
    domain = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("domain", name="uq_websites_domain"),
    )


class Resource(Base):
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, index=True)
    domain = Column(String(255), nullable=False)
    url = Column(String(2048), nullable=False)
    contact_email = Column(String(255), nullable=True)
    domain_authority = Column(Integer, default=0, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    cost = Column(Numeric(10, 2, asdecimal=False), default=0, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("domain", name="uq_resources_domain"),
        CheckConstraint("domain_authority >= 0 AND domain_authority <= 100", name="ck_resources_domain_authority"),
        CheckConstraint("cost >= 0", name="ck_resources_cost"),
        CheckConstraint(_in_list("category", RESOURCE_CATEGORIES), name="ck_resources_category"),
    )


class Backlink(Base):
    """One placement opportunity of a resource on behalf of a website."""
    __tablename__ = "backlinks"

    id = Column(Integer, primary_key=True, index=True)
    website_id = Column(Integer, ForeignKey("websites.id"), nullable=False, index=True)
    resource_id = Column(Integer, ForeignKey("resources.id"), nullable=False, index=True)
    status = Column(String(20), default=BacklinkStatus.pending.value, nullable=False)
    anchor_text = Column(String(255), nullable=True)
    target_url = Column(String(2048), nullable=True)
    placement_date = Column(Date, nullable=True)
    removal_date = Column(Date, nullable=True)
    cost = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("website_id", "resource_id", name="uq_backlinks_website_resource"),
        CheckConstraint(_in_list("status", BACKLINK_STATUSES), name="ck_backlinks_status"),
        Index("ix_backlinks_status", "status"),
    )


class WebsiteCategory(Base):
    __tablename__ = "website_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, default="", nullable=False)
    color = Column(String(20), default="#6b7280", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("name", name="uq_website_categories_name"),
    )


class BacklinkStatusDefinition(Base):
    __tablename__ = "backlink_statuses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(20), nullable=False)
    description = Column(Text, default="", nullable=False)
    color = Column(String(20), default="#6b7280", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("name", name="uq_backlink_statuses_name"),
    )


class WebsiteExtendedInfo(Base):
    __tablename__ = "website_extended_info"

    id = Column(Integer, primary_key=True, index=True)
    website_id = Column(Integer, ForeignKey("websites.id", ondelete="CASCADE"), nullable=False)
    support_email = Column(String(255), nullable=True)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    url = Column(String(2048), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("website_id", name="uq_website_extended_info_website_id"),
    )
