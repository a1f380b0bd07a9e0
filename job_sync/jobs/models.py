"""Job record data models."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class EmploymentType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"


@dataclass
class RawJobRecord:
    """A provider record after parsing, before normalization.

    ``source`` tags which adapter produced it; ``payload`` keeps the provider's
    original item for debugging.
    """

    source: str
    provider_id: str
    title: str
    company: str = ""
    location: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    is_remote: bool = False
    description: str = ""
    qualifications: list[str] = field(default_factory=list)
    salary_text: str = ""
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    salary_currency: str = ""
    employment_type: str = ""
    posted_at: Optional[datetime] = None
    skills: list[str] = field(default_factory=list)
    company_size_hint: str = ""
    company_website: str = ""
    url: str = ""
    is_fallback: bool = False
    payload: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class CompanyInfo:
    name: str
    industry: str
    size: str
    culture: tuple[str, ...] = ()
    tech_stack: tuple[str, ...] = ()
    website: str = ""
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "industry": self.industry,
            "size": self.size,
            "culture": list(self.culture),
            "tech_stack": list(self.tech_stack),
            "website": self.website,
            "description": self.description,
        }


@dataclass(frozen=True)
class CanonicalJob:
    """The normalized, provider-agnostic job posting served to callers."""

    id: int
    source: str
    provider_id: str
    title: str
    company: str
    location: str
    employment_type: EmploymentType
    salary: str
    description: str
    requirements: tuple[str, ...] = ()
    posted_display: str = "Recently posted"
    posted_at: Optional[datetime] = None
    url: str = ""
    company_info: Optional[CompanyInfo] = None
    is_fallback: bool = False

    @property
    def dedup_key(self) -> str:
        return f"{self.title.strip().lower()}_{self.company.strip().lower()}"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "source": self.source,
            "provider_id": self.provider_id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "employment_type": self.employment_type.value,
            "salary": self.salary,
            "description": self.description,
            "requirements": list(self.requirements),
            "posted": self.posted_display,
            "posted_at": self.posted_at.isoformat() if self.posted_at else None,
            "url": self.url,
            "company_info": self.company_info.to_dict() if self.company_info else None,
            "is_fallback": self.is_fallback,
        }


@dataclass
class FetchResult:
    """One page of records returned by a source (or by its fallback)."""

    records: list[RawJobRecord] = field(default_factory=list)
    has_more: bool = False
    from_fallback: bool = False


@dataclass
class SyncStatus:
    """Outcome of the most recent sync cycle.

    A fresh instance replaces the previous one at the end of every cycle.
    """

    last_sync_time: Optional[datetime] = None
    next_sync_time: Optional[datetime] = None
    total_jobs_synced: int = 0
    successful_sources: list[str] = field(default_factory=list)
    failed_sources: list[str] = field(default_factory=list)
    degraded_sources: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    is_running: bool = False

    def copy(self) -> "SyncStatus":
        return replace(
            self,
            successful_sources=list(self.successful_sources),
            failed_sources=list(self.failed_sources),
            degraded_sources=list(self.degraded_sources),
            errors=list(self.errors),
        )

    def to_dict(self) -> dict:
        return {
            "last_sync_time": self.last_sync_time.isoformat() if self.last_sync_time else None,
            "next_sync_time": self.next_sync_time.isoformat() if self.next_sync_time else None,
            "total_jobs_synced": self.total_jobs_synced,
            "successful_sources": list(self.successful_sources),
            "failed_sources": list(self.failed_sources),
            "degraded_sources": list(self.degraded_sources),
            "errors": list(self.errors),
            "is_running": self.is_running,
        }
