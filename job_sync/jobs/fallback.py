"""Degraded-mode data served while a source is cooling down."""

from abc import ABC, abstractmethod

from job_sync.jobs.models import RawJobRecord

SAMPLE_NOTICE = "Sample listing shown while the live job feed is temporarily unavailable."

# title, company, location, salary, employment type, skills, description
_SAMPLE_JOBS = [
    (
        "Senior React Developer",
        "TechCorp",
        "San Francisco, CA",
        "$120,000 - $160,000",
        "Full-time",
        ["React", "TypeScript", "Node.js", "GraphQL", "AWS"],
        "Join our team building next-generation web applications using React, "
        "TypeScript and modern development practices.",
    ),
    (
        "Backend Developer",
        "DataSolutions",
        "Remote",
        "$90,000 - $120,000",
        "Contract",
        ["Python", "Django", "PostgreSQL", "Docker"],
        "Design and maintain APIs and data pipelines for a growing analytics platform.",
    ),
]


class FallbackProvider(ABC):
    """Supplies records for a source that cannot be queried right now."""

    @abstractmethod
    def records_for(self, source: str, query: str, location: str, page_size: int) -> list[RawJobRecord]:
        ...


class SampleFallbackProvider(FallbackProvider):
    """A small fixed sample per source, clearly marked as such."""

    def records_for(self, source: str, query: str, location: str, page_size: int) -> list[RawJobRecord]:
        records = []
        for i, (title, company, loc, salary, emp_type, skills, description) in enumerate(_SAMPLE_JOBS, 1):
            records.append(RawJobRecord(
                source=source,
                provider_id=f"sample_{source}_{i}",
                title=title,
                company=company,
                location=loc,
                is_remote=loc == "Remote",
                description=f"{SAMPLE_NOTICE} {description}",
                salary_text=salary,
                employment_type=emp_type,
                skills=list(skills),
                is_fallback=True,
            ))
        return records[:max(page_size, 0)]


class EmptyFallbackProvider(FallbackProvider):
    """Serve nothing while a source cools down."""

    def records_for(self, source: str, query: str, location: str, page_size: int) -> list[RawJobRecord]:
        return []
