"""In-memory job cache with filtered queries and aggregate statistics."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional

from job_sync.jobs.models import CanonicalJob
from job_sync.utils.text_processing import first_amount

logger = logging.getLogger("job_sync.cache")

DEFAULT_LIMIT = 50
TOP_REQUIREMENTS = 10
MIN_YEARLY_SALARY = 1000  # hourly figures are left out of the salary average


@dataclass
class JobFilters:
    query: str = ""
    location: str = ""
    employment_type: str = ""
    company: str = ""
    salary_min: Optional[float] = None
    limit: int = DEFAULT_LIMIT


@dataclass
class JobStatistics:
    total_jobs: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_location: dict[str, int] = field(default_factory=dict)
    by_company: dict[str, int] = field(default_factory=dict)
    average_salary: int = 0
    top_requirements: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_jobs": self.total_jobs,
            "by_type": dict(self.by_type),
            "by_location": dict(self.by_location),
            "by_company": dict(self.by_company),
            "average_salary": self.average_salary,
            "top_requirements": [
                {"requirement": name, "count": count} for name, count in self.top_requirements
            ],
        }


def _matches_query(job: CanonicalJob, needle: str) -> bool:
    if needle in job.title.lower() or needle in job.description.lower():
        return True
    return any(needle in req.lower() for req in job.requirements)


def matches(job: CanonicalJob, filters: JobFilters) -> bool:
    """True when ``job`` passes every filter that is set."""
    if filters.query and not _matches_query(job, filters.query.strip().lower()):
        return False
    if filters.location and filters.location.strip().lower() not in job.location.lower():
        return False
    if filters.employment_type and job.employment_type.value != filters.employment_type:
        return False
    if filters.company and filters.company.strip().lower() not in job.company.lower():
        return False
    if filters.salary_min is not None:
        salary = first_amount(job.salary)
        if salary is None or salary < filters.salary_min:
            return False
    return True


class JobCache:
    """Holds the current snapshot of canonical jobs keyed by id.

    ``replace`` builds the new mapping first and then swaps a single
    reference, so readers on other threads see either the old snapshot or
    the new one.
    """

    def __init__(self):
        self._jobs: dict[int, CanonicalJob] = {}

    def __len__(self) -> int:
        return len(self._jobs)

    def replace(self, jobs: Iterable[CanonicalJob]) -> None:
        self._jobs = {job.id: job for job in jobs}
        logger.debug("Cache now holds %d jobs", len(self._jobs))

    def all_jobs(self) -> list[CanonicalJob]:
        return list(self._jobs.values())

    def clear(self) -> None:
        self._jobs = {}

    def query(self, filters: Optional[JobFilters] = None) -> list[CanonicalJob]:
        filters = filters or JobFilters()
        results = []
        if filters.limit <= 0:
            return results
        for job in self._jobs.values():
            if matches(job, filters):
                results.append(job)
                if len(results) >= filters.limit:
                    break
        return results

    def get_stats(self) -> JobStatistics:
        jobs = self.all_jobs()
        by_type: Counter = Counter()
        by_location: Counter = Counter()
        by_company: Counter = Counter()
        requirements: Counter = Counter()
        salaries = []

        for job in jobs:
            by_type[job.employment_type.value] += 1
            by_location[job.location] += 1
            by_company[job.company] += 1
            requirements.update(job.requirements)
            salary = first_amount(job.salary)
            if salary is not None and salary > MIN_YEARLY_SALARY:
                salaries.append(salary)

        return JobStatistics(
            total_jobs=len(jobs),
            by_type=dict(by_type),
            by_location=dict(by_location),
            by_company=dict(by_company),
            average_salary=round(sum(salaries) / len(salaries)) if salaries else 0,
            top_requirements=requirements.most_common(TOP_REQUIREMENTS),
        )
