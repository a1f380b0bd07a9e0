"""Cross-source duplicate removal."""

import logging
from typing import Callable, Iterable

from job_sync.jobs.models import CanonicalJob

logger = logging.getLogger("job_sync.dedup")


def dedup_key(job: CanonicalJob) -> str:
    """Lowercased ``title_company``; location is not part of the identity."""
    return job.dedup_key


def deduplicate(
    jobs: Iterable[CanonicalJob],
    key: Callable[[CanonicalJob], object] = dedup_key,
) -> list[CanonicalJob]:
    """Keep the first posting for each key, preserving input order."""
    seen: set = set()
    unique = []
    total = 0
    for job in jobs:
        total += 1
        k = key(job)
        if k in seen:
            continue
        seen.add(k)
        unique.append(job)

    if total != len(unique):
        logger.info("Removed %d duplicate jobs (%d -> %d)", total - len(unique), total, len(unique))
    return unique


def collapse_ids(jobs: Iterable[CanonicalJob]) -> list[CanonicalJob]:
    """Drop repeat ingestions of the same posting (same stable id), first wins."""
    return deduplicate(jobs, key=lambda job: job.id)
