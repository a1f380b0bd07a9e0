"""CLI entry point: sync jobs once (or on a timer) and print what was found."""

import argparse
import logging
import sys
import time

from job_sync.cache import JobFilters, JobStatistics
from job_sync.config import load_config, validate_config
from job_sync.errors import ConfigError, JobSyncError
from job_sync.jobs.models import CanonicalJob, EmploymentType, SyncStatus
from job_sync.service import JobSyncService, create_service
from job_sync.utils.logging_config import setup_logging

logger = logging.getLogger("job_sync")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Job Sync - aggregate job postings from several job boards",
    )
    parser.add_argument(
        "--config", default="config.yaml",
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument("--query", default="", help="Keyword to match in title, description or skills")
    parser.add_argument("--location", default="", help="Location substring (e.g. 'remote')")
    parser.add_argument(
        "--type", dest="employment_type", default="",
        choices=[t.value for t in EmploymentType],
        help="Employment type",
    )
    parser.add_argument("--company", default="", help="Company name substring")
    parser.add_argument("--salary-min", type=float, default=None, help="Minimum salary figure")
    parser.add_argument("--limit", type=int, default=50, help="Maximum jobs to print (default: 50)")
    parser.add_argument(
        "--stats", action="store_true",
        help="Print job statistics instead of the job list",
    )
    parser.add_argument(
        "--refresh", metavar="SOURCE",
        help="Fetch from a single source and print the results without a full sync",
    )
    parser.add_argument(
        "--watch", action="store_true",
        help="Keep running and print every scheduled refresh until Ctrl-C",
    )
    return parser.parse_args(argv)


def filters_from_args(args: argparse.Namespace) -> JobFilters:
    return JobFilters(
        query=args.query,
        location=args.location,
        employment_type=args.employment_type,
        company=args.company,
        salary_min=args.salary_min,
        limit=args.limit,
    )


def format_status(status: SyncStatus) -> str:
    line = (
        f"Synced {status.total_jobs_synced} jobs "
        f"({len(status.successful_sources)} sources ok, {len(status.failed_sources)} failed)"
    )
    if status.degraded_sources:
        line += f" - sample data from: {', '.join(status.degraded_sources)}"
    return line


def print_jobs(jobs: list[CanonicalJob]):
    if not jobs:
        print("No jobs match the given filters.")
        return
    for i, job in enumerate(jobs, 1):
        print(f"{i:3d}. {job.title} @ {job.company}")
        print(f"     {job.location} | {job.employment_type.value} | {job.salary} | {job.posted_display}")
        if job.requirements:
            print(f"     Skills: {', '.join(job.requirements[:6])}")
        if job.url:
            print(f"     {job.url}")


def print_stats(stats: JobStatistics):
    """Print cache statistics."""
    print("\n=== Job Sync Statistics ===")
    print(f"Total jobs: {stats.total_jobs}")
    print(f"Average salary: ${stats.average_salary:,}" if stats.average_salary else "Average salary: n/a")

    for title, counts in (
        ("By type", stats.by_type),
        ("By location", stats.by_location),
        ("By company", stats.by_company),
    ):
        if counts:
            print(f"\n{title}:")
            for name, count in sorted(counts.items(), key=lambda kv: -kv[1])[:10]:
                print(f"  {name}: {count}")

    if stats.top_requirements:
        print("\nTop requirements:")
        for name, count in stats.top_requirements:
            print(f"  {name}: {count}")
    print()


def watch(service: JobSyncService, filters: JobFilters):
    """Print each refresh until interrupted."""
    def on_update(jobs: list[CanonicalJob]):
        print(f"\n--- {format_status(service.get_sync_status())} ---")
        print_jobs(service.get_filtered_jobs(filters))

    service.subscribe(on_update)
    if not service.get_configuration().auto_refresh:
        service.update_configuration(auto_refresh=True)
    logger.info("Watching for job updates, press Ctrl-C to stop")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nStopping.")


def main(argv=None):
    args = parse_args(argv)

    # Load config
    try:
        config = load_config(args.config)
    except (FileNotFoundError, ConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # Setup logging
    setup_logging(config.log_dir, config.log_level)

    # Validate config and print warnings
    for w in validate_config(config):
        logger.warning("Config: %s", w)

    service = create_service(config)
    filters = filters_from_args(args)

    try:
        # Handle --refresh
        if args.refresh:
            try:
                jobs = service.refresh_from_source(args.refresh)
            except (ValueError, JobSyncError) as e:
                print(f"Error: {e}", file=sys.stderr)
                sys.exit(1)
            print_jobs(jobs[:args.limit])
            return

        status = service.initialize()
        print(format_status(status))
        for error in status.errors:
            print(f"  ! {error}")

        if args.stats:
            print_stats(service.get_job_statistics())
        else:
            print_jobs(service.get_filtered_jobs(filters))

        if args.watch:
            watch(service, filters)
    finally:
        service.cleanup()


if __name__ == "__main__":
    main()
