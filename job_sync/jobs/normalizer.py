"""Turn provider records into canonical job postings.

Every function here is pure: the same record and the same ``now`` always give
the same CanonicalJob, and normalizing a job a second time (via
``record_from_job``) gives the job back unchanged.
"""

import hashlib
import logging
import math
import re
from datetime import datetime
from typing import Iterable, Optional

from job_sync.errors import MalformedRecord
from job_sync.jobs.models import CanonicalJob, CompanyInfo, EmploymentType, RawJobRecord
from job_sync.utils.text_processing import (
    capitalize_words,
    collapse_whitespace,
    extract_skills,
    parse_amounts,
    standardize_skill,
)

logger = logging.getLogger("job_sync.normalizer")

MAX_REQUIREMENTS = 10
MAX_TECH_STACK = 6
HOURLY_CEILING = 500  # amounts at or below this are treated as hourly rates

UNKNOWN_COMPANY = "Unknown Company"
UNKNOWN_LOCATION = "Location not specified"
NO_DESCRIPTION = "No description available."
NO_SALARY = "Competitive"
RECENTLY_POSTED = "Recently posted"

TITLE_MAPPINGS = {
    "software engineer": "Software Engineer",
    "software developer": "Software Developer",
    "frontend developer": "Frontend Developer",
    "front-end developer": "Frontend Developer",
    "front end developer": "Frontend Developer",
    "backend developer": "Backend Developer",
    "back-end developer": "Backend Developer",
    "back end developer": "Backend Developer",
    "fullstack developer": "Full Stack Developer",
    "full-stack developer": "Full Stack Developer",
    "full stack developer": "Full Stack Developer",
    "web developer": "Web Developer",
    "mobile developer": "Mobile Developer",
    "ios developer": "iOS Developer",
    "android developer": "Android Developer",
    "devops engineer": "DevOps Engineer",
    "data scientist": "Data Scientist",
    "data engineer": "Data Engineer",
    "machine learning engineer": "Machine Learning Engineer",
    "ml engineer": "Machine Learning Engineer",
    "ui/ux designer": "UI/UX Designer",
    "product manager": "Product Manager",
}

LOCATION_MAPPINGS = {
    "san francisco, ca": "San Francisco, CA",
    "new york, ny": "New York, NY",
    "los angeles, ca": "Los Angeles, CA",
    "seattle, wa": "Seattle, WA",
    "austin, tx": "Austin, TX",
    "boston, ma": "Boston, MA",
    "chicago, il": "Chicago, IL",
    "denver, co": "Denver, CO",
    "remote": "Remote",
    "remote work": "Remote",
    "work from home": "Remote",
    "anywhere": "Remote",
    "telecommute": "Remote",
}

_COMPANY_SUFFIX_RE = re.compile(
    r"[\s,]+(?:inc\.?|llc\.?|corp\.?|corporation|limited|ltd\.?)$", re.IGNORECASE
)

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}
_SYMBOL_RE = re.compile(r"[$€£]")
_CURRENCY_CODE_RE = re.compile(r"\b(USD|EUR|GBP|CAD|AUD|NZD|CHF|INR|JPY|SGD|SEK|NOK|DKK|PLN|BRL|MXN)\b")
_LEADING_CODE_RE = re.compile(r"^\s*([A-Z]{3})(?=[\s\d])")

INDUSTRY_RULES = [
    ("Financial Technology", ("fintech", "financial", "banking")),
    ("Healthcare Technology", ("healthcare", "medical", "health")),
    ("E-commerce", ("e-commerce", "ecommerce", "retail", "shopping")),
    ("Gaming & Entertainment", ("gaming", "game", "entertainment")),
    ("Education Technology", ("education", "learning", "edtech")),
]
_AI_REQUIREMENT_RE = re.compile(r"\b(?:ai|machine learning|data science)\b")

SIZE_BUCKETS = ("1-50 employees", "51-200 employees", "201-1000 employees", "1000+ employees")
DEFAULT_SIZE = "51-200 employees"
SIZE_RULES = [
    ("1-50 employees", ("startup", "small team")),
    ("51-200 employees", ("growing", "expanding")),
    ("201-1000 employees", ("established", "mid-size")),
    ("1000+ employees", ("large", "enterprise", "fortune")),
]
LARGE_COMPANIES = ("google", "microsoft", "amazon", "facebook", "meta", "apple", "netflix", "uber", "airbnb")

CULTURE_KEYWORDS = (
    "collaborative", "innovative", "fast-paced", "agile", "remote-friendly",
    "work-life balance", "flexible", "inclusive", "diverse", "learning",
    "growth", "mentorship", "team-oriented", "dynamic", "creative",
)


def job_id(source: str, provider_id: str, title: str, company: str) -> int:
    """Stable 63-bit id derived from the posting's identity."""
    key = "|".join((source, provider_id, title.lower(), company.lower()))
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    return int(digest[:16], 16) & ((1 << 63) - 1)


def normalize_title(title: str) -> str:
    cleaned = collapse_whitespace(title)
    if not cleaned:
        raise MalformedRecord("empty title")
    return TITLE_MAPPINGS.get(cleaned.lower()) or capitalize_words(cleaned)


def normalize_company(company: str) -> str:
    """Strip trailing legal suffixes ("Acme Corp, Inc." -> "Acme")."""
    name = collapse_whitespace(company)
    while True:
        stripped = _COMPANY_SUFFIX_RE.sub("", name).strip()
        if stripped == name:
            break
        name = stripped
    return name.rstrip(",").strip() or UNKNOWN_COMPANY


def normalize_location(record: RawJobRecord) -> str:
    if record.is_remote:
        return "Remote"
    location = collapse_whitespace(record.location)
    if not location:
        parts = [collapse_whitespace(p) for p in (record.city, record.state, record.country)]
        location = ", ".join(p for p in parts if p)
    if not location:
        return UNKNOWN_LOCATION
    return LOCATION_MAPPINGS.get(location.lower()) or capitalize_words(location)


def normalize_employment_type(value: str) -> EmploymentType:
    lowered = (value or "").lower()
    if "part" in lowered:
        return EmploymentType.PART_TIME
    if "contract" in lowered or "freelance" in lowered:
        return EmploymentType.CONTRACT
    if "intern" in lowered:
        return EmploymentType.INTERNSHIP
    return EmploymentType.FULL_TIME


def _format_amount(value: float) -> str:
    if value == int(value):
        return f"{int(value):,}"
    return f"{value:,.2f}"


def _currency_prefix(record: RawJobRecord) -> str:
    currency = (record.salary_currency or "").strip()
    if currency in CURRENCY_SYMBOLS.values():
        return currency
    code = currency.upper()
    if not code:
        text = record.salary_text or ""
        symbol = _SYMBOL_RE.search(text)
        if symbol:
            return symbol.group(0)
        match = _LEADING_CODE_RE.match(text) or _CURRENCY_CODE_RE.search(text)
        code = match.group(1) if match else "USD"
    if code in CURRENCY_SYMBOLS:
        return CURRENCY_SYMBOLS[code]
    return f"{code} "


def normalize_salary(record: RawJobRecord) -> str:
    """Render a salary display string.

    A single amount above HOURLY_CEILING is a yearly figure, otherwise an
    hourly rate. Two amounts form a range.
    """
    amounts = [a for a in (record.salary_min, record.salary_max) if a is not None and a > 0]
    if not amounts:
        amounts = [a for a in parse_amounts(record.salary_text) if a > 0][:2]
    if len(amounts) == 2 and amounts[0] == amounts[1]:
        amounts = amounts[:1]
    if not amounts:
        return NO_SALARY

    prefix = _currency_prefix(record)
    if len(amounts) == 1:
        amount = amounts[0]
        period = "/year" if amount > HOURLY_CEILING else "/hour"
        return f"{prefix}{_format_amount(amount)}{period}"

    low, high = sorted(amounts)
    salary_range = f"{prefix}{_format_amount(low)} - {prefix}{_format_amount(high)}"
    if high > HOURLY_CEILING:
        return salary_range
    return f"{salary_range}/hour"


def normalize_requirements(record: RawJobRecord, description: str) -> tuple[str, ...]:
    """Explicit skills first, then technologies mentioned in the text."""
    candidates = [standardize_skill(s) for s in record.skills]
    text = " ".join([description] + [collapse_whitespace(q) for q in record.qualifications])
    candidates.extend(extract_skills(text))

    requirements = []
    seen = set()
    for skill in candidates:
        key = skill.lower()
        if not skill or key in seen:
            continue
        seen.add(key)
        requirements.append(skill)
        if len(requirements) == MAX_REQUIREMENTS:
            break
    return tuple(requirements)


def format_posted(posted_at: Optional[datetime], now: datetime) -> str:
    if posted_at is None:
        return RECENTLY_POSTED
    days = math.ceil(abs((now - posted_at).total_seconds()) / 86400)
    if days == 0:
        return "Today"
    if days == 1:
        return "1 day ago"
    if days <= 7:
        return f"{days} days ago"
    if days <= 30:
        weeks = math.ceil(days / 7)
        return f"{weeks} week{'s' if weeks > 1 else ''} ago"
    return posted_at.date().isoformat()


def infer_industry(description: str, requirements: Iterable[str]) -> str:
    desc = description.lower()
    for industry, keywords in INDUSTRY_RULES:
        if any(k in desc for k in keywords):
            return industry
    if _AI_REQUIREMENT_RE.search(" ".join(requirements).lower()):
        return "Artificial Intelligence"
    if "startup" in desc or "early stage" in desc:
        return "Startup"
    return "Technology"


def _size_from_text(text: str) -> Optional[str]:
    lowered = text.lower()
    for bucket, keywords in SIZE_RULES:
        if any(k in lowered for k in keywords):
            return bucket
    return None


def _size_from_hint(hint: str) -> Optional[str]:
    hint = collapse_whitespace(hint)
    if not hint:
        return None
    if hint in SIZE_BUCKETS:
        return hint
    amounts = parse_amounts(hint)
    if amounts:
        headcount = max(amounts)
        if headcount <= 50:
            return "1-50 employees"
        if headcount <= 200:
            return "51-200 employees"
        if headcount <= 1000:
            return "201-1000 employees"
        return "1000+ employees"
    return _size_from_text(hint)


def infer_company_size(company: str, description: str, hint: str = "") -> str:
    size = _size_from_hint(hint) or _size_from_text(description)
    if size:
        return size
    if any(name in company.lower() for name in LARGE_COMPANIES):
        return "1000+ employees"
    return DEFAULT_SIZE


def extract_culture(description: str) -> tuple[str, ...]:
    desc = description.lower()
    return tuple(k for k in CULTURE_KEYWORDS if k in desc)


def infer_website(company: str) -> str:
    slug = re.sub(r"[^a-z0-9]", "", company.lower())
    return f"https://www.{slug}.com" if slug else ""


def describe_company(company: str, description: str) -> str:
    """Pick a sentence mentioning the company, or fall back to a generic line."""
    name = company.lower()
    for sentence in description.split("."):
        if len(sentence) > 20 and name in sentence.lower():
            return sentence.strip() + "."
    return (
        f"{company} is a technology company focused on building innovative "
        "solutions and fostering professional growth."
    )


def build_company_info(
    company: str, description: str, requirements: tuple[str, ...], record: RawJobRecord
) -> CompanyInfo:
    return CompanyInfo(
        name=company,
        industry=infer_industry(description, requirements),
        size=infer_company_size(company, description, record.company_size_hint),
        culture=extract_culture(description),
        tech_stack=requirements[:MAX_TECH_STACK],
        website=collapse_whitespace(record.company_website) or infer_website(company),
        description=describe_company(company, description),
    )


def normalize_record(record: RawJobRecord, now: datetime) -> CanonicalJob:
    """Map one raw record onto the canonical schema.

    Raises MalformedRecord when the record has no usable title or id.
    """
    provider_id = collapse_whitespace(record.provider_id)
    if not provider_id:
        raise MalformedRecord(f"{record.source}: record without an id")

    title = normalize_title(record.title)
    company = normalize_company(record.company)
    description = collapse_whitespace(record.description) or NO_DESCRIPTION
    requirements = normalize_requirements(record, description)

    return CanonicalJob(
        id=job_id(record.source, provider_id, title, company),
        source=record.source,
        provider_id=provider_id,
        title=title,
        company=company,
        location=normalize_location(record),
        employment_type=normalize_employment_type(record.employment_type),
        salary=normalize_salary(record),
        description=description,
        requirements=requirements,
        posted_display=format_posted(record.posted_at, now),
        posted_at=record.posted_at,
        url=collapse_whitespace(record.url),
        company_info=build_company_info(company, description, requirements, record),
        is_fallback=record.is_fallback,
    )


def normalize_records(records: Iterable[RawJobRecord], now: datetime) -> list[CanonicalJob]:
    """Normalize a batch, skipping records that cannot be normalized."""
    jobs = []
    for record in records:
        try:
            jobs.append(normalize_record(record, now))
        except MalformedRecord as e:
            logger.warning("Skipping %s record %r: %s", record.source, record.provider_id, e)
    return jobs


def record_from_job(job: CanonicalJob) -> RawJobRecord:
    """Rebuild a raw record that normalizes back to ``job``."""
    info = job.company_info
    return RawJobRecord(
        source=job.source,
        provider_id=job.provider_id,
        title=job.title,
        company=job.company,
        location="" if job.location == UNKNOWN_LOCATION else job.location,
        is_remote=job.location == "Remote",
        description=job.description,
        salary_text="" if job.salary == NO_SALARY else job.salary,
        employment_type=job.employment_type.value,
        posted_at=job.posted_at,
        skills=list(job.requirements),
        company_size_hint=info.size if info else "",
        company_website=info.website if info else "",
        url=job.url,
        is_fallback=job.is_fallback,
    )
