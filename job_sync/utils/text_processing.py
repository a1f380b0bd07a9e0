"""Skill extraction, salary number parsing and text utilities."""

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from bs4 import BeautifulSoup

# Canonical technology name -> lowercase aliases that identify it in free text
# or in a provider's explicit skill list. Order is the order in which matches
# are reported.
TECH_KEYWORDS: dict[str, tuple[str, ...]] = {
    # Languages
    "JavaScript": ("javascript", "js"),
    "TypeScript": ("typescript", "ts"),
    "Python": ("python",),
    "Java": ("java",),
    "C++": ("c++",),
    "C#": ("c#",),
    "Go": ("golang",),
    "Rust": ("rust",),
    "Ruby": ("ruby",),
    "PHP": ("php",),
    "Swift": ("swift",),
    "Kotlin": ("kotlin",),
    "SQL": ("sql",),
    "HTML": ("html", "html5"),
    "CSS": ("css", "css3"),
    "SASS/SCSS": ("sass", "scss"),
    # Frameworks & libraries
    "React": ("react", "reactjs", "react.js"),
    "Angular": ("angular", "angularjs"),
    "Vue.js": ("vue", "vuejs", "vue.js"),
    "Next.js": ("next.js", "nextjs"),
    "Nuxt.js": ("nuxt.js", "nuxtjs"),
    "Node.js": ("node.js", "nodejs", "node"),
    "Express.js": ("express", "express.js", "expressjs"),
    "Django": ("django",),
    "Flask": ("flask",),
    "FastAPI": ("fastapi",),
    "Spring": ("spring", "spring boot"),
    ".NET": (".net", "dotnet"),
    "Laravel": ("laravel",),
    "Ruby on Rails": ("rails", "ruby on rails"),
    # Data stores
    "PostgreSQL": ("postgresql", "postgres"),
    "MySQL": ("mysql",),
    "MongoDB": ("mongodb", "mongo"),
    "Redis": ("redis",),
    # Cloud & infra
    "AWS": ("aws", "amazon web services"),
    "Azure": ("azure",),
    "GCP": ("gcp", "google cloud"),
    "Docker": ("docker",),
    "Kubernetes": ("kubernetes", "k8s"),
    "Terraform": ("terraform",),
    # Tools & practices
    "Git": ("git",),
    "GitHub": ("github",),
    "REST APIs": ("rest", "restful", "rest api", "rest apis"),
    "GraphQL": ("graphql",),
    "Agile": ("agile",),
    "Scrum": ("scrum",),
    "Machine Learning": ("machine learning",),
}

# Explicit skills may use short forms that would be too noisy in free text.
_EXPLICIT_ONLY_ALIASES = {"js", "ts", "go", "node", "mongo", "rest", "express", "spring"}

SKILL_ALIASES: dict[str, str] = {
    alias: canonical
    for canonical, aliases in TECH_KEYWORDS.items()
    for alias in aliases
}
SKILL_ALIASES["go"] = "Go"
SKILL_ALIASES.update({canonical.lower(): canonical for canonical in TECH_KEYWORDS})

# Word boundaries that also treat "+", "#" and "." as part of a token so
# "java" does not match inside "javascript" and "c" never matches "c++".
_SKILL_PATTERNS: list[tuple[str, re.Pattern]] = [
    (
        canonical,
        re.compile(
            "|".join(
                rf"(?<![\w+#.]){re.escape(alias)}(?![\w+#]|\.\w)"
                for alias in aliases
                if alias not in _EXPLICIT_ONLY_ALIASES
            )
        ),
    )
    for canonical, aliases in TECH_KEYWORDS.items()
]

_AMOUNT_RE = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*([kK])?\b")
_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def html_to_text(html: str) -> str:
    """Strip markup from a provider's HTML description."""
    if not html:
        return ""
    if "<" not in html:
        return collapse_whitespace(html)
    soup = BeautifulSoup(html, "lxml")
    return collapse_whitespace(soup.get_text(" ", strip=True))


def capitalize_words(text: str) -> str:
    """Capitalize all-lowercase words, leaving words with existing capitals alone."""
    words = collapse_whitespace(text).split(" ")
    return " ".join(w[:1].upper() + w[1:] if w.islower() else w for w in words)


def standardize_skill(skill: str) -> str:
    """Map a provider skill label to its canonical name, or return it trimmed."""
    cleaned = collapse_whitespace(skill)
    return SKILL_ALIASES.get(cleaned.lower(), cleaned)


def extract_skills(text: str) -> list[str]:
    """Return canonical names of known technologies found in text, in keyword order."""
    if not text:
        return []
    text_lower = text.lower()
    return [canonical for canonical, pattern in _SKILL_PATTERNS if pattern.search(text_lower)]


def parse_amounts(text: str) -> list[float]:
    """Extract money-like numbers from text ("$120k" -> 120000.0, "1,500" -> 1500.0)."""
    amounts = []
    for number, thousands in _AMOUNT_RE.findall(text or ""):
        try:
            value = float(number.replace(",", ""))
        except ValueError:
            continue
        if thousands:
            value *= 1000
        amounts.append(value)
    return amounts


def first_amount(text: str) -> float | None:
    amounts = parse_amounts(text)
    return amounts[0] if amounts else None


def parse_timestamp(value: Any) -> datetime | None:
    """Best-effort conversion of provider timestamps to an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings, RFC 2822 strings and epoch seconds or
    milliseconds. Returns None when the value cannot be understood.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        ts = float(value)
        # Some providers send epoch milliseconds
        if ts > 1e12:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        raw = value.strip()
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            try:
                parsed = parsedate_to_datetime(raw)
            except (TypeError, ValueError, IndexError):
                return None
        if parsed is None:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    return None
