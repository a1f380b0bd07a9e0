"""Tests for text processing utilities."""

from datetime import datetime, timezone

from job_sync.utils.text_processing import (
    capitalize_words,
    extract_skills,
    first_amount,
    html_to_text,
    parse_amounts,
    parse_timestamp,
    standardize_skill,
)


class TestExtractSkills:
    def test_basic_skills(self):
        text = "Experience with Python, Java, and Docker in a cloud environment"
        skills = extract_skills(text)
        assert "Python" in skills
        assert "Java" in skills
        assert "Docker" in skills

    def test_case_insensitive(self):
        skills = extract_skills("Worked with KUBERNETES and React.js")
        assert "Kubernetes" in skills
        assert "React" in skills

    def test_java_not_matched_inside_javascript(self):
        skills = extract_skills("Strong JavaScript skills")
        assert "JavaScript" in skills
        assert "Java" not in skills

    def test_short_aliases_ignored_in_free_text(self):
        skills = extract_skills("Are you ready to go the extra mile? We rest on weekends.")
        assert "Go" not in skills
        assert "REST APIs" not in skills

    def test_golang(self):
        assert "Go" in extract_skills("Backend services written in Golang")

    def test_keyword_order(self):
        assert extract_skills("docker, python and react") == ["Python", "React", "Docker"]

    def test_empty_text(self):
        assert extract_skills("") == []


class TestStandardizeSkill:
    def test_alias(self):
        assert standardize_skill("reactjs") == "React"
        assert standardize_skill("JS") == "JavaScript"
        assert standardize_skill("postgres") == "PostgreSQL"

    def test_canonical_is_stable(self):
        assert standardize_skill("Node.js") == "Node.js"
        assert standardize_skill("REST APIs") == "REST APIs"

    def test_unknown_kept(self):
        assert standardize_skill("  Responsive   web design ") == "Responsive web design"


class TestParseAmounts:
    def test_commas_and_k_suffix(self):
        assert parse_amounts("$120k - $150,000") == [120000.0, 150000.0]

    def test_decimals(self):
        assert parse_amounts("$22.50/hour") == [22.5]

    def test_first_amount(self):
        assert first_amount("$60,000 - $80,000") == 60000.0
        assert first_amount("Competitive") is None


class TestHtmlToText:
    def test_strips_tags(self):
        assert html_to_text("<p>Hello <b>world</b></p><ul><li>Python</li></ul>") == "Hello world Python"

    def test_plain_text_passthrough(self):
        assert html_to_text("  plain\n text ") == "plain text"


class TestCapitalizeWords:
    def test_only_lowercase_words_change(self):
        assert capitalize_words("senior iOS developer") == "Senior iOS Developer"


class TestParseTimestamp:
    def test_iso_with_z(self):
        assert parse_timestamp("2024-05-30T10:00:00Z") == datetime(2024, 5, 30, 10, tzinfo=timezone.utc)

    def test_epoch_seconds_and_millis(self):
        expected = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp(1704067200) == expected
        assert parse_timestamp(1704067200000) == expected

    def test_rfc2822(self):
        parsed = parse_timestamp("Mon, 27 May 2024 08:00:00 GMT")
        assert parsed == datetime(2024, 5, 27, 8, tzinfo=timezone.utc)

    def test_naive_datetime_becomes_utc(self):
        assert parse_timestamp(datetime(2024, 1, 1)).tzinfo is not None

    def test_garbage(self):
        assert parse_timestamp("not a date") is None
        assert parse_timestamp(None) is None
        assert parse_timestamp(True) is None
