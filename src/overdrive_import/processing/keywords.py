"""Keyword normalization used to tag imported titles.

`normalize_keywords` turns the comma separated subject, interest, keyword and
grade fields of an OverDrive record into five deduplicated, lower-cased
buckets used by the import tool to match genres and audiences and to tag
topics.
"""

from __future__ import annotations

import json

from overdrive_import.models import KeywordSet

# Characters stripped from both ends of every term
TRIM_CHARS = " \t\n\r\0\x0b-.,;:/\\"


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return str(value).split(",")


def _clean(terms: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for term in terms:
        term = term.strip(TRIM_CHARS).lower()
        if term:
            seen.setdefault(term, None)
    return list(seen)


def normalize_keywords(
    subjects: str | None = None,
    interest: str | None = None,
    keywords: str | None = None,
    grade: str | None = None,
    atos: str | float | None = None,
    lexile: str | int | None = None,
) -> KeywordSet:
    """Build the keyword buckets for one record.

    Args:
        subjects: Comma separated subjects, stored as `genres_other`.
        interest: Comma separated interest levels, stored as `audience`.
        keywords: Comma separated keywords, stored as `topics`.
        grade: Comma separated grade levels, stored as `audience_other`.
        atos: ATOS reading score, appended to `audience_other` as "ATOS: <score>".
        lexile: Lexile score, appended to `audience_other` as "<score>L Lexile".

    Returns:
        KeywordSet: Trimmed, lower-cased, deduplicated terms per bucket,
            in first-seen order. `genres` is always empty.

    """
    audience_other = _split(grade)
    audience_other.extend(f"Interest Level: {level.strip()}" for level in _split(interest))
    if lexile:
        audience_other.append(f"{lexile}L Lexile")
    if atos:
        audience_other.append(f"ATOS: {atos}")

    return KeywordSet(
        genres=[],
        audience=_clean(_split(interest)),
        topics=_clean(_split(keywords)),
        genres_other=_clean(_split(subjects)),
        audience_other=_clean(audience_other),
    )


def serialize_keywords(keyword_set: KeywordSet) -> str:
    """Encode a KeywordSet as a JSON object of the five buckets."""
    return json.dumps(keyword_set.to_dict(), ensure_ascii=False, separators=(",", ":"))


def deserialize_keywords(blob: str) -> KeywordSet:
    return KeywordSet.from_dict(json.loads(blob))
