"""
changelog-kit — Source resolution step.

Reads changelog sources from disk and turns them into ChangelogDocuments:
markdown goes through dialect detection and the grammar-driven parser,
JSON is checked against the bundled schema and normalised into the
canonical model.

Fail-fast rules:
  - missing, unreadable, non-UTF-8 or oversized file → ParseError subclass
  - malformed JSON or JSON that fails the schema → ParseError subclass
"""

from __future__ import annotations

import asyncio
import json
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from changelog_kit.core.config import settings
from changelog_kit.dialects.detect import DIALECTS, JSON_FORMAT, detect_format, detect_source_format
from changelog_kit.dialects.parser import ParseOutcome, parse_changelog
from changelog_kit.errors import (
    MalformedJSONError,
    SchemaValidationError,
    SourceNotFoundError,
    SourceReadError,
    SourceTooLargeError,
    UnsupportedFormatError,
)
from changelog_kit.models.changelog import (
    UNKNOWN_VERSION,
    BreakingChange,
    ChangelogDocument,
    ChangelogStats,
    Commit,
    Contributor,
    Section,
)
from changelog_kit.models.results import ImportOptions
from changelog_kit.utils.logging import logger

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "changelog.schema.json"


@lru_cache(maxsize=1)
def _schema_validator() -> Draft7Validator:
    with open(SCHEMA_PATH, encoding="utf-8") as f:
        return Draft7Validator(json.load(f))


def read_source(path: str, max_bytes: int | None = None) -> str:
    """Read a UTF-8 changelog file, raising catalogued errors on failure."""
    limit = max_bytes or settings.max_source_bytes
    resolved = Path(path)

    if not resolved.is_file():
        raise SourceNotFoundError(path)

    size = resolved.stat().st_size
    if size > limit:
        raise SourceTooLargeError(path, size / (1024 * 1024), limit / (1024 * 1024))

    try:
        return resolved.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SourceReadError(path, f"not valid UTF-8 ({exc.reason})") from exc
    except OSError as exc:
        raise SourceReadError(path, exc.strerror or str(exc)) from exc


async def read_source_async(path: str, max_bytes: int | None = None) -> str:
    return await asyncio.to_thread(read_source, path, max_bytes)


# ──────────────────────────────────────────────────────────
# JSON codec
# ──────────────────────────────────────────────────────────

def _normalize_commit(raw: dict[str, Any], fallback_date: str) -> Commit:
    data = dict(raw)
    if "shortHash" not in data and "short_hash" not in data:
        data["shortHash"] = str(data["hash"])[:7]
    data["type"] = data.get("type") or "other"
    data.setdefault("date", fallback_date)
    return Commit.model_validate(data)


def _normalize_breaking_changes(
    raw: dict[str, Any], by_hash: dict[str, Commit], doc_date: str
) -> list[BreakingChange] | None:
    entries = raw.get("breakingChanges") or raw.get("breaking_changes")
    if not entries:
        return None
    return [
        BreakingChange(
            description=entry["description"],
            commit=by_hash.get(entry["commit"]["hash"]) or _normalize_commit(entry["commit"], doc_date),
            migration=entry.get("migration"),
        )
        for entry in entries
    ]


def _normalize_document(raw: dict[str, Any], today: str) -> ChangelogDocument:
    doc_date = raw.get("date") or today
    commits = [_normalize_commit(c, doc_date) for c in raw.get("commits") or []]
    by_hash: dict[str, Commit] = {}
    for commit in commits:
        by_hash.setdefault(commit.hash, commit)

    sections: list[Section] = []
    for raw_section in raw.get("sections") or []:
        section_commits: list[Commit] = []
        for raw_commit in raw_section.get("commits") or []:
            commit = by_hash.get(raw_commit["hash"])
            if commit is None:
                # keep sections and the flat list consistent
                commit = _normalize_commit(raw_commit, doc_date)
                by_hash[commit.hash] = commit
                commits.append(commit)
            section_commits.append(commit)
        sections.append(
            Section(
                title=raw_section["title"],
                type=raw_section.get("type") or "other",
                commits=section_commits,
                priority=raw_section.get("priority"),
            )
        )

    raw_contributors = raw.get("contributors")
    raw_stats = raw.get("stats")

    return ChangelogDocument(
        version=raw.get("version") or UNKNOWN_VERSION,
        date=doc_date,
        sections=sections,
        commits=commits,
        compare_url=raw.get("compareUrl") or raw.get("compare_url"),
        breaking_changes=_normalize_breaking_changes(raw, by_hash, doc_date),
        contributors=[Contributor.model_validate(c) for c in raw_contributors] if raw_contributors else None,
        stats=ChangelogStats.model_validate(raw_stats) if raw_stats else None,
    )


def decode_json_documents(text: str, origin: str = "<json>", today: str | None = None) -> list[ChangelogDocument]:
    """
    Decode a JSON changelog: one document, a list of documents, or
    ``{"versions": [...]}``. Raises MalformedJSONError or SchemaValidationError.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedJSONError(origin, f"{exc.msg} (line {exc.lineno}, column {exc.colno})") from exc

    errors = list(_schema_validator().iter_errors(data))
    if errors:
        top = best_match(errors)
        location = "/".join(str(p) for p in top.absolute_path) or "<root>"
        raise SchemaValidationError(origin, [f"{location}: {top.message}"])

    today = today or date.today().isoformat()
    if isinstance(data, list):
        raw_documents = data
    elif "versions" in data:
        raw_documents = data["versions"]
    else:
        raw_documents = [data]

    return [_normalize_document(raw, today) for raw in raw_documents]


# ──────────────────────────────────────────────────────────
# Text → documents
# ──────────────────────────────────────────────────────────

def load_documents(
    text: str,
    source_format: str = "auto",
    origin: str = "<text>",
    options: ImportOptions | None = None,
) -> ParseOutcome:
    """Resolve source text to documents according to its declared format."""
    if source_format == "auto":
        source_format = detect_source_format(text)
    elif source_format == "markdown":
        source_format = detect_format(text)

    if source_format == JSON_FORMAT:
        documents = decode_json_documents(text, origin)
        logger.info("  %s: json, %d version(s)", origin, len(documents))
        return ParseOutcome(documents=documents, warnings=[])

    if source_format not in DIALECTS:
        raise UnsupportedFormatError(source_format)

    outcome = parse_changelog(text, source_format, options)
    logger.info(
        "  %s: %s, %d version(s), %d warning(s)",
        origin, source_format, len(outcome.documents), len(outcome.warnings),
    )
    return outcome
