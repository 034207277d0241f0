"""
changelog-kit — Grammar tables for the supported changelog dialects.

One DialectGrammar per dialect tells the generic line parser how to spot
version headers, section headers and entries, how to map a section title to
a commit type, and how to pull a scope or a commit reference out of an
entry. Adding a dialect means adding a table here, not another parser.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from changelog_kit.dialects.detect import (
    CONVENTIONAL_CHANGELOG,
    ISO_DATE_PATTERN,
    KEEP_A_CHANGELOG,
    PLAIN_MARKDOWN,
)
from changelog_kit.errors import UnsupportedFormatError

ISO_DATE_PREFIX = re.compile(rf"^{ISO_DATE_PATTERN}")
ISO_DATE_ANYWHERE = re.compile(ISO_DATE_PATTERN)
FULL_HASH_IN_LINK = re.compile(r"([0-9a-f]{40})(?:[/?#].*)?$")

EMOJI = re.compile(
    "[\U0001F300-\U0001FAFF\U00002600-\U000027BF\U0001F000-\U0001F02F\uFE0F\u200D]"
)

DEFAULT_SECTION_TITLE = "Changes"


@dataclass(frozen=True)
class HeaderFields:
    version: str
    date: str | None = None
    compare_url: str | None = None
    raw_date: str | None = None


@dataclass(frozen=True)
class CommitRef:
    subject: str
    hash: str | None = None
    short_hash: str | None = None
    commit_link: str | None = None
    pr: str | None = None
    pr_link: str | None = None


@dataclass(frozen=True)
class DialectGrammar:
    name: str
    version_header: re.Pattern[str]
    read_header: Callable[[re.Match[str]], HeaderFields | None]
    section_header: re.Pattern[str]
    entry_line: re.Pattern[str]
    type_map: Callable[[str], str]
    extract_scope: Callable[[str], tuple[str | None, str]]
    extract_commit_ref: Callable[[str], CommitRef]
    default_section_title: str | None = None
    invalid_block: re.Pattern[str] | None = None
    # re-apply the minimum entry length once scope and references are cut off
    check_bare_subject: bool = False


# ──────────────────────────────────────────────────────────
# Section title → commit type
# ──────────────────────────────────────────────────────────

KEEP_A_CHANGELOG_TYPES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("feat", ("added",)),
    ("refactor", ("changed",)),
    ("deprecated", ("deprecated",)),
    ("removed", ("removed",)),
    ("fix", ("fixed",)),
    ("security", ("security",)),
)

CONVENTIONAL_TYPES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("feat", ("feature",)),
    ("fix", ("bug fix",)),
    ("perf", ("performance",)),
    ("refactor", ("refactor",)),
    ("docs", ("documentation",)),
    ("breaking", ("breaking",)),
    ("security", ("security",)),
)

PLAIN_MARKDOWN_TYPES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("feat", ("feature", "feat", "新功能")),
    ("fix", ("fix", "bug", "修复")),
    ("perf", ("perf", "performance", "性能")),
    ("refactor", ("refactor", "重构")),
    ("docs", ("doc", "文档")),
    ("security", ("security", "安全")),
    ("dependencies", ("depend", "依赖")),
    ("breaking", ("break", "破坏")),
)


def strip_emoji(title: str) -> str:
    return EMOJI.sub("", title).strip()


def _keyword_mapper(table: tuple[tuple[str, tuple[str, ...]], ...]) -> Callable[[str], str]:
    def type_map(title: str) -> str:
        normalized = strip_emoji(title).lower()
        for commit_type, keywords in table:
            if any(keyword in normalized for keyword in keywords):
                return commit_type
        return "other"

    return type_map


map_keep_a_changelog_title = _keyword_mapper(KEEP_A_CHANGELOG_TYPES)
map_conventional_title = _keyword_mapper(CONVENTIONAL_TYPES)
infer_type_from_title = _keyword_mapper(PLAIN_MARKDOWN_TYPES)


# ──────────────────────────────────────────────────────────
# Version headers
# ──────────────────────────────────────────────────────────

def _iso_or_none(raw: str | None) -> str | None:
    if not raw:
        return None
    found = ISO_DATE_ANYWHERE.search(raw)
    return found.group(0) if found else None


def _read_keep_a_changelog_header(match: re.Match[str]) -> HeaderFields:
    raw_date = (match.group(2) or "").strip() or None
    return HeaderFields(version=match.group(1).strip(), date=_iso_or_none(raw_date), raw_date=raw_date)


def _read_conventional_header(match: re.Match[str]) -> HeaderFields:
    version = match.group(1).strip()
    link_or_date = match.group(2)
    possible_date = match.group(3)

    if link_or_date and ISO_DATE_PREFIX.match(link_or_date):
        return HeaderFields(version=version, date=link_or_date[:10], raw_date=link_or_date)
    if possible_date and ISO_DATE_PREFIX.match(possible_date):
        return HeaderFields(
            version=version,
            date=possible_date[:10],
            compare_url=link_or_date,
            raw_date=possible_date,
        )
    return HeaderFields(version=version, compare_url=link_or_date, raw_date=possible_date)


def _read_plain_header(match: re.Match[str]) -> HeaderFields | None:
    version = match.group(1).rstrip("-")
    # "## Changes" and friends are headings, not versions
    if not re.search(r"\d", version):
        return None
    return HeaderFields(version=version, date=match.group(2))


# ──────────────────────────────────────────────────────────
# Entries
# ──────────────────────────────────────────────────────────

PLAIN_SCOPE = re.compile(r"^([a-z-]+):\s*(.+)")
BOLD_SCOPE = re.compile(r"^\*\*([^*]+?):?\*\*:?\s*(.*)")
COMMIT_REF = re.compile(r"\(\[([0-9a-f]{7,40})\]\(([^)]+)\)\)")
PR_REF = re.compile(r"\(\[#(\d+)\]\(([^)]+)\)\)")


def extract_plain_scope(text: str) -> tuple[str | None, str]:
    """``scope: subject`` → (scope, subject)."""
    match = PLAIN_SCOPE.match(text)
    if match:
        return match.group(1), match.group(2).strip()
    return None, text.strip()


def extract_bold_scope(text: str) -> tuple[str | None, str]:
    """``**scope:** subject`` (or ``**scope**: subject``) → (scope, subject)."""
    match = BOLD_SCOPE.match(text)
    if match:
        return match.group(1).strip(), match.group(2).strip()
    return None, text.strip()


def no_commit_ref(text: str) -> CommitRef:
    return CommitRef(subject=text.strip())


def extract_conventional_ref(text: str) -> CommitRef:
    """Pull ``([abc1234](url))`` and ``([#12](url))`` references off an entry."""
    commit_match = COMMIT_REF.search(text)
    pr_match = PR_REF.search(text)

    cut = min(
        (m.start() for m in (commit_match, pr_match) if m is not None),
        default=len(text),
    )
    subject = text[:cut].strip().rstrip(",").strip()

    full_hash = short_hash = commit_link = None
    if commit_match:
        short_hash = commit_match.group(1)
        commit_link = commit_match.group(2)
        full_hash = short_hash
        linked = FULL_HASH_IN_LINK.search(commit_link)
        if linked and linked.group(1).startswith(short_hash):
            full_hash = linked.group(1)

    return CommitRef(
        subject=subject,
        hash=full_hash,
        short_hash=short_hash,
        commit_link=commit_link,
        pr=pr_match.group(1) if pr_match else None,
        pr_link=pr_match.group(2) if pr_match else None,
    )


# ──────────────────────────────────────────────────────────
# Grammar tables
# ──────────────────────────────────────────────────────────

SECTION_HEADER = re.compile(r"^###\s+(.+)")
ENTRY_LINE = re.compile(r"^[-*]\s+(.*)$")
NON_VERSION_HEADING = re.compile(r"^##\s+(?!\[)")

KEEP_A_CHANGELOG_GRAMMAR = DialectGrammar(
    name=KEEP_A_CHANGELOG,
    version_header=re.compile(r"^##\s+\[([^\]]+)\](?:\s+-\s+(.+))?"),
    read_header=_read_keep_a_changelog_header,
    section_header=SECTION_HEADER,
    entry_line=ENTRY_LINE,
    type_map=map_keep_a_changelog_title,
    extract_scope=extract_plain_scope,
    extract_commit_ref=no_commit_ref,
    invalid_block=NON_VERSION_HEADING,
)

CONVENTIONAL_GRAMMAR = DialectGrammar(
    name=CONVENTIONAL_CHANGELOG,
    version_header=re.compile(r"^##?\s+\[([^\]]+)\](?:\(([^)]+)\))?\s*(?:\(([^)]+)\))?"),
    read_header=_read_conventional_header,
    section_header=SECTION_HEADER,
    entry_line=ENTRY_LINE,
    type_map=map_conventional_title,
    extract_scope=extract_bold_scope,
    extract_commit_ref=extract_conventional_ref,
    invalid_block=NON_VERSION_HEADING,
    check_bare_subject=True,
)

PLAIN_MARKDOWN_GRAMMAR = DialectGrammar(
    name=PLAIN_MARKDOWN,
    version_header=re.compile(
        r"^##?\s+(?:version\s+|v)?\[?([^\s()\[\]]+)\]?(?:\s*[-()]?\s*(\d{4}-\d{2}-\d{2}))?",
        re.IGNORECASE,
    ),
    read_header=_read_plain_header,
    section_header=SECTION_HEADER,
    entry_line=ENTRY_LINE,
    type_map=infer_type_from_title,
    extract_scope=extract_plain_scope,
    extract_commit_ref=no_commit_ref,
    default_section_title=DEFAULT_SECTION_TITLE,
)

GRAMMARS: dict[str, DialectGrammar] = {
    KEEP_A_CHANGELOG: KEEP_A_CHANGELOG_GRAMMAR,
    CONVENTIONAL_CHANGELOG: CONVENTIONAL_GRAMMAR,
    PLAIN_MARKDOWN: PLAIN_MARKDOWN_GRAMMAR,
}


def get_grammar(dialect: str) -> DialectGrammar:
    grammar = GRAMMARS.get(dialect)
    if grammar is None:
        raise UnsupportedFormatError(dialect)
    return grammar
