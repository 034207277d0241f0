"""
changelog-kit — Generic changelog dialect parser.

A single line scanner, driven by a DialectGrammar, turns changelog text into
ChangelogDocuments (one per version block, in encounter order). The scan is
an explicit fold over lines into an accumulator with a tagged state:

  SEEKING_VERSION → IN_VERSION ⇄ SKIPPING_BLOCK

Recoverable problems (missing dates, empty sections, headings that are not
valid version headers) become warnings; the offending block is skipped and
the rest of the document is kept.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from datetime import date

from changelog_kit.dialects.grammar import DialectGrammar, HeaderFields, get_grammar
from changelog_kit.dialects.synthesize import synthesize_hash
from changelog_kit.models.changelog import (
    UNRELEASED_VERSION,
    ChangelogDocument,
    Commit,
    Section,
)
from changelog_kit.models.results import ImportOptions

SEMVER = re.compile(
    r"^v?\d+\.\d+\.\d+(?:-[0-9A-Za-z.\-]+)?(?:\+[0-9A-Za-z.\-]+)?$"
)
MIN_ENTRY_CHARS = 3


class ParseState(str, enum.Enum):
    SEEKING_VERSION = "SEEKING_VERSION"
    IN_VERSION = "IN_VERSION"
    SKIPPING_BLOCK = "SKIPPING_BLOCK"


@dataclass
class _OpenSection:
    title: str
    type: str
    commits: list[Commit] = field(default_factory=list)


@dataclass
class _Accumulator:
    state: ParseState = ParseState.SEEKING_VERSION
    version: str = ""
    date: str = ""
    compare_url: str | None = None
    section: _OpenSection | None = None
    sections: list[Section] = field(default_factory=list)
    commits: list[Commit] = field(default_factory=list)
    output: list[ChangelogDocument] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class ParseOutcome:
    documents: list[ChangelogDocument]
    warnings: list[str]


def _non_whitespace_len(text: str) -> int:
    return len(re.sub(r"\s", "", text))


def normalize_version(version: str, prefix: str) -> str:
    """Drop a leading ``v`` and apply the configured prefix."""
    normalized = re.sub(r"^v", "", version, flags=re.IGNORECASE)
    if prefix and not normalized.startswith(prefix):
        normalized = prefix + normalized
    return normalized


def _flush_section(acc: _Accumulator) -> None:
    if acc.section and acc.section.commits:
        acc.sections.append(
            Section(title=acc.section.title, type=acc.section.type, commits=acc.section.commits)
        )
    acc.section = None


def _flush_document(acc: _Accumulator) -> None:
    _flush_section(acc)
    if acc.state == ParseState.IN_VERSION:
        if acc.sections:
            acc.output.append(
                ChangelogDocument(
                    version=acc.version,
                    date=acc.date,
                    sections=acc.sections,
                    commits=acc.commits,
                    compare_url=acc.compare_url,
                )
            )
        else:
            acc.warnings.append(f"Version {acc.version} has no entries; skipped")
    acc.sections = []
    acc.commits = []
    acc.section = None
    acc.compare_url = None


def _open_version(
    acc: _Accumulator,
    header: HeaderFields,
    line_no: int,
    options: ImportOptions,
    today: str,
) -> None:
    acc.state = ParseState.IN_VERSION
    acc.version = (
        header.version
        if options.preserve_versions
        else normalize_version(header.version, options.version_prefix)
    )
    acc.compare_url = header.compare_url

    if header.date and options.preserve_dates:
        acc.date = header.date
    else:
        acc.date = today
        if header.raw_date and not header.date:
            acc.warnings.append(
                f"Line {line_no}: unrecognised date {header.raw_date!r} for version {header.version}"
            )
        elif not header.date and header.version != UNRELEASED_VERSION:
            acc.warnings.append(f"Line {line_no}: version {header.version} has no date")

    if header.version != UNRELEASED_VERSION and not SEMVER.match(header.version):
        acc.warnings.append(f"Line {line_no}: version {header.version!r} is not SemVer")


def _add_entry(acc: _Accumulator, grammar: DialectGrammar, body: str) -> None:
    if _non_whitespace_len(body) < MIN_ENTRY_CHARS:
        return

    if acc.section is None:
        if grammar.default_section_title is None:
            return
        acc.section = _OpenSection(title=grammar.default_section_title, type="other")

    scope, rest = grammar.extract_scope(body)
    ref = grammar.extract_commit_ref(rest)
    if grammar.check_bare_subject and _non_whitespace_len(ref.subject) < MIN_ENTRY_CHARS:
        return

    if ref.hash:
        full_hash, short_hash = ref.hash, ref.short_hash or ref.hash[:7]
    else:
        synthetic = synthesize_hash(ref.subject, scope)
        full_hash, short_hash = synthetic.hash, synthetic.short_hash

    commit = Commit(
        hash=full_hash,
        short_hash=short_hash,
        type=acc.section.type,
        scope=scope,
        subject=ref.subject,
        date=acc.date,
        commit_link=ref.commit_link,
        pr=ref.pr,
        pr_link=ref.pr_link,
        breaking=acc.section.type == "breaking",
    )
    acc.section.commits.append(commit)
    acc.commits.append(commit)


def parse_changelog(
    text: str,
    dialect: str,
    options: ImportOptions | None = None,
    today: str | None = None,
) -> ParseOutcome:
    """
    Parse changelog text written in ``dialect`` into documents.

    Pure and synchronous: every call folds into fresh accumulators.
    Raises UnsupportedFormatError for an unknown dialect name.
    """
    grammar = get_grammar(dialect)
    options = options or ImportOptions()
    today = today or date.today().isoformat()
    acc = _Accumulator()

    for line_no, line in enumerate(text.splitlines(), start=1):
        trimmed = line.strip()
        if not trimmed:
            continue

        version_match = grammar.version_header.match(trimmed)
        header = grammar.read_header(version_match) if version_match else None
        if header is not None:
            _flush_document(acc)
            _open_version(acc, header, line_no, options, today)
            continue

        if grammar.invalid_block is not None and grammar.invalid_block.match(trimmed):
            if acc.state == ParseState.IN_VERSION:
                _flush_document(acc)
            acc.state = ParseState.SKIPPING_BLOCK
            acc.warnings.append(f"Line {line_no}: skipped block {trimmed!r} (not a version header)")
            continue

        if acc.state != ParseState.IN_VERSION:
            continue

        section_match = grammar.section_header.match(trimmed)
        if section_match:
            _flush_section(acc)
            title = section_match.group(1).strip()
            acc.section = _OpenSection(title=title, type=grammar.type_map(title))
            continue

        entry_match = grammar.entry_line.match(trimmed)
        if entry_match:
            _add_entry(acc, grammar, entry_match.group(1).strip())

    _flush_document(acc)
    return ParseOutcome(documents=acc.output, warnings=acc.warnings)
