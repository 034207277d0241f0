"""
changelog-kit — Changelog merge engine.

Folds several changelogs (e.g. per-package changelogs of a monorepo) into
one document:

  resolve sources → package-prefix scopes → concatenate → deduplicate
  → sort by strategy → assemble version/date/stats

Inputs are never mutated; every step builds new models. Sources are read
concurrently but folded strictly in the order they were given, and any
source that cannot be read or decoded aborts the whole merge.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Sequence

from changelog_kit.core.config import settings
from changelog_kit.errors import EmptyMergeError, InvalidOptionError
from changelog_kit.models.changelog import (
    MULTIPLE_VERSIONS,
    UNKNOWN_VERSION,
    BreakingChange,
    ChangelogDocument,
    Commit,
    Contributor,
    Section,
    compute_stats,
)
from changelog_kit.models.results import DEDUP_KEYS, MERGE_STRATEGIES, MergeOptions, MergeSource
from changelog_kit.pipeline.sources import load_documents, read_source_async
from changelog_kit.utils.logging import logger, step_timer


def default_merge_options() -> MergeOptions:
    return MergeOptions(
        strategy=settings.merge.strategy,
        deduplicate=settings.merge.deduplicate,
        deduplicate_key=settings.merge.deduplicate_key,
        preserve_package_prefix=settings.merge.preserve_package_prefix,
    )


# ──────────────────────────────────────────────────────────
# Building blocks
# ──────────────────────────────────────────────────────────

def dedup_key(commit: Commit, key: str) -> str:
    if key == "hash":
        return commit.hash
    if key == "message":
        return f"{commit.type}:{commit.scope or ''}:{commit.subject}"
    if key == "both":
        return f"{commit.hash}:{commit.subject}"
    raise InvalidOptionError("deduplicate_key", key, list(DEDUP_KEYS))


def deduplicate(commits: Sequence[Commit], key: str) -> list[Commit]:
    """Keep the first commit per key, in input order."""
    seen: set[str] = set()
    result: list[Commit] = []
    for commit in commits:
        k = dedup_key(commit, key)
        if k not in seen:
            seen.add(k)
            result.append(commit)
    logger.debug("  Dedup (%s): %d → %d commits", key, len(commits), len(result))
    return result


def prefixed_scope(scope: str | None, package_name: str) -> str:
    return f"{package_name}/{scope}" if scope else package_name


def _relinked(document: ChangelogDocument, package_name: str | None) -> ChangelogDocument:
    """
    Copy a document so every section entry is the very object held in
    ``commits`` (first one per hash), optionally prefixing scopes.
    """
    def rewrite(commit: Commit) -> Commit:
        if package_name is None:
            return commit.model_copy()
        return commit.model_copy(update={"scope": prefixed_scope(commit.scope, package_name)})

    commits = [rewrite(c) for c in document.commits]
    by_hash: dict[str, Commit] = {}
    for commit in commits:
        by_hash.setdefault(commit.hash, commit)

    sections: list[Section] = []
    for section in document.sections:
        entries: list[Commit] = []
        for commit in section.commits:
            linked = by_hash.get(commit.hash)
            if linked is None:
                linked = rewrite(commit)
                by_hash[linked.hash] = linked
                commits.append(linked)
            entries.append(linked)
        sections.append(section.model_copy(update={"commits": entries}))

    return document.model_copy(update={"commits": commits, "sections": sections})


def merge_breaking_changes(documents: Sequence[ChangelogDocument]) -> list[BreakingChange]:
    return [bc for doc in documents for bc in doc.breaking_changes or []]


def merge_contributors(documents: Sequence[ChangelogDocument]) -> list[Contributor]:
    """One entry per email with summed commit counts, busiest first."""
    by_email: dict[str, Contributor] = {}
    for doc in documents:
        for contributor in doc.contributors or []:
            existing = by_email.get(contributor.email)
            if existing is None:
                by_email[contributor.email] = contributor.model_copy()
            else:
                existing.commit_count += contributor.commit_count
    return sorted(by_email.values(), key=lambda c: c.commit_count, reverse=True)


def fold_documents(documents: Sequence[ChangelogDocument], today: str | None = None) -> ChangelogDocument:
    """Fold the version blocks of one source into a single document."""
    if not documents:
        return ChangelogDocument(version=UNKNOWN_VERSION, date=today or date.today().isoformat())
    if len(documents) == 1:
        return documents[0]

    first = documents[0]
    return ChangelogDocument(
        version=first.version,
        date=max(d.date for d in documents),
        sections=[s for d in documents for s in d.sections],
        commits=[c for d in documents for c in d.commits],
        compare_url=first.compare_url,
        breaking_changes=merge_breaking_changes(documents) or None,
        contributors=[c for d in documents for c in d.contributors or []] or None,
    )


def _sort_commits(commits: list[Commit], strategy: str) -> list[Commit]:
    if strategy == "by-date":
        return sorted(commits, key=lambda c: c.date, reverse=True)
    if strategy == "by-package":
        return sorted(commits, key=lambda c: c.scope or "")
    if strategy == "by-version":
        return list(commits)
    raise InvalidOptionError("strategy", strategy, list(MERGE_STRATEGIES))


# ──────────────────────────────────────────────────────────
# Merge
# ──────────────────────────────────────────────────────────

def merge_documents(
    documents: Sequence[ChangelogDocument],
    options: MergeOptions | None = None,
    package_names: Sequence[str | None] | None = None,
    today: str | None = None,
) -> ChangelogDocument:
    """
    Merge already-resolved documents, one per source, in source order.

    Dedup keeps the first occurrence per key and drops the removed commits
    from every section too; sections left empty are dropped.
    """
    if not documents:
        raise EmptyMergeError()
    options = options or default_merge_options()
    names = list(package_names) if package_names is not None else [None] * len(documents)

    prepared = [
        _relinked(doc, name if options.preserve_package_prefix else None)
        for doc, name in zip(documents, names)
    ]

    commits = [c for doc in prepared for c in doc.commits]
    sections = [s for doc in prepared for s in doc.sections]
    total_in = len(commits)

    if options.deduplicate:
        commits = deduplicate(commits, options.deduplicate_key)
        kept = {id(c) for c in commits}
        sections = [
            s.model_copy(update={"commits": [c for c in s.commits if id(c) in kept]})
            for s in sections
        ]
        sections = [s for s in sections if s.commits]

    commits = _sort_commits(commits, options.strategy)
    sections = [
        s.model_copy(update={"commits": _sort_commits(s.commits, options.strategy)})
        for s in sections
    ]

    versions = [doc.version for doc in documents]
    version = versions[0] if len(set(versions)) == 1 else MULTIPLE_VERSIONS

    if commits:
        merged_date = max(c.date for c in commits)
    else:
        merged_date = max(doc.date for doc in documents) or today or date.today().isoformat()

    breaking_changes = merge_breaking_changes(documents)
    contributors = merge_contributors(documents)

    compare_urls = {doc.compare_url for doc in documents}
    compare_url = documents[0].compare_url if len(compare_urls) == 1 else None

    logger.info(
        "  Merged %d source(s): %d → %d commits, %d section(s), version=%s",
        len(documents), total_in, len(commits), len(sections), version,
    )

    return ChangelogDocument(
        version=version,
        date=merged_date,
        sections=sections,
        commits=commits,
        compare_url=compare_url,
        breaking_changes=breaking_changes or None,
        contributors=contributors or None,
        stats=compute_stats(commits, contributors),
    )


async def merge(sources: Sequence[MergeSource], options: MergeOptions | None = None) -> ChangelogDocument:
    """
    Read, parse and merge changelog files.

    Raises EmptyMergeError without sources, and the first ParseError raised
    by any source; no partial merge is ever returned.
    """
    if not sources:
        raise EmptyMergeError()
    options = options or default_merge_options()

    with step_timer(f"Merge {len(sources)} changelog(s) [{options.strategy}]"):
        texts = await asyncio.gather(*(read_source_async(s.path) for s in sources))

        documents = [
            fold_documents(load_documents(text, source.format, source.path).documents)
            for source, text in zip(sources, texts)
        ]
        return merge_documents(documents, options, [s.package_name for s in sources])
