"""
changelog-kit — Canonical changelog document model.

Every dialect parser, the JSON codec, the merge engine and the validator
work against ChangelogDocument. No raw dicts leak across boundaries.

Wire format is camelCase (shortHash, commitLink, compareUrl) so documents
round-trip with the peer formatters; Python code uses snake_case.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SECTION_TYPES = (
    "feat",
    "fix",
    "docs",
    "refactor",
    "perf",
    "security",
    "deprecated",
    "removed",
    "dependencies",
    "breaking",
    "other",
)

UNKNOWN_VERSION = "unknown"
UNRELEASED_VERSION = "Unreleased"
MULTIPLE_VERSIONS = "Multiple"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Author(_WireModel):
    name: str = "unknown"
    email: str = "unknown@example.com"
    username: str | None = None


class Commit(_WireModel):
    hash: str = Field(min_length=1)
    short_hash: str = Field(min_length=1)
    type: str = "other"
    scope: str | None = None
    subject: str
    author: Author = Field(default_factory=Author)
    date: str
    commit_link: str | None = None
    pr: str | None = None
    pr_link: str | None = None
    breaking: bool = False


class Section(_WireModel):
    title: str
    type: str = "other"
    commits: list[Commit] = Field(default_factory=list)
    priority: int | None = None


class BreakingChange(_WireModel):
    description: str
    commit: Commit
    migration: str | None = None


class Contributor(_WireModel):
    name: str
    email: str
    commit_count: int = 0
    username: str | None = None
    contribution_types: list[str] | None = None


class ChangelogStats(_WireModel):
    total_commits: int = 0
    commits_by_type: dict[str, int] = Field(default_factory=dict)
    contributor_count: int = 0


class ChangelogDocument(_WireModel):
    """
    Canonical changelog document: one version block.

    ``sections`` hold the same Commit objects (by hash) as ``commits``;
    ``version`` and ``date`` are always set, possibly to sentinels.
    """

    version: str = Field(default=UNKNOWN_VERSION, min_length=1)
    date: str = Field(min_length=1)
    sections: list[Section] = Field(default_factory=list)
    commits: list[Commit] = Field(default_factory=list)
    compare_url: str | None = None
    breaking_changes: list[BreakingChange] | None = None
    contributors: list[Contributor] | None = None
    stats: ChangelogStats | None = None

    def to_wire(self) -> dict:
        """Dump with camelCase keys for formatters and HTTP responses."""
        return self.model_dump(by_alias=True, exclude_none=True)


def compute_stats(commits: list[Commit], contributors: list[Contributor] | None = None) -> ChangelogStats:
    """Count commits by type; contributors come from the list when one is given."""
    by_type: dict[str, int] = {}
    for commit in commits:
        by_type[commit.type or "other"] = by_type.get(commit.type or "other", 0) + 1
    return ChangelogStats(
        total_commits=len(commits),
        commits_by_type=by_type,
        contributor_count=len(contributors) if contributors else len({c.author.email for c in commits}),
    )
