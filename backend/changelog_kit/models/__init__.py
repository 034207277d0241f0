"""changelog-kit data models — typed contracts for import, merge and validation."""

from changelog_kit.models.changelog import (
    Author,
    BreakingChange,
    ChangelogDocument,
    ChangelogStats,
    Commit,
    Contributor,
    Section,
    compute_stats,
)
from changelog_kit.models.results import (
    ImportIssue,
    ImportOptions,
    ImportResult,
    ImportSource,
    MergeOptions,
    MergeSource,
    ValidationReport,
)

__all__ = [
    "Author",
    "BreakingChange",
    "ChangelogDocument",
    "ChangelogStats",
    "Commit",
    "Contributor",
    "Section",
    "compute_stats",
    "ImportIssue",
    "ImportOptions",
    "ImportResult",
    "ImportSource",
    "MergeOptions",
    "MergeSource",
    "ValidationReport",
]
