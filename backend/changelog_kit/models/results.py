"""
changelog-kit — Import, merge and validation contracts.

Every import returns an ImportResult with the parsed entries plus the
non-fatal warnings collected on the way; merges are driven by MergeSource
and MergeOptions; the validator reports through ValidationReport.
"""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, Field

from changelog_kit.models.changelog import ChangelogDocument

Dialect = Literal["keep-a-changelog", "conventional-changelog", "plain-markdown"]
ImportFormat = Literal["auto", "keep-a-changelog", "conventional-changelog", "plain-markdown"]
SourceFormat = Literal[
    "auto", "markdown", "json", "keep-a-changelog", "conventional-changelog", "plain-markdown"
]
MergeStrategy = Literal["by-date", "by-version", "by-package"]
DedupKey = Literal["hash", "message", "both"]

MERGE_STRATEGIES: tuple[str, ...] = get_args(MergeStrategy)
DEDUP_KEYS: tuple[str, ...] = get_args(DedupKey)


class ImportSource(BaseModel):
    path: str = Field(min_length=1)
    format: ImportFormat = "auto"


class ImportOptions(BaseModel):
    preserve_dates: bool = True
    preserve_versions: bool = True
    date_format: str = "YYYY-MM-DD"
    version_prefix: str = ""


class ImportIssue(BaseModel):
    type: Literal["parse", "format", "validation"]
    message: str
    line: int | None = None
    context: str | None = None


class ImportResult(BaseModel):
    success: bool = False
    format: Dialect | None = None
    entries: list[ChangelogDocument] = Field(default_factory=list)
    errors: list[ImportIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class MergeSource(BaseModel):
    path: str = Field(min_length=1)
    package_name: str | None = None
    format: SourceFormat = "auto"


class MergeOptions(BaseModel):
    strategy: MergeStrategy = "by-date"
    deduplicate: bool = True
    deduplicate_key: DedupKey = "hash"
    preserve_package_prefix: bool = False


class ValidationReport(BaseModel):
    valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
