"""
changelog-kit — Structured error catalog.

Every error has a code, human message, and suggested fix.
No raw exceptions leak to HTTP callers.
"""

from __future__ import annotations

from typing import Any


class ChangelogKitError(Exception):
    """Base error with structured code + suggestion."""

    def __init__(self, code: str, message: str, suggestion: str = "", detail: Any = None):
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "error_code": self.code,
            "message": self.message,
        }
        if self.suggestion:
            d["suggestion"] = self.suggestion
        if self.detail:
            d["detail"] = self.detail
        return d


class ParseError(ChangelogKitError):
    """A source could not be read or decoded. Fatal for merges."""

    def __init__(
        self,
        source: str,
        message: str,
        code: str = "PARSE_FAILED",
        suggestion: str = "",
        detail: Any = None,
    ):
        self.source = source
        super().__init__(
            code=code,
            message=message,
            suggestion=suggestion or "Check that the file exists and is a changelog in a supported format.",
            detail=detail,
        )


class SourceNotFoundError(ParseError):
    def __init__(self, source: str):
        super().__init__(
            source,
            f"Changelog source not found: {source}",
            code="SOURCE_NOT_FOUND",
            suggestion="Check the path. Relative paths are resolved against the working directory.",
        )


class SourceReadError(ParseError):
    def __init__(self, source: str, reason: str):
        super().__init__(
            source,
            f"Could not read {source}: {reason}",
            code="SOURCE_UNREADABLE",
            suggestion="Sources must be UTF-8 text files readable by the current user.",
        )


class SourceTooLargeError(ParseError):
    def __init__(self, source: str, size_mb: float, limit_mb: float):
        super().__init__(
            source,
            f"Source exceeds {limit_mb:.1f}MB limit: {source} ({size_mb:.1f}MB)",
            code="SOURCE_TOO_LARGE",
            suggestion="Split the changelog or raise CHANGELOG_KIT_MAX_SOURCE_BYTES.",
        )


class MalformedJSONError(ParseError):
    def __init__(self, source: str, reason: str):
        super().__init__(
            source,
            f"Malformed JSON in {source}: {reason}",
            code="MALFORMED_JSON",
            suggestion="Validate the file with a JSON linter before merging.",
        )


class SchemaValidationError(ParseError):
    def __init__(self, source: str, errors: list[str]):
        self.errors = errors
        super().__init__(
            source,
            f"JSON changelog does not match the schema: {'; '.join(errors)}",
            code="SCHEMA_INVALID",
            suggestion="Required fields: sections[].title, commits[].hash, commits[].subject.",
            detail=errors,
        )


class UnsupportedFormatError(ChangelogKitError):
    def __init__(self, fmt: str):
        super().__init__(
            code="UNSUPPORTED_FORMAT",
            message=f"Unsupported changelog format: {fmt}",
            suggestion="Use one of: auto, keep-a-changelog, conventional-changelog, plain-markdown, json.",
        )


class EmptyMergeError(ChangelogKitError):
    def __init__(self):
        super().__init__(
            code="MERGE_NO_SOURCES",
            message="Merge needs at least one source",
            suggestion="Pass one or more changelog files to merge.",
        )


class InvalidOptionError(ChangelogKitError):
    def __init__(self, option: str, value: str, allowed: list[str]):
        super().__init__(
            code="INVALID_OPTION",
            message=f"Invalid value for {option}: {value!r}",
            suggestion=f"Allowed values: {', '.join(allowed)}.",
        )
