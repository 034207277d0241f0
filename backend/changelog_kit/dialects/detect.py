"""
changelog-kit — Changelog dialect detection.

Classifies raw text as one of the three supported dialects. The specific
dialects are tried first so the generic plain-markdown reading never
swallows them:

  1. Conventional Changelog — ``## [1.2.0](compare-url) (2024-01-01)`` headers,
     or Features/Bug Fixes sections together with ``* **scope:**`` bullets
  2. Keep a Changelog — the "All notable changes" preamble, or
     ``## [1.2.0] - 2024-01-01`` headers with Added/Changed/... sections
  3. plain markdown — everything else, including empty text
"""

from __future__ import annotations

import json
import re

from changelog_kit.models.results import Dialect

KEEP_A_CHANGELOG = "keep-a-changelog"
CONVENTIONAL_CHANGELOG = "conventional-changelog"
PLAIN_MARKDOWN = "plain-markdown"
JSON_FORMAT = "json"

DIALECTS = (KEEP_A_CHANGELOG, CONVENTIONAL_CHANGELOG, PLAIN_MARKDOWN)

VERSION_PATTERN = r"v?\d+(?:\.\d+)*(?:[-+][0-9A-Za-z.\-+]+)?"
ISO_DATE_PATTERN = r"\d{4}-\d{2}-\d{2}"

CONVENTIONAL_VERSION_HEADER = re.compile(
    rf"^##?\s+\[{VERSION_PATTERN}\](?:\([^)]+\)\s*(?:\({ISO_DATE_PATTERN}\))?|\s*\({ISO_DATE_PATTERN}\))"
)
CONVENTIONAL_SECTION = re.compile(
    r"^###\s+(Features|Bug Fixes|Performance Improvements|BREAKING CHANGES)\s*$",
    re.IGNORECASE,
)
CONVENTIONAL_BULLET = re.compile(r"^\*\s+\*\*[^*]+\*\*:?")

KEEP_A_CHANGELOG_PREAMBLE = re.compile(r"all notable changes", re.IGNORECASE)
KEEP_A_CHANGELOG_VERSION_HEADER = re.compile(rf"^##\s+\[{VERSION_PATTERN}\]\s+-\s+{ISO_DATE_PATTERN}")
KEEP_A_CHANGELOG_SECTION = re.compile(r"^###\s+(Added|Changed|Deprecated|Removed|Fixed|Security)\s*$")


def _any_line(pattern: re.Pattern[str], lines: list[str]) -> bool:
    return any(pattern.search(line) for line in lines)


def detect_format(text: str) -> Dialect:
    """Classify changelog text. Never raises; unknown text is plain markdown."""
    if not text:
        return PLAIN_MARKDOWN

    lines = [line.strip() for line in text.splitlines()]

    if _any_line(CONVENTIONAL_VERSION_HEADER, lines) or (
        _any_line(CONVENTIONAL_SECTION, lines) and _any_line(CONVENTIONAL_BULLET, lines)
    ):
        return CONVENTIONAL_CHANGELOG

    if KEEP_A_CHANGELOG_PREAMBLE.search(text) or (
        _any_line(KEEP_A_CHANGELOG_VERSION_HEADER, lines)
        and _any_line(KEEP_A_CHANGELOG_SECTION, lines)
    ):
        return KEEP_A_CHANGELOG

    return PLAIN_MARKDOWN


def detect_source_format(text: str) -> str:
    """Like detect_format, but recognises JSON documents first."""
    stripped = text.strip()
    if stripped.startswith(("{", "[")):
        try:
            json.loads(stripped)
            return JSON_FORMAT
        except json.JSONDecodeError:
            pass
    return detect_format(text)
