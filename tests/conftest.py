"""Shared test configuration and fixtures for the changelog-kit test suite."""

import sys
from pathlib import Path

import pytest

# Add backend to Python path so imports work
backend_dir = str(Path(__file__).parent.parent / "backend")
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

from changelog_kit.models.changelog import ChangelogDocument  # noqa: E402


KEEP_A_CHANGELOG_TEXT = """# Changelog

All notable changes to this project will be documented in this file.

## [1.0.0] - 2024-01-01

### Added
- New feature

### Fixed
- Bug fix
"""

CONVENTIONAL_TEXT = """# Changelog

## [1.0.0](https://github.com/example/repo/compare/v0.9.0...v1.0.0) (2024-01-01)

### Features

* **core:** add new feature ([abc1234](https://github.com/example/repo/commit/abc1234))

### Bug Fixes

* **ui:** fix layout issue ([def5678](https://github.com/example/repo/commit/def5678))
"""

PLAIN_TEXT = """# Changelog

## 1.0.0 - 2024-01-01

### Changes

- Update dependencies
- Fix bugs
"""


# ──────────────────────────────────────────────────────────
# Test-only renderers: canonical document → dialect text
# ──────────────────────────────────────────────────────────

KEEP_A_CHANGELOG_TITLES = {
    "feat": "Added",
    "fix": "Fixed",
    "security": "Security",
    "deprecated": "Deprecated",
    "removed": "Removed",
}

CONVENTIONAL_TITLES = {
    "feat": "Features",
    "fix": "Bug Fixes",
    "perf": "Performance Improvements",
    "docs": "Documentation",
    "refactor": "Code Refactoring",
    "security": "Security",
}


def render_keep_a_changelog(doc: ChangelogDocument) -> str:
    out = ["# Changelog", "", "All notable changes to this project will be documented in this file.", ""]
    out += [f"## [{doc.version}] - {doc.date}", ""]
    for section in doc.sections:
        out += [f"### {KEEP_A_CHANGELOG_TITLES.get(section.type, 'Changed')}", ""]
        for commit in section.commits:
            prefix = f"{commit.scope}: " if commit.scope else ""
            out.append(f"- {prefix}{commit.subject}")
        out.append("")
    return "\n".join(out)


def render_conventional(doc: ChangelogDocument) -> str:
    out = ["# Changelog", ""]
    out += [f"## [{doc.version}](https://github.com/example/repo/compare/v{doc.version}) ({doc.date})", ""]
    for section in doc.sections:
        out += [f"### {CONVENTIONAL_TITLES.get(section.type, 'Miscellaneous')}", ""]
        for commit in section.commits:
            scope = f"**{commit.scope}:** " if commit.scope else ""
            ref = f"([{commit.short_hash}](https://github.com/example/repo/commit/{commit.hash}))"
            out.append(f"* {scope}{commit.subject} {ref}")
        out.append("")
    return "\n".join(out)


def render_plain(doc: ChangelogDocument) -> str:
    out = ["# Changelog", "", f"## {doc.version} - {doc.date}", ""]
    for section in doc.sections:
        out += [f"### {section.title}", ""]
        for commit in section.commits:
            prefix = f"{commit.scope}: " if commit.scope else ""
            out.append(f"- {prefix}{commit.subject}")
        out.append("")
    return "\n".join(out)


RENDERERS = {
    "keep-a-changelog": render_keep_a_changelog,
    "conventional-changelog": render_conventional,
    "plain-markdown": render_plain,
}


@pytest.fixture(scope="session")
def project_root():
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def renderers():
    return RENDERERS


@pytest.fixture
def write_source(tmp_path):
    """Write a changelog file under tmp_path and return its path as a string."""

    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture(scope="session")
def keep_a_changelog_text():
    return KEEP_A_CHANGELOG_TEXT


@pytest.fixture(scope="session")
def conventional_text():
    return CONVENTIONAL_TEXT


@pytest.fixture(scope="session")
def plain_text():
    return PLAIN_TEXT
