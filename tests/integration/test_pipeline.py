"""Integration tests for the import → merge → validate flow on real files."""

import json

import pytest

from changelog_kit.models.results import ImportSource, MergeOptions, MergeSource
from changelog_kit.pipeline.importer import import_file
from changelog_kit.pipeline.merge import merge
from changelog_kit.pipeline.validate import validate

MONOREPO_CORE = """# Changelog

All notable changes to this project will be documented in this file.

## [Unreleased]

### Added
- api: streaming responses

## [2.1.0] - 2024-04-02

### Added
- api: pagination cursor
- Batch endpoint

### Fixed
- Timeout on large uploads

## Not A Version

### Added
- should never appear

## [2.0.0] - 2024-02-10

### Removed
- Legacy auth tokens
"""

MONOREPO_UI = """# Changelog

## [2.1.0](https://github.com/example/repo/compare/v2.0.0...v2.1.0) (2024-04-05)

### Features

* **theme:** dark mode ([1a2b3c4](https://github.com/example/repo/commit/1a2b3c4))
* **table:** sticky headers ([5d6e7f8](https://github.com/example/repo/commit/5d6e7f8))

### Bug Fixes

* **table:** column resize jitter ([9a0b1c2](https://github.com/example/repo/commit/9a0b1c2))
"""

MONOREPO_DOCS = {
    "version": "2.1.0",
    "date": "2024-04-01",
    "commits": [
        {"hash": "1a2b3c4", "subject": "dark mode", "type": "feat", "scope": "theme", "date": "2024-04-01"},
        {"hash": "deadbee", "subject": "Document dark mode", "type": "docs", "date": "2024-04-01"},
    ],
    "sections": [
        {"title": "Documentation", "type": "docs", "commits": [{"hash": "deadbee", "subject": "Document dark mode"}]},
        {"title": "Features", "type": "feat", "commits": [{"hash": "1a2b3c4", "subject": "dark mode"}]},
    ],
}


@pytest.fixture
def monorepo(write_source):
    return {
        "core": write_source("core.md", MONOREPO_CORE),
        "ui": write_source("ui.md", MONOREPO_UI),
        "docs": write_source("docs.json", json.dumps(MONOREPO_DOCS)),
    }


class TestImportFlow:
    async def test_import_recovers_from_bad_block(self, monorepo):
        result = await import_file(ImportSource(path=monorepo["core"]))
        assert result.success is True
        assert result.format == "keep-a-changelog"
        assert [d.version for d in result.entries] == ["Unreleased", "2.1.0", "2.0.0"]
        assert any("skipped block" in w for w in result.warnings)
        subjects = [c.subject for d in result.entries for c in d.commits]
        assert "should never appear" not in subjects

        report = validate(result)
        assert report.valid is True
        assert any("skipped block" in w for w in report.warnings)


class TestMergeFlow:
    async def test_merge_monorepo(self, monorepo):
        merged = await merge(
            [
                MergeSource(path=monorepo["ui"], package_name="ui"),
                MergeSource(path=monorepo["core"], package_name="core"),
                MergeSource(path=monorepo["docs"], package_name="docs", format="json"),
            ],
            MergeOptions(strategy="by-date", deduplicate_key="hash", preserve_package_prefix=True),
        )

        hashes = [c.hash for c in merged.commits]
        assert len(hashes) == len(set(hashes))
        assert hashes.count("1a2b3c4") == 1
        # ui came first, so its copy of the shared commit survives
        shared = next(c for c in merged.commits if c.hash == "1a2b3c4")
        assert shared.scope == "ui/theme"

        dates = [c.date for c in merged.commits]
        assert dates == sorted(dates, reverse=True)
        # the Unreleased block is dated on import, so it leads
        assert merged.date == dates[0]
        assert merged.commits[0].subject == "streaming responses"
        assert merged.version == "Multiple"
        assert merged.stats.total_commits == len(merged.commits)

        report = validate(merged)
        assert report.errors == []

    async def test_docs_features_section_is_emptied(self, monorepo):
        merged = await merge(
            [
                MergeSource(path=monorepo["ui"], package_name="ui"),
                MergeSource(path=monorepo["docs"], package_name="docs"),
            ],
            MergeOptions(strategy="by-version"),
        )
        assert [s.title for s in merged.sections] == ["Features", "Bug Fixes", "Documentation"]
        assert merged.version == "2.1.0"
        assert merged.compare_url is None
