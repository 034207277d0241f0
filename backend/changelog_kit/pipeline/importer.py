"""
changelog-kit — Changelog import step.

Turns one existing changelog (file or raw text) into canonical documents.
Import never raises for bad input: read and parse failures are reported on
the ImportResult, and success means at least one version entry was found.
"""

from __future__ import annotations

from changelog_kit.dialects.detect import detect_format
from changelog_kit.dialects.parser import parse_changelog
from changelog_kit.errors import ChangelogKitError, UnsupportedFormatError
from changelog_kit.models.results import ImportIssue, ImportOptions, ImportResult, ImportSource
from changelog_kit.pipeline.sources import read_source_async
from changelog_kit.utils.logging import logger, step_timer

NO_ENTRIES_WARNING = "No valid version entries found"


def import_text(
    text: str,
    fmt: str = "auto",
    options: ImportOptions | None = None,
) -> ImportResult:
    """Import changelog text written in ``fmt`` (or auto-detected)."""
    result = ImportResult()
    dialect = detect_format(text) if fmt == "auto" else fmt
    if fmt == "auto":
        logger.debug("  Detected format: %s", dialect)

    try:
        outcome = parse_changelog(text, dialect, options)
    except UnsupportedFormatError as exc:
        result.errors.append(ImportIssue(type="format", message=exc.message))
        return result

    result.format = dialect
    result.entries = outcome.documents
    result.warnings.extend(outcome.warnings)
    result.success = len(result.entries) > 0

    if result.success:
        logger.info("  Imported %d version(s) as %s", len(result.entries), dialect)
    else:
        result.warnings.append(NO_ENTRIES_WARNING)
        logger.warning("  No valid entries imported")

    return result


async def import_file(source: ImportSource, options: ImportOptions | None = None) -> ImportResult:
    """Read ``source.path`` and import it. Read failures land on ``errors``."""
    with step_timer(f"Import {source.path}"):
        try:
            text = await read_source_async(source.path)
        except ChangelogKitError as exc:
            logger.warning("  Import failed: %s", exc.code)
            return ImportResult(
                errors=[ImportIssue(type="parse", message=exc.message, context=source.path)],
                warnings=[NO_ENTRIES_WARNING],
            )

        return import_text(text, source.format, options)
