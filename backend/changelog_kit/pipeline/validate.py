"""
changelog-kit — Post-hoc validation of import and merge results.

Errors make a result invalid; warnings are advisory. Validation never
undoes a successful import, it only reports on it.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Sequence, Union

from changelog_kit.dialects.detect import ISO_DATE_PATTERN
from changelog_kit.models.changelog import UNKNOWN_VERSION, ChangelogDocument
from changelog_kit.models.results import ImportResult, ValidationReport
from changelog_kit.utils.logging import logger, step_timer

FULL_ISO_DATE = re.compile(rf"^{ISO_DATE_PATTERN}$")

Validatable = Union[ImportResult, ChangelogDocument, Sequence[ChangelogDocument]]


def _check_document(doc: ChangelogDocument, report: ValidationReport) -> None:
    label = doc.version or "?"

    if not doc.version or doc.version == UNKNOWN_VERSION:
        report.warnings.append("Entry has no valid version")
    if not doc.date or not FULL_ISO_DATE.match(doc.date):
        report.warnings.append(f"Version {label} has no valid date")
    if not doc.commits:
        report.warnings.append(f"Version {label} has no commits")
    if not doc.sections:
        report.warnings.append(f"Version {label} has no sections")

    known = {c.hash for c in doc.commits}
    for section in doc.sections:
        if not section.commits:
            report.warnings.append(f"Version {label}: section '{section.title}' has no commits")
        for commit in section.commits:
            if commit.hash not in known:
                report.errors.append(
                    f"Version {label}: section '{section.title}' references "
                    f"commit {commit.short_hash} missing from the commit list"
                )

    duplicates = [h for h, n in Counter(c.hash for c in doc.commits).items() if n > 1]
    if duplicates:
        report.warnings.append(f"Version {label}: {len(duplicates)} duplicate commit hash(es)")


def validate(result: Validatable) -> ValidationReport:
    """Validate an ImportResult, a batch of documents, or one document."""
    with step_timer("Validate changelog"):
        report = ValidationReport()

        if isinstance(result, ImportResult):
            entries = list(result.entries)
        elif isinstance(result, ChangelogDocument):
            entries = [result]
        else:
            entries = list(result)

        if not entries:
            report.errors.append("No valid entries imported")

        for version, count in Counter(doc.version for doc in entries).items():
            if count > 1:
                report.errors.append(f"Duplicate version {version} ({count} entries)")

        for doc in entries:
            _check_document(doc, report)

        if isinstance(result, ImportResult):
            report.errors.extend(issue.message for issue in result.errors)
            report.warnings.extend(result.warnings)

        report.valid = not report.errors
        logger.info(
            "  Validation: valid=%s errors=%d warnings=%d",
            report.valid, len(report.errors), len(report.warnings),
        )
        return report
