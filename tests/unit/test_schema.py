"""Unit tests for the bundled changelog JSON Schema."""

import json

import jsonschema
import pytest

from changelog_kit.pipeline.sources import SCHEMA_PATH


@pytest.fixture(scope="module")
def schema():
    with open(SCHEMA_PATH, encoding="utf-8") as f:
        return json.load(f)


def _validate(schema, data):
    jsonschema.validate(instance=data, schema=schema)


COMMIT = {"hash": "abc1234", "subject": "Add dashboard"}


class TestSchemaValidation:
    def test_schema_is_valid_draft7(self, schema):
        jsonschema.Draft7Validator.check_schema(schema)

    def test_minimal_document(self, schema):
        _validate(schema, {"version": "1.0.0"})

    def test_full_document(self, schema):
        _validate(schema, {
            "version": "1.0.0",
            "date": "2024-01-01",
            "compareUrl": "https://github.com/o/r/compare/v0.9.0...v1.0.0",
            "commits": [dict(COMMIT, shortHash="abc1234", type="feat", scope=None)],
            "sections": [{"title": "Features", "type": "feat", "commits": [COMMIT]}],
        })

    def test_list_of_documents(self, schema):
        _validate(schema, [{"version": "1.0.0"}, {"version": "0.9.0"}])

    def test_versions_wrapper(self, schema):
        _validate(schema, {"versions": [{"version": "1.0.0", "commits": [COMMIT]}]})

    def test_commit_missing_hash(self, schema):
        with pytest.raises(jsonschema.ValidationError):
            _validate(schema, {"commits": [{"subject": "No hash"}]})

    def test_commit_missing_subject(self, schema):
        with pytest.raises(jsonschema.ValidationError):
            _validate(schema, {"commits": [{"hash": "abc1234"}]})

    def test_empty_hash(self, schema):
        with pytest.raises(jsonschema.ValidationError):
            _validate(schema, {"commits": [{"hash": "", "subject": "x"}]})

    def test_section_missing_title(self, schema):
        with pytest.raises(jsonschema.ValidationError):
            _validate(schema, {"sections": [{"commits": []}]})

    def test_empty_version(self, schema):
        with pytest.raises(jsonschema.ValidationError):
            _validate(schema, {"version": ""})

    def test_versions_must_be_array(self, schema):
        with pytest.raises(jsonschema.ValidationError):
            _validate(schema, {"versions": {"version": "1.0.0"}})

    def test_scalar_root(self, schema):
        with pytest.raises(jsonschema.ValidationError):
            _validate(schema, "1.0.0")

    def test_breaking_must_be_boolean(self, schema):
        with pytest.raises(jsonschema.ValidationError):
            _validate(schema, {"commits": [dict(COMMIT, breaking="yes")]})

    def test_breaking_changes_and_contributors(self, schema):
        _validate(schema, {
            "version": "2.0.0",
            "breakingChanges": [{"description": "API removed", "commit": COMMIT, "migration": "Use v2"}],
            "contributors": [{"name": "Ann", "email": "ann@x.io", "commitCount": 3}],
            "stats": {"totalCommits": 1, "commitsByType": {"feat": 1}, "contributorCount": 1},
        })

    def test_breaking_change_missing_commit(self, schema):
        with pytest.raises(jsonschema.ValidationError):
            _validate(schema, {"breakingChanges": [{"description": "API removed"}]})

    def test_contributor_missing_email(self, schema):
        with pytest.raises(jsonschema.ValidationError):
            _validate(schema, {"contributors": [{"name": "Ann", "commitCount": 3}]})

    def test_negative_commit_count(self, schema):
        with pytest.raises(jsonschema.ValidationError):
            _validate(schema, {"contributors": [{"name": "Ann", "email": "ann@x.io", "commitCount": -1}]})
