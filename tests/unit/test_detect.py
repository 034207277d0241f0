"""Unit tests for changelog dialect detection."""

from changelog_kit.dialects.detect import detect_format, detect_source_format


class TestDetectFormat:
    def test_keep_a_changelog(self, keep_a_changelog_text):
        assert detect_format(keep_a_changelog_text) == "keep-a-changelog"

    def test_conventional(self, conventional_text):
        assert detect_format(conventional_text) == "conventional-changelog"

    def test_plain_markdown(self, plain_text):
        assert detect_format(plain_text) == "plain-markdown"

    def test_empty_text(self):
        assert detect_format("") == "plain-markdown"

    def test_arbitrary_prose(self):
        assert detect_format("Just some notes about the weather.") == "plain-markdown"

    def test_keep_a_changelog_without_preamble(self):
        text = "## [1.0.0] - 2024-01-01\n\n### Added\n- Something new\n"
        assert detect_format(text) == "keep-a-changelog"

    def test_keep_a_changelog_sections_are_case_sensitive(self):
        text = "## [1.0.0] - 2024-01-01\n\n### added\n- Something new\n"
        assert detect_format(text) == "plain-markdown"

    def test_emoji_sections_are_not_keep_a_changelog(self):
        text = "## [1.0.0] - 2024-01-01\n\n### ✨ Added\n- Something new\n"
        assert detect_format(text) == "plain-markdown"

    def test_preamble_alone_is_keep_a_changelog(self):
        assert detect_format("All Notable Changes are listed here.") == "keep-a-changelog"

    def test_conventional_sections_and_bold_bullets(self):
        text = "### Bug Fixes\n\n* **parser:** handle empty input\n"
        assert detect_format(text) == "conventional-changelog"

    def test_conventional_sections_without_bold_bullets(self):
        text = "### Features\n\n- handle empty input\n"
        assert detect_format(text) == "plain-markdown"

    def test_conventional_level_one_header(self):
        text = "# [2.0.0](https://github.com/o/r/compare/v1.0.0...v2.0.0) (2024-05-01)\n"
        assert detect_format(text) == "conventional-changelog"

    def test_conventional_header_with_date_only(self):
        assert detect_format("## [2.0.0] (2024-05-01)\n") == "conventional-changelog"

    def test_conventional_checked_before_keep_a_changelog(self, conventional_text):
        text = "All notable changes to this project.\n\n" + conventional_text
        assert detect_format(text) == "conventional-changelog"


class TestDetectSourceFormat:
    def test_json_object(self):
        assert detect_source_format('{"version": "1.0.0"}') == "json"

    def test_json_array(self):
        assert detect_source_format('  [{"version": "1.0.0"}]') == "json"

    def test_broken_json_falls_back_to_markdown(self):
        assert detect_source_format("{ not json") == "plain-markdown"

    def test_markdown(self, keep_a_changelog_text):
        assert detect_source_format(keep_a_changelog_text) == "keep-a-changelog"
