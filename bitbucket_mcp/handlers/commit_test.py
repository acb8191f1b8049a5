"""Unit tests for commit and build status formatting."""

from .commit import format_build_status, format_commit_summary


def describe_format_commit_summary():
    def it_uses_short_hash_and_first_line():
        commit = {
            "hash": "0123456789abcdef",
            "message": "Fix parser\n\nDetails",
            "author": {"user": {"display_name": "Ann"}, "raw": "Ann <ann@example.com>"},
            "date": "2024-01-01",
        }

        assert format_commit_summary(commit) == (
            "- 01234567: Fix parser\n  Author: Ann\n  Date: 2024-01-01"
        )

    def it_falls_back_to_raw_author_and_placeholder_message():
        text = format_commit_summary({"hash": "abc", "author": {"raw": "bot"}})

        assert text.startswith("- abc: (no message)\n  Author: bot")


def describe_format_build_status():
    def it_includes_optional_fields_when_present():
        status = {
            "state": "FAILED",
            "name": "CI",
            "key": "ci",
            "description": "2 tests failed",
            "url": "https://ci.example.com/1",
            "created_on": "2024-01-01",
        }

        assert format_build_status(status) == (
            "[FAILED] CI\n"
            "  Key: ci\n"
            "  Description: 2 tests failed\n"
            "  URL: https://ci.example.com/1\n"
            "  Updated: 2024-01-01"
        )

    def it_omits_missing_fields():
        text = format_build_status({"state": "SUCCESSFUL", "name": "CI", "key": "ci", "updated_on": "t"})

        assert "Description" not in text
        assert "URL" not in text
