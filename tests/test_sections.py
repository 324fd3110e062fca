"""Tests for the Markdown section merger."""

from __future__ import annotations

import pytest

from bundle_impact.markdown.sections import (
    find_section,
    merge,
    merge_section,
    render_section,
    split_sections,
)
from conftest import REPORT_A, REPORT_B, SUMMARY

EXPECTED_A = SUMMARY + "\n\n## Bundle impact\n\n" + REPORT_A + "\n\n"
EXPECTED_B = SUMMARY + "\n\n## Bundle impact\n\n" + REPORT_B + "\n\n"

DESCRIPTIONS = [
    "",
    "Just some text",
    SUMMARY,
    SUMMARY + "\n\n\n",
    EXPECTED_A,
    "Intro\n\n## Bundle impact\n\nold\n\n## Notes\n\nkeep me\n",
    "## Summary\r\n\r\nWindows text\r\n",
    "## Summary\n\n```md\n## Bundle impact\n```\n",
    "Intro\n```\nnever closed",
]


def _heading_count(text: str, title: str = "Bundle impact") -> int:
    return sum(1 for s in split_sections(text) if s.title == title)


class TestScenarios:
    def test_first_run_appends_section(self):
        assert merge_section(SUMMARY, REPORT_A) == EXPECTED_A

    def test_first_run_ignores_trailing_newlines(self):
        assert merge_section(SUMMARY + "\n", REPORT_A) == EXPECTED_A
        assert merge_section(SUMMARY + "\n\n  \n", REPORT_A) == EXPECTED_A

    def test_second_run_replaces_section(self):
        assert merge_section(EXPECTED_A, REPORT_B) == EXPECTED_B

    def test_merge_alias(self):
        assert merge is merge_section


class TestProperties:
    @pytest.mark.parametrize("description", DESCRIPTIONS)
    @pytest.mark.parametrize(
        "report", ["", REPORT_A, "a\r\nb", "```\n## fenced\n```", "| a |\n## Details\nmore"],
    )
    def test_idempotent(self, description: str, report: str):
        once = merge_section(description, report)
        assert merge_section(once, report) == once

    @pytest.mark.parametrize("description", DESCRIPTIONS)
    def test_single_section(self, description: str):
        text = description
        for report in (REPORT_A, REPORT_B, "", REPORT_A):
            text = merge_section(text, report)
            assert _heading_count(text) == 1

    def test_preserves_other_sections(self):
        description = "Intro\n\n## One\n\nfirst\n\n## Two\n\nsecond"
        result = merge_section(description, REPORT_A)
        assert result.startswith(description)
        assert [s.title for s in split_sections(result)] == [None, "One", "Two", "Bundle impact"]

    def test_replacement_only_touches_body(self):
        description = (
            "## Summary\n\nS\n\n"
            "## Bundle impact\n\nold body\nmore old\n\n"
            "## Notes\n\nN\n"
        )
        assert merge_section(description, "new body") == (
            "## Summary\n\nS\n\n"
            "## Bundle impact\n\nnew body\n\n"
            "## Notes\n\nN\n"
        )

    def test_replacement_normalizes_separators(self):
        description = "## Bundle impact\nold\n## Notes\nN"
        assert merge_section(description, "new") == "## Bundle impact\n\nnew\n\n## Notes\nN"

    def test_preamble_kept_when_replacing(self):
        description = "Intro line\n\n## Bundle impact\n\nold\n"
        assert merge_section(description, "new") == "Intro line\n\n## Bundle impact\n\nnew\n\n"


class TestEdgeCases:
    def test_empty_description(self):
        assert merge_section("", "r") == "## Bundle impact\n\nr\n\n"

    def test_empty_report(self):
        result = merge_section(SUMMARY, "")
        assert result == SUMMARY + "\n\n## Bundle impact\n\n"
        assert merge_section(result, REPORT_A) == EXPECTED_A

    def test_report_blank_lines_trimmed(self):
        assert merge_section(SUMMARY, "\n\n" + REPORT_A + "\n\n\n") == EXPECTED_A

    def test_heading_match_is_exact(self):
        for other in ("## Bundle Impact", "### Bundle impact", "## Bundle impact!"):
            description = f"{other}\n\nbody\n"
            result = merge_section(description, "r")
            assert result.startswith(description.rstrip("\n"))
            assert result.endswith("\n\n## Bundle impact\n\nr\n\n")

    def test_heading_inside_fence_is_not_a_section(self):
        description = "## Summary\n\n```md\n## Bundle impact\n```\n"
        result = merge_section(description, "r")
        assert result == description + "\n## Bundle impact\n\nr\n\n"
        assert _heading_count(result) == 1

    def test_fenced_heading_in_report_stays_in_section(self):
        report = "```\n## Not a heading\n```"
        result = merge_section(merge_section(SUMMARY, report), "new")
        assert result == SUMMARY + "\n\n## Bundle impact\n\nnew\n\n"

    def test_bare_heading_in_report_is_escaped(self):
        report = "| a |\n## Details\nmore"
        once = merge_section("", report)
        assert once == "## Bundle impact\n\n| a |\n\\## Details\nmore\n\n"
        assert [s.title for s in split_sections(once)] == ["Bundle impact"]
        assert merge_section(merge_section(once, report), report) == once

    def test_escaped_report_replaced_cleanly(self):
        once = merge_section(SUMMARY, "## Details\nmore")
        assert merge_section(once, "new") == SUMMARY + "\n\n## Bundle impact\n\nnew\n\n"

    def test_unterminated_fence_in_report_is_closed(self):
        assert merge_section("", "```\ncode") == "## Bundle impact\n\n```\ncode\n```\n\n"

    def test_unterminated_fence_in_description_is_closed_before_section(self):
        result = merge_section("Intro\n```\ncode", "r")
        assert result == "Intro\n```\ncode\n```\n\n## Bundle impact\n\nr\n\n"

    def test_duplicate_sections_collapse(self):
        description = (
            "## Bundle impact\n\na\n\n"
            "## Notes\n\nn\n\n"
            "## Bundle impact\n\nb\n"
        )
        assert merge_section(description, "new") == (
            "## Bundle impact\n\nnew\n\n## Notes\n\nn\n\n"
        )

    def test_crlf_description(self):
        description = "## Summary\r\n\r\nText\r\n"
        assert merge_section(description, "a\nb") == (
            "## Summary\r\n\r\nText\r\n\r\n## Bundle impact\r\n\r\na\r\nb\r\n\r\n"
        )

    def test_crlf_heading_is_found(self):
        description = "## Bundle impact\r\n\r\nold\r\n"
        assert merge_section(description, "new") == "## Bundle impact\r\n\r\nnew\r\n\r\n"

    def test_custom_title(self):
        result = merge_section(SUMMARY, "r", title="Coverage")
        assert result == SUMMARY + "\n\n## Coverage\n\nr\n\n"


class TestSplitSections:
    @pytest.mark.parametrize("text", DESCRIPTIONS)
    def test_round_trip(self, text: str):
        assert "".join(s.text for s in split_sections(text)) == text

    def test_preamble_and_titles(self):
        sections = split_sections("Intro\n## A\na\n## B\n")
        assert [s.title for s in sections] == [None, "A", "B"]
        assert sections[1].body == "a\n"

    def test_no_preamble(self):
        assert split_sections("## A\n")[0].title == "A"

    def test_empty(self):
        assert split_sections("") == []

    def test_find_section(self):
        section = find_section(EXPECTED_A)
        assert section is not None
        assert section.body == "\n" + REPORT_A + "\n\n"
        assert find_section(SUMMARY) is None

    def test_render_section(self):
        assert render_section("T", "x") == "## T\n\nx\n\n"
        assert render_section("T", "") == "## T\n\n"
        assert render_section("T", "x\ny", newline="\r\n") == "## T\r\n\r\nx\r\ny\r\n\r\n"
