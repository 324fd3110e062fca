"""Level-2 section upsert for Markdown pull request descriptions.

A description is read as an optional preamble followed by sections, each
introduced by a ``## Title`` line and running until the next such line or
the end of the text::

    Intro text.

    ## Summary

    What changed.

    ## Bundle impact

    | Status | File | Size | Difference (%) |

`merge_section` replaces the body of one titled section, or appends the
section when it is missing, and leaves every other byte alone. Lines inside
fenced code blocks never count as headings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from bundle_impact.config import SECTION_TITLE

HEADING_PREFIX = "## "

_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_NEWLINE_RE = re.compile(r"\r\n|\n")


@dataclass
class Section:
    """A heading line and the lines up to the next heading.

    ``title`` is None for the preamble before the first heading. Lines keep
    their line endings, so joining every section's lines gives back the
    original text.
    """

    title: str | None
    lines: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.lines)

    @property
    def body(self) -> str:
        if self.title is None:
            return self.text
        return "".join(self.lines[1:])


def _split_lines(text: str) -> list[str]:
    """Split on LF, keeping line endings (CR stays with its line)."""
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _content(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def _next_fence(fence: str | None, content: str) -> str | None:
    """Return the open fence marker after `content`, or None outside a fence."""
    match = _FENCE_RE.match(content)
    if not match:
        return fence
    marker = match.group(1)
    if fence is None:
        return marker
    # A closing fence uses the same character, is at least as long, and
    # carries no info string.
    if marker[0] == fence[0] and len(marker) >= len(fence) and not content[match.end():].strip():
        return None
    return fence


def _open_fence(contents: list[str]) -> str | None:
    fence = None
    for content in contents:
        fence = _next_fence(fence, content)
    return fence


def split_sections(text: str) -> list[Section]:
    """Split a description into its preamble and level-2 sections."""
    sections = [Section(title=None)]
    fence: str | None = None

    for line in _split_lines(text):
        content = _content(line)
        if fence is None and content.startswith(HEADING_PREFIX):
            sections.append(Section(title=content[len(HEADING_PREFIX):]))
        sections[-1].lines.append(line)
        fence = _next_fence(fence, content)

    if not sections[0].lines:
        sections.pop(0)
    return sections


def find_section(text: str, title: str = SECTION_TITLE) -> Section | None:
    """Return the first section with exactly this title, if any."""
    for section in split_sections(text):
        if section.title == title:
            return section
    return None


def _body_lines(body: str) -> list[str]:
    lines = _NEWLINE_RE.split(body)
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    # Bare headings in the report would end the section on the next run;
    # a backslash keeps them literal and renders the same text.
    fence = None
    for i, line in enumerate(lines):
        if fence is None and line.startswith(HEADING_PREFIX):
            lines[i] = "\\" + line
        fence = _next_fence(fence, line)
    if fence is not None:
        lines.append(fence)
    return lines


def render_section(title: str, body: str, newline: str = "\n") -> str:
    """Render ``## title``, a blank line, the body, and a trailing blank line."""
    heading = f"{HEADING_PREFIX}{title}{newline}"
    lines = _body_lines(body)
    if not lines:
        return heading + newline
    return heading + newline + newline.join(lines) + newline + newline


def _trim_trailing_blank_lines(text: str) -> str:
    lines = _split_lines(text)
    while lines and not _content(lines[-1]).strip():
        lines.pop()
    if not lines:
        return ""
    lines[-1] = _content(lines[-1])
    return "".join(lines)


def merge_section(description: str, report_body: str, title: str = SECTION_TITLE) -> str:
    """Insert or replace the `title` section of `description` with `report_body`.

    Missing section: appended after the existing text, separated by one blank
    line. Existing section: its body is swapped for `report_body`; the heading
    and all other sections stay exactly where they were. Any later sections
    with the same title are dropped so the result holds exactly one.

    The function is total and pure, and applying it twice with the same
    report gives the same text as applying it once.
    """
    newline = "\r\n" if "\r\n" in description else "\n"
    block = render_section(title, report_body, newline)
    sections = split_sections(description)

    target = next((s for s in sections if s.title == title), None)
    if target is None:
        head = _trim_trailing_blank_lines(description)
        if not head:
            return block
        fence = _open_fence([_content(line) for line in _split_lines(head)])
        if fence is not None:
            head += newline + fence
        return head + newline + newline + block

    parts: list[str] = []
    for section in sections:
        if section is target:
            parts.append(block)
        elif section.title != title:
            parts.append(section.text)
    return "".join(parts)


merge = merge_section
