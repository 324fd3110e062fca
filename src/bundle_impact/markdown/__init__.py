"""Markdown section handling for pull request descriptions."""

from bundle_impact.markdown.sections import (
    Section,
    find_section,
    merge,
    merge_section,
    render_section,
    split_sections,
)

__all__ = [
    "Section",
    "find_section",
    "merge",
    "merge_section",
    "render_section",
    "split_sections",
]
