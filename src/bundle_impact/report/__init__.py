"""Bundle impact report: weigh changed files and render the table."""

from bundle_impact.report.renderer import render_report, summarize
from bundle_impact.report.weigh import FileWeight, ReportProducer, weigh_changed_files

__all__ = [
    "FileWeight",
    "ReportProducer",
    "render_report",
    "summarize",
    "weigh_changed_files",
]
