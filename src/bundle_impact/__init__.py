"""bundle-impact: keep a "Bundle impact" section up to date in PR descriptions."""

__version__ = "0.1.0"
