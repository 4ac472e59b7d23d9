"""Report Desk: submit, browse, close and comment on incident reports."""

__version__ = "1.0.0"
