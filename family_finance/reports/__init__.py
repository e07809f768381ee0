"""Report window resolution and bucket labels."""

from family_finance.reports.range import DataBounds, period_labels, resolve_report_range

__all__ = ["DataBounds", "period_labels", "resolve_report_range"]
