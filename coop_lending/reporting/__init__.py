"""Dashboard aggregation and spreadsheet reports."""

from coop_lending.reporting.aggregation import (
    DEFAULT_INSTITUTION_RULES,
    DashboardTotals,
    InstitutionBucket,
    InstitutionClassifier,
    InstitutionRule,
    MarketingSummary,
    Window,
    count_by_institution,
    disbursement_totals,
    resolved_customers,
    search_customers,
    start_of_month,
    start_of_week,
    start_of_year,
    status_counts,
    totals_by_marketing,
)
from coop_lending.reporting.export import (
    REPORTS,
    archive_rows,
    export_filename,
    marketing_rows,
    master_rows,
    nominative_rows,
    report_rows,
    settled_rows,
    write_workbook,
)

__all__ = [
    "DEFAULT_INSTITUTION_RULES",
    "REPORTS",
    "DashboardTotals",
    "InstitutionBucket",
    "InstitutionClassifier",
    "InstitutionRule",
    "MarketingSummary",
    "Window",
    "archive_rows",
    "count_by_institution",
    "disbursement_totals",
    "export_filename",
    "marketing_rows",
    "master_rows",
    "nominative_rows",
    "report_rows",
    "resolved_customers",
    "search_customers",
    "settled_rows",
    "start_of_month",
    "start_of_week",
    "start_of_year",
    "status_counts",
    "totals_by_marketing",
    "write_workbook",
]
