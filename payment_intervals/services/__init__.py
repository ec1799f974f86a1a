from .aggregator import group_by_payment, select_first, select_pair
from .csv_exporter import export_results, render_csv, write_export
from .interval_calculator import compute_intervals
from .pipeline import analyze_source, analyze_text, load_successful_ids, recompute, refilter
from .record_parser import extract_status, normalize_event_body, parse_records
from .result_filter import apply_filters, available_dates

__all__ = [
    "analyze_source",
    "analyze_text",
    "apply_filters",
    "available_dates",
    "compute_intervals",
    "export_results",
    "extract_status",
    "group_by_payment",
    "load_successful_ids",
    "normalize_event_body",
    "parse_records",
    "recompute",
    "refilter",
    "render_csv",
    "select_first",
    "select_pair",
    "write_export",
]
