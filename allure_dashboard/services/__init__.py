"""Services package"""
from .base_service import BaseService
from .result_reader import ResultReader, RunResults, filter_results
from .summarizer import summarize_records
from .catalog import RunCatalog
from .comparison import compare_cached, compare_reports, percent_change
from .archive_builder import ArchiveBuilder

__all__ = [
    "BaseService",
    "ResultReader",
    "RunResults",
    "filter_results",
    "summarize_records",
    "RunCatalog",
    "compare_cached",
    "compare_reports",
    "percent_change",
    "ArchiveBuilder"
]
