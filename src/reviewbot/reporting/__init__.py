"""Check run reporting for analysis results."""

from src.reviewbot.reporting.reporter import (
    MAX_ANNOTATIONS,
    ResultReporter,
    build_check_run_request,
    map_severity_to_level,
)

__all__ = [
    "MAX_ANNOTATIONS",
    "ResultReporter",
    "build_check_run_request",
    "map_severity_to_level",
]
