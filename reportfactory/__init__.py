"""Compile directories of literate reports into timestamped output folders."""

from .deps import list_deps
from .errors import (
    ConfigError,
    EmptyReportSet,
    FactoryNotFound,
    PreconditionError,
    RenderError,
    ReportFactoryError,
    SelectionError,
)
from .factory import list_outputs, list_reports, locate_factory, new_factory, validate_factory
from .pipeline import compile_reports

__all__ = [
    "ConfigError",
    "EmptyReportSet",
    "FactoryNotFound",
    "PreconditionError",
    "RenderError",
    "ReportFactoryError",
    "SelectionError",
    "compile_reports",
    "list_deps",
    "list_outputs",
    "list_reports",
    "locate_factory",
    "new_factory",
    "validate_factory",
]
