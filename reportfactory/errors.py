"""Error taxonomy for report compilation."""

from __future__ import annotations


class ReportFactoryError(RuntimeError):
    """Base class for failures raised by reportfactory operations."""


class ConfigError(ReportFactoryError):
    """Raised when factory_config.yml cannot be parsed."""


class PreconditionError(ReportFactoryError):
    """Raised when the rendering toolchain is not available."""


class FactoryNotFound(ReportFactoryError):
    """Raised when no valid factory layout can be found from a path."""


class EmptyReportSet(ReportFactoryError):
    """Raised when the report sources tree holds no reports."""


class SelectionError(ReportFactoryError):
    """Raised when a report selector does not resolve to any report."""


class RenderError(ReportFactoryError):
    """Raised when the rendering engine fails for one or more reports."""

    def __init__(self, message: str, reports: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.reports = reports


__all__ = [
    "ConfigError",
    "EmptyReportSet",
    "FactoryNotFound",
    "PreconditionError",
    "RenderError",
    "ReportFactoryError",
    "SelectionError",
]
