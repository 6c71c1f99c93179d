"""Reporting module - aggregation, assembly, export rendering and delivery."""

from bizadmin.modules.reporting.assembler import ReportAssembler, ReportPayload, ReportSources
from bizadmin.modules.reporting.charts import ChartRegistry
from bizadmin.modules.reporting.export_renderer import ExportArtifact, ExportRenderer

__all__ = [
    "ChartRegistry",
    "ExportArtifact",
    "ExportRenderer",
    "ReportAssembler",
    "ReportPayload",
    "ReportSources",
]
