# Observability Package
from observability.report import ProbeReport
from observability.sink import ReportSink, ConsoleReportSink, JsonReportSink

__all__ = ["ProbeReport", "ReportSink", "ConsoleReportSink", "JsonReportSink"]
