"""Output sinks for dashboard reports."""

from crm_insights.sinks.console import ConsoleSink
from crm_insights.sinks.csv_export import clients_csv, reactivation_csv, write_csv
from crm_insights.sinks.json_file import JsonFileSink

__all__ = ["ConsoleSink", "JsonFileSink", "clients_csv", "reactivation_csv", "write_csv"]
