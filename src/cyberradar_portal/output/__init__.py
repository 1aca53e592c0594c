from cyberradar_portal.output.base import AlertExporter
from cyberradar_portal.output.console import ConsoleAlertExporter
from cyberradar_portal.output.csv_export import CsvAlertExporter
from cyberradar_portal.output.jsonl import JsonlAlertExporter

__all__ = ["AlertExporter", "ConsoleAlertExporter", "CsvAlertExporter", "JsonlAlertExporter"]
