"""Export modules."""

from car_lot.export.csv_exporter import EXPORT_COLUMNS, export_to_csv
from car_lot.export.json_exporter import export_to_json

__all__ = ["EXPORT_COLUMNS", "export_to_csv", "export_to_json"]
