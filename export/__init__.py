"""Export-Modul: Excel (openpyxl) und Klassenbrett (Rich) für die Klassenzuteilung."""

from export.excel_export import ResultExporter
from export.board_renderer import board_columns, print_board

__all__ = ["ResultExporter", "board_columns", "print_board"]
