from .general import setup_logger
from .row_mapper import map_row, map_rows

__all__ = [
    "setup_logger",
    "map_row",
    "map_rows",
]
