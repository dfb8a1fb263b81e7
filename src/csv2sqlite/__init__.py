"""csv2sqlite: convert a delimited text file into a typed SQLite table."""

from csv2sqlite.database import create_service
from csv2sqlite.ingestion import ConversionError, ConversionResult, convert

__version__ = "0.1.0"

__all__ = ["__version__", "convert", "ConversionError", "ConversionResult", "create_service"]
