"""
Cat Weight Ledger - Spreadsheet-backed weight tracking for a fixed set of cats.

Records weight measurements into a one-row-per-date ledger and reconstructs
clean per-cat time series with trend statistics from the ledger export.
"""

__version__ = "0.1.0"
