"""Console task list mirrored from a spreadsheet-style record service (Airtable)."""

__version__ = "0.1.0"
