"""logfocus - regex filters, highlights and focus views for log files."""

__version__ = "0.3.0"
