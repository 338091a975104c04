"""Command-line interface for githistory."""
