"""Command line interface for render-redact."""
