"""Shared helpers: logging, HTTP, diagnostics and errors."""
