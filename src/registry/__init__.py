"""Artifact registry clients."""
