"""Domeal: shared receipt ingestion and item splitting for groups."""
