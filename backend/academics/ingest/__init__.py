"""Bulk ingestion of external tabular extracts into academic records."""
