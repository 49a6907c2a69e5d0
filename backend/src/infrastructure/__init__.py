"""Infrastructure adapters (SMTP ingest, publishers)."""
