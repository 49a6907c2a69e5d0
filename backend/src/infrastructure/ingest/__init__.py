"""SMTP ingest: sessions, MIME body extraction and message assembly."""
