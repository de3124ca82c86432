"""Crawl Google Drive folder trees into flat, path-annotated Google Docs records."""

__version__ = "0.1.0"
