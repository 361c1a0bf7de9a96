"""Generic elements and app-level views."""
