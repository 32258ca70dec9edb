"""Bulk seed import: source resolution and the importer."""
