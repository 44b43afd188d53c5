"""Packaged JSON schemas for certctl artifacts."""
