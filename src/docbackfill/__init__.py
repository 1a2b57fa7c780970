"""Migrate legacy S3 seller document keys into the document registry."""

__version__ = "0.1.0"
