"""Ingestion layer.

This package turns the raw document listing of a meet into typed entities
and, through :mod:`livemeet.ingestion.pipeline`, into a scored snapshot.
"""

__all__: list[str] = []
