"""Ingestion layer.

This package turns raw datagrams into typed packets and routes them to the
device registry, the retention store and the daily log.
"""

__all__: list[str] = []
