"""State layer.

This package holds everything the service retains in memory: the per-device
registry and the retention store.  Only the ingestion pipeline mutates it;
the query interface reads snapshots.
"""

from pyhealthmon.state.registry import DeviceRegistry
from pyhealthmon.state.store import RetentionStore

__all__ = ["DeviceRegistry", "RetentionStore"]
