"""
Registry and collaborator wiring around the pair engine
"""

from .custody import LedgerCustody
from .registry import PoolRegistry
from .snapshot import RegistrySnapshot, registry_from_snapshot, snapshot_from_registry

__all__ = [
    "LedgerCustody",
    "PoolRegistry",
    "RegistrySnapshot",
    "registry_from_snapshot",
    "snapshot_from_registry",
]
