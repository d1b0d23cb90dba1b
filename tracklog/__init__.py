"""tracklog: a minimal content-addressed version control system.

Tracks named files, deduplicates their content in a SHA-256 keyed object
store, records commits in an append-only, hash-chained log and restores
any committed file state on demand.
"""

__version__ = "0.1.0"
__description__ = "Minimal content-addressed version control with an append-only commit log"

from tracklog.core.repository import Repository

__all__ = ["Repository", "__version__"]
