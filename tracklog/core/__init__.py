"""Core engine: hashing, object store, staging index, commit log, history,
diff and checkout, coordinated by ``Repository``."""
