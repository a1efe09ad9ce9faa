"""cellvault — versioned cell store with atomic batches and optimistic locking."""

__version__ = "0.1.0"
