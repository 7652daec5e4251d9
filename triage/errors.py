"""Exceptions raised by the review queue engine and its collaborators."""


class TriageError(Exception):
    """Base class for review queue errors."""


class LedgerError(TriageError):
    """Decision ledger read/write failed. The caller may retry the operation."""


class EngineNotInitializedError(TriageError):
    """An engine operation was called before initialize()."""

    def __init__(self, operation: str):
        super().__init__(f"ReviewQueueEngine.{operation}() called before initialize()")
        self.operation = operation
