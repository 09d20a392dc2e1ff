"""Coordinator error taxonomy."""


class CoordinatorError(Exception):
    """Base exception for rejected batch/machine operations."""
    pass


class BatchNotFoundError(CoordinatorError):
    """Batch not found."""
    pass


class AlreadyActiveError(CoordinatorError):
    """A batch is already in progress."""
    pass


class SuppliesLowError(CoordinatorError):
    """Soil or cup supply is low."""
    pass


class AlreadyTerminalError(CoordinatorError):
    """Batch is Finished or Cancelled and can no longer change."""
    pass


class ActiveBatchDeletionError(CoordinatorError):
    """Attempt to delete the batch the machine is running."""
    pass


class InvalidInputError(CoordinatorError):
    """Missing or malformed operation input."""
    pass


class StorageFailureError(CoordinatorError):
    """Reading or persisting a record failed."""
    pass


class HardwareUnreachableError(Exception):
    """The machine controller did not accept a command.

    Never propagates out of the notifier.
    """
    pass
