"""Error taxonomy for remote operations.

A nonzero exit code from the execution service is not an error: it is a
regular ``ExecutionResult`` whose ``succeeded`` flag is False.
"""


class CodepadError(Exception):
    """Base class for failures surfaced at an action boundary."""


class NetworkError(CodepadError):
    """Transport failure or malformed response from a remote service."""


class ServiceError(CodepadError):
    """Well-formed backend response reporting ``success: false``."""


class ValidationError(ServiceError):
    """Save rejected by the backend."""


class NotFoundError(ServiceError):
    """Project load rejected by the backend."""
