"""Exceptions raised by the embedding estimators."""


class EmbeddingError(Exception):
    """Base class for tsembed errors."""


class InvalidInputError(EmbeddingError, ValueError):
    """Raised when inputs cannot be used as given (mismatched lengths, series too short, ...)."""


class InsufficientNeighborsError(EmbeddingError, RuntimeError):
    """
    Raised when a neighbour search cannot return enough valid neighbours.

    Usually the Theiler window or the requested neighbour count is too
    large for the number of available points.
    """

    def __init__(self, message: str, index: int = None, required: int = None, available: int = None):
        self.index = index
        self.required = required
        self.available = available
        super().__init__(message)
