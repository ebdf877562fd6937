"""Errors raised by embedding providers."""


class EmbeddingError(RuntimeError):
    """The embedding service returned an unusable response."""

    def __init__(self, message: str, retriable: bool = False):
        super().__init__(message)
        self.retriable = retriable
