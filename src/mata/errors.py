"""Exception hierarchy for the retrieval engine."""


class MataError(Exception):
    """Base class for all Mata errors."""


class ValidationError(MataError, ValueError):
    """Invalid input: wrong embedding dimensions, unknown chunk type, bad options."""


class EmbeddingError(MataError):
    """The embedding backend failed to produce a vector."""


class EmbeddingConnectionError(EmbeddingError, ConnectionError):
    """The embedding backend could not be reached."""


class MalformedResponseError(EmbeddingError):
    """The embedding backend answered without a well-formed numeric vector."""
