"""Exception hierarchy for the CICADA retrieval engine."""

from typing import Iterable, Optional, Tuple


class CicadaError(Exception):
    """Base error carrying a machine code, retry hint and a user-facing message."""

    def __init__(
        self,
        message: str,
        code: str,
        retryable: bool = False,
        user_message: str = "Something went wrong",
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable
        self.user_message = user_message


class InvalidSearchOptions(CicadaError):
    """Search options outside their documented ranges."""

    def __init__(self, message: str, user_message: str = "Invalid input provided"):
        super().__init__(message, "VALIDATION_ERROR", False, user_message)


class DimensionMismatch(CicadaError):
    """Query and candidate embeddings have different lengths."""

    def __init__(self, expected: int, actual: int, passage_id: Optional[str] = None):
        detail = f" (passage {passage_id})" if passage_id else ""
        super().__init__(
            f"Embedding dimension mismatch: expected {expected}, got {actual}{detail}",
            "DIMENSION_MISMATCH",
            False,
            "The script index is inconsistent",
        )
        self.expected = expected
        self.actual = actual
        self.passage_id = passage_id


class IncompleteCitation(CicadaError):
    """A citation field set is missing one or more required fields."""

    def __init__(self, missing_fields: Iterable[str]):
        self.missing_fields: Tuple[str, ...] = tuple(missing_fields)
        super().__init__(
            f"Citation is missing required field(s): {', '.join(self.missing_fields)}",
            "INCOMPLETE_CITATION",
            False,
            "A script passage could not be cited",
        )


class ProviderError(CicadaError):
    """The embedding provider failed to produce a vector."""

    def __init__(self, message: str, provider: str = "unknown"):
        super().__init__(
            message,
            "PROVIDER_ERROR",
            True,
            "Service temporarily unavailable",
        )
        self.provider = provider


class InvalidPassageRecord(CicadaError):
    """A stored passage record cannot be read as a Passage."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(
            message,
            "INVALID_PASSAGE",
            False,
            "The script index is inconsistent",
        )
        self.source = source
