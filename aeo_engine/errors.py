"""
Error Taxonomy

Fatal errors propagate to the caller; scoped fetch and enrichment errors are
caught by the component that owns the scope and degraded to empty results.
"""


class AEOEngineError(Exception):
    """Base class for all engine errors."""


class BrandNotFoundError(AEOEngineError):
    """The brand (or tenant scope) does not exist. Fatal for the run."""

    def __init__(self, brand_id: str, detail: str = ""):
        self.brand_id = brand_id
        message = f"Brand not found: {brand_id}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DataFetchError(AEOEngineError):
    """A scoped read from the metrics or citation store failed."""


class GenerativeTextError(AEOEngineError):
    """The generative-text service failed, timed out, or was not configured."""


class PersistenceError(AEOEngineError):
    """A write to the recommendation store failed and was rolled back."""
