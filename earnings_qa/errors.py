# =============================================================================
# Pipeline Errors
# =============================================================================
#
# One exception hierarchy for the whole query pipeline. Where each error is
# handled:
#
#   ClassificationError      — fatal; surfaces as a 500 from /api/query
#   UnsupportedCategoryError — fatal; raised before any fetcher runs
#   DataUnavailable          — recoverable; absorbed per fetch by
#                              aggregator.fallible()
#   SynthesisError           — fatal; surfaces as a 500 from /api/query
#
# A company name that fails to resolve is not an exception at all: the
# resolver returns None and the name is dropped.
# =============================================================================

from __future__ import annotations


class PipelineError(Exception):
    """Base class for errors raised by the query pipeline."""


class ClassificationError(PipelineError):
    """The classifier output was unusable (bad JSON, missing fields, unknown category)."""


class UnsupportedCategoryError(PipelineError):
    """No aggregation strategy exists for the requested category."""

    def __init__(self, category: object) -> None:
        self.category = category
        super().__init__(f"Unrecognized category: {category}")


class DataUnavailable(PipelineError):
    """A single FMP fetch failed or came back empty."""

    def __init__(self, source: str, symbol: str, reason: str | None = None) -> None:
        self.source = source
        self.symbol = symbol
        self.reason = reason
        message = f"{source} unavailable for {symbol}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class SynthesisError(PipelineError):
    """The final language-model call failed."""
