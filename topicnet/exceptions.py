"""
exceptions.py

Error types raised by the topicnet pipeline.

Fit failures are collected per topic count and reported next to the successful fits, selection and
extraction errors are raised to the caller, and EmptyResult marks a time window that legitimately
produced no associations or no graph.
"""


class TopicNetError(Exception):
    """Base class for all topicnet errors."""


class FitFailure(TopicNetError):
    """A single topic model fit failed (invalid K for the corpus, non-finite output, library error)."""

    def __init__(self, k, reason):
        self.k = k
        self.reason = str(reason)
        super().__init__(f"Fit failed for K={k}: {self.reason}")


class NotFoundError(TopicNetError, LookupError):
    """Requested topic count is not part of the candidate set."""


class InvalidArgument(TopicNetError, ValueError):
    """Argument outside its legal domain (distribution kind, topic count, threshold)."""


class EmptyResult(TopicNetError):
    """A time window yields no edges or no graph. This is a valid outcome, not a computation failure."""

    def __init__(self, time_window, reason="no retained associations"):
        self.time_window = time_window
        self.reason = reason
        super().__init__(f"Time window {time_window!r}: {reason}")
