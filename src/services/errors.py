from __future__ import annotations


class QuoteBuilderError(Exception):
    """Base class for domain errors raised by the services layer."""


class InvalidInput(QuoteBuilderError, ValueError):
    """
    Bad numeric input or a malformed settings document.

    Surfaced to the caller as-is (HTTP 400), never retried.
    """


class ConfigurationMissing(QuoteBuilderError, LookupError):
    """
    The organization has no stored pricing settings.

    Callers fall back to DEFAULT_SETTINGS; this is never fatal.
    """


class InvalidTransition(QuoteBuilderError):
    """A quote status change that the lifecycle does not allow."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move quote from '{current}' to '{target}'")
        self.current = current
        self.target = target


class AIServiceUnavailable(QuoteBuilderError):
    """The language-model API is not configured or rejected our credentials."""


class QuoteLocked(QuoteBuilderError):
    """Items and header of a quote can only be edited while it is a draft."""

    def __init__(self, status: str) -> None:
        super().__init__(f"Quote is '{status}' and can no longer be edited")
        self.status = status
