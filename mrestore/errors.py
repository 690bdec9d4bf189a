"""Invoker-tier errors. Each kind carries the HTTP status a web caller should send."""


class AnalysisError(Exception):
    status_code = 500


class ConfigurationError(AnalysisError):
    """Credentials or endpoint settings are missing."""


class InferenceError(AnalysisError):
    """Transport or provider failure, including timeouts and malformed bodies."""


class RateLimitError(AnalysisError):
    """The provider throttled the call. Not retried here; retrying is up to the caller."""

    status_code = 429
