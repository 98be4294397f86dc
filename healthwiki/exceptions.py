"""Exceptions raised by the upstream clients and the configuration layer."""


class UpstreamError(Exception):
    """An upstream API call failed or returned an unusable payload."""


class SearchFailed(UpstreamError):
    """The Wikipedia search request failed."""


class ExtractFetchFailed(UpstreamError):
    """The Wikipedia extract request failed."""


class CompletionFailed(UpstreamError):
    """The chat-completion request failed."""


class ConfigurationError(ValueError):
    """Settings are missing or invalid at startup."""
