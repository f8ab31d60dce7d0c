"""
Exceptions raised by the external service clients (LLM, web search).
"""


class ClientError(Exception):
    """Base exception for external client errors."""
    pass


class ConfigurationError(ClientError):
    """Raised when a client credential or provider setting is missing or invalid."""
    pass


class ProviderError(ClientError):
    """Raised when an external provider call fails."""
    pass


class LLMTimeoutError(ProviderError):
    """Raised when LLM call exceeds timeout."""
    pass
