"""Custom exceptions for the draftdesk pipeline."""


class DraftDeskError(Exception):
    """Base exception for draftdesk errors."""

    pass


class ProviderError(DraftDeskError):
    """Raised when a single search provider attempt is unusable."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ProviderBlockedError(ProviderError):
    """Raised when a provider response looks like a block or rate-limit page."""

    pass


class StageInputError(DraftDeskError, ValueError):
    """Raised when a pipeline stage receives input it cannot work with."""

    pass
