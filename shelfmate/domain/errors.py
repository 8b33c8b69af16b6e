"""Domain exceptions raised along the recommendation pipeline."""


class ShelfmateError(Exception):
    """Base class for all recommendation pipeline failures."""


class CatalogUnavailable(ShelfmateError):
    """The catalog store could not be read. Absorbed by the sampler."""


class InvocationError(ShelfmateError):
    """
    The model backend call failed.

    ``transient`` marks failures worth one more attempt (throttling, 5xx,
    timeouts, dropped connections). Auth failures and malformed response
    envelopes are not transient.
    """

    def __init__(self, message: str, *, transient: bool = False) -> None:
        super().__init__(message)
        self.transient = transient


class ParseError(ShelfmateError):
    """No usable recommendation list could be recovered from model text."""

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text
