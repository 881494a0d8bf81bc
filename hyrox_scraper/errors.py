"""Exceptions raised by the scraper.

Bad *data* (unparseable times, unknown event labels, malformed records) never
raises: it degrades into missing values and quality-report entries. These
exceptions cover fetch failures and bad caller input.
"""


class ScraperError(Exception):
    """Base class for all scraper errors."""


class TransientFetchFailure(ScraperError):
    """A URL could not be fetched after every retry attempt."""

    def __init__(self, url: str, attempts: int, last_error: str | None = None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        msg = f"Failed to fetch {url} after {attempts} attempt(s)"
        if last_error:
            msg += f": {last_error}"
        super().__init__(msg)


class ValidationInputError(ScraperError):
    """Caller-supplied parameters failed type/range checks."""

    def __init__(self, details: list[str]):
        self.details = list(details)
        super().__init__("Validation failed: " + "; ".join(self.details))


class ConfigError(ScraperError):
    """Environment configuration is missing or malformed."""
