"""Exceptions raised by the Hevy CLI."""


class HevyCLIError(Exception):
    """Base exception for Hevy CLI errors."""


class MissingAPIKeyError(HevyCLIError):
    """Raised when no API key is available from the environment or config file."""


class HevyAPIError(HevyCLIError):
    """Raised when the Hevy API answers with a non-success status."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Hevy API error {status_code}: {detail}")
