import builtins


class AAError(Exception):
    """Base class for errors raised by aa_api itself."""


class ConfigurationError(AAError):
    """A required option was not found in direct configuration, the environment or `.env`."""

    def __init__(self, field: str, variable: str):
        self.field = field
        self.variable = variable
        super().__init__(
            f'Missing "{field}" in client configuration. Pass configuration or add '
            f'"{variable}" to an ".env" file in the current directory.'
        )


class ApiError(AAError):
    """The API answered with an `error` field, whatever the HTTP status was."""

    def __init__(self, message, status_code: int):
        self.message = message
        self.status_code = status_code
        super().__init__(f"{status_code}: {message}")


class TimeoutError(AAError, builtins.TimeoutError):  # noqa: A001
    """A request did not complete before its deadline."""

    def __init__(self, url: str, timeout: float):
        self.url = url
        # milliseconds
        self.timeout = timeout
        super().__init__(f'Request to "{url}" timed out after {timeout / 1e3:g} seconds.')
