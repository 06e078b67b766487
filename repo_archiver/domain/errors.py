"""Error taxonomy shared by the GitHub client, the archiver and the entry point."""

from enum import Enum


class ErrorKind(Enum):
    """Classification of a failed GitHub API call."""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    FORBIDDEN = "forbidden"
    UNKNOWN = "unknown"


class GitHubAPIError(Exception):
    """Raised by the GitHub client once a failure has been classified."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"GitHubAPIError({self.kind.name}, {self.message!r})"


class ConfigurationError(ValueError):
    """Raised when action inputs are missing or malformed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingInputError(ConfigurationError):
    """A required input was not supplied."""

    def __init__(self, name: str):
        super().__init__(f"Input required and not supplied: {name}")
        self.name = name


class TokenValidationError(ConfigurationError):
    """The personal access token does not have the expected shape."""
    pass


class InactiveDaysError(ConfigurationError):
    """The inactivity threshold is not a number."""
    pass
