"""Shape checks for GitHub classic personal access tokens."""

import re

from repo_archiver.domain.errors import TokenValidationError

PAT_PREFIX = "ghp_"
PAT_LENGTH = 40
# ghp_ followed by alphanumerics only, 40 characters in total
PAT_PATTERN = re.compile(r"^ghp_[a-zA-Z0-9]{36}$")


def validate_token(token: str) -> None:
    """
    Validate the format of a GitHub personal access token.
    
    Rules are checked in order and the first violation wins, so callers can
    report exactly which one failed. No network access happens here.
    
    Raises:
        TokenValidationError: If the token is malformed
    """
    if len(token) != PAT_LENGTH:
        raise TokenValidationError(f"github_pat_token not {PAT_LENGTH} characters long")
    if not token.startswith(PAT_PREFIX):
        raise TokenValidationError(f"github_pat_token does not start with {PAT_PREFIX}")
    if not PAT_PATTERN.match(token):
        raise TokenValidationError("github_pat_token contains special characters")


def redact_token(token: str) -> str:
    """Mask everything after the prefix so tokens never reach the logs."""
    if token.startswith(PAT_PREFIX):
        return PAT_PREFIX + "*" * (len(token) - len(PAT_PREFIX))
    return "*" * len(token)
