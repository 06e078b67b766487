"""Action inputs read from the environment, the way the Actions runner passes them."""

import logging
import math
import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from repo_archiver.domain.errors import InactiveDaysError, MissingInputError

logger = logging.getLogger(__name__)


def get_input(name: str, required: bool = False) -> str:
    """
    Read an action input.

    The runner exposes `with:` inputs as INPUT_<NAME> environment variables,
    upper-cased with spaces turned into underscores.

    Raises:
        MissingInputError: If a required input is empty or absent
    """
    value = os.getenv(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()
    if required and not value:
        raise MissingInputError(name)
    return value


def parse_inactive_days(value: str) -> float:
    """
    Parse the inactivity threshold.

    Raises:
        InactiveDaysError: If the value is not a finite number of days
            that fits in a timedelta
    """
    # float() would take digit separators such as 1_000
    if "_" in value:
        raise InactiveDaysError("github_repo_max_inactive_days not a number")
    try:
        days = float(value)
    except ValueError:
        raise InactiveDaysError("github_repo_max_inactive_days not a number")
    if not math.isfinite(days) or abs(days) > timedelta.max.days:
        raise InactiveDaysError("github_repo_max_inactive_days not a number")
    return days


def parse_list(value: str) -> List[str]:
    """Split a comma or newline separated input, dropping blanks."""
    items = value.replace("\n", ",").split(",")
    return [item.strip() for item in items if item.strip()]


@dataclass
class ActionInputs:
    """Parsed and validated inputs of one archiving run."""

    token: str
    org: str
    repo: str
    max_inactive_days: float
    ignore: List[str] = field(default_factory=list)
    readme_message: Optional[str] = None
    api_url: Optional[str] = None


def debug_enabled() -> bool:
    """True when the workflow was re-run with debug logging."""
    return os.getenv("RUNNER_DEBUG") == "1" or os.getenv("ACTIONS_STEP_DEBUG", "").lower() == "true"
