"""Entry point of the archiving action: read inputs, validate, run, report."""

import json
import logging
import os
from datetime import datetime
from typing import Callable, Optional

from repo_archiver.application.archiver_service import ArchiverService
from repo_archiver.domain.errors import ConfigurationError, GitHubAPIError
from repo_archiver.domain.token import redact_token, validate_token
from repo_archiver.infrastructure.config import (
    ActionInputs,
    debug_enabled,
    get_input,
    parse_inactive_days,
    parse_list,
)
from repo_archiver.infrastructure.github_client import GitHubRestClient
from repo_archiver.infrastructure.reporting import ActionReporter

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def read_inputs(input_source: Callable[..., str] = get_input) -> ActionInputs:
    """
    Read and validate the action inputs.

    The token is validated before the inactivity threshold, and both before
    anything touches the network.

    Raises:
        ConfigurationError: On a missing or malformed input
    """
    token = input_source("github_org_pat_token", required=True)
    org = input_source("github_org", required=True)
    repo = input_source("github_repo", required=True)
    inactive_days = input_source("github_repo_max_inactive_days", required=True)
    ignore_files = input_source("ignore_files", required=False)
    readme_message = input_source("readme_message", required=False)

    try:
        validate_token(token)
    except ConfigurationError as e:
        logger.error(f"Error validating PAT token: {e}")
        raise
    max_inactive_days = parse_inactive_days(inactive_days)

    logger.debug(f"github_pat_token: {redact_token(token)}")
    logger.debug(f"github_org: {org}")
    logger.debug(f"github_repo: {repo}")
    logger.debug(f"inactive_days: {inactive_days}")
    logger.debug(f"ignore_files: {ignore_files}")
    logger.debug(f"readme_message: {readme_message}")

    return ActionInputs(
        token=token,
        org=org,
        repo=repo,
        max_inactive_days=max_inactive_days,
        ignore=parse_list(ignore_files),
        readme_message=readme_message or None,
        api_url=os.getenv("GITHUB_API_URL")
    )


def run(
    input_source: Callable[..., str] = get_input,
    client_factory: Callable[..., GitHubRestClient] = GitHubRestClient,
    reporter: Optional[ActionReporter] = None
) -> int:
    """
    Run the archiving action once.

    Failures are reported with their original message and turned into a
    non-zero return value; nothing is raised.

    Returns:
        0 on success, 1 on failure
    """
    if reporter is None:
        reporter = ActionReporter()

    try:
        inputs = read_inputs(input_source)
    except ConfigurationError as e:
        reporter.set_failed(e.message)
        return 1

    client = client_factory(inputs.token, api_url=inputs.api_url)
    try:
        service = ArchiverService(client, notice=inputs.readme_message)
        results = service.archive_inactive(
            inputs.org,
            inputs.max_inactive_days,
            repo_filter=inputs.repo,
            ignore=inputs.ignore
        )
    except GitHubAPIError as e:
        reporter.set_failed(e.message)
        return 1
    finally:
        client.close()

    archived = [name for name, flag in results.items() if flag]
    reporter.set_output("archived_repositories", json.dumps(archived))
    reporter.set_output("time", datetime.now().strftime("%H:%M:%S"))
    return 0


def main() -> int:
    """Console entry point."""
    logging.basicConfig(
        level=logging.DEBUG if debug_enabled() else logging.INFO,
        format=LOG_FORMAT
    )
    try:
        return run()
    except Exception as e:
        logger.error(f"Archiving failed: {e}", exc_info=True)
        ActionReporter().set_failed(str(e))
        return 1
