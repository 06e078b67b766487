"""Unit tests for the action's entry point."""
import io
import json
import logging
import re
from unittest.mock import MagicMock, patch

import pytest

from repo_archiver.application import action_runner
from repo_archiver.domain.errors import ErrorKind, GitHubAPIError, MissingInputError
from repo_archiver.infrastructure.github_client import GitHubRestClient
from repo_archiver.infrastructure.reporting import ActionReporter

TIME_REGEX = re.compile(r"^\d{2}:\d{2}:\d{2}$")


def make_inputs(token, **overrides):
    values = {
        "github_org_pat_token": token,
        "github_org": "robertcrockett",
        "github_repo": "archive_test",
        "github_repo_max_inactive_days": "365",
    }
    values.update(overrides)

    def input_source(name, required=False):
        value = values.get(name, "")
        if isinstance(value, Exception):
            raise value
        if required and not value:
            raise MissingInputError(name)
        return value

    return input_source


@pytest.fixture
def output_file(tmp_path):
    return tmp_path / "github_output"


@pytest.fixture
def reporter(output_file):
    return ActionReporter(output_file=str(output_file), stream=io.StringIO())


@pytest.fixture
def github_client():
    client = MagicMock(spec=GitHubRestClient)
    client.list_repositories.return_value = []
    return client


@pytest.fixture
def client_factory(github_client):
    return MagicMock(return_value=github_client)


def read_outputs(path):
    lines = path.read_text(encoding="utf-8").splitlines()
    return dict(line.split("=", 1) for line in lines)


def test_sets_the_action_outputs(valid_token, reporter, client_factory, github_client, output_file, clean_env):
    code = action_runner.run(make_inputs(valid_token), client_factory, reporter)

    assert code == 0
    assert reporter.failed is False
    client_factory.assert_called_once_with(valid_token, api_url=None)
    github_client.list_repositories.assert_called_once_with("robertcrockett")
    github_client.close.assert_called_once()
    outputs = read_outputs(output_file)
    assert json.loads(outputs["archived_repositories"]) == []
    assert TIME_REGEX.match(outputs["time"])


def test_debug_records_redact_the_token(valid_token, reporter, client_factory, caplog, clean_env):
    with caplog.at_level(logging.DEBUG, logger="repo_archiver"):
        action_runner.run(make_inputs(valid_token), client_factory, reporter)

    messages = [record.getMessage() for record in caplog.records]
    assert "github_pat_token: ghp_" + "*" * 36 in messages
    assert "github_org: robertcrockett" in messages
    assert "github_repo: archive_test" in messages
    assert "inactive_days: 365" in messages
    assert not any(valid_token in message for message in messages)


@pytest.mark.parametrize("name", [
    "github_org_pat_token",
    "github_org",
    "github_repo",
    "github_repo_max_inactive_days",
])
def test_fails_if_required_input_is_missing(valid_token, reporter, client_factory, name):
    inputs = make_inputs(valid_token, **{name: ""})

    assert action_runner.run(inputs, client_factory, reporter) == 1

    assert reporter.stream.getvalue() == f"::error::Input required and not supplied: {name}\n"
    client_factory.assert_not_called()


@pytest.mark.parametrize("token, message", [
    ("1111111111111111111111111111111111111111", "github_pat_token does not start with ghp_"),
    ("ghp_1111111111111_1111111[11111111111111", "github_pat_token contains special characters"),
    ("ghp_1111too_short", "github_pat_token not 40 characters long"),
])
def test_fails_on_malformed_token_before_any_network_call(reporter, client_factory, github_client, token, message):
    assert action_runner.run(make_inputs(token), client_factory, reporter) == 1

    assert reporter.failed is True
    assert reporter.stream.getvalue() == f"::error::{message}\n"
    client_factory.assert_not_called()
    github_client.list_repositories.assert_not_called()


def test_token_is_checked_before_inactive_days(reporter, client_factory):
    inputs = make_inputs("ghp_short", github_repo_max_inactive_days="not-a-number")

    action_runner.run(inputs, client_factory, reporter)

    assert reporter.stream.getvalue() == "::error::github_pat_token not 40 characters long\n"


@pytest.mark.parametrize("days", ["not-a-number", "this is not a number", "nan", "12days", "1e10"])
def test_fails_if_inactive_days_is_not_a_number(valid_token, reporter, client_factory, github_client, days):
    inputs = make_inputs(valid_token, github_repo_max_inactive_days=days)

    assert action_runner.run(inputs, client_factory, reporter) == 1

    assert reporter.stream.getvalue() == "::error::github_repo_max_inactive_days not a number\n"
    client_factory.assert_not_called()
    github_client.archive_repository.assert_not_called()


def test_reports_organization_lookup_failure(valid_token, reporter, client_factory, github_client, output_file):
    github_client.list_repositories.side_effect = GitHubAPIError(
        ErrorKind.UNKNOWN, "Cannot find organization."
    )

    assert action_runner.run(make_inputs(valid_token), client_factory, reporter) == 1

    assert reporter.stream.getvalue() == "::error::Cannot find organization.\n"
    github_client.close.assert_called_once()
    assert not output_file.exists()


def test_archives_inactive_repositories(valid_token, reporter, client_factory, github_client, output_file):
    from repo_archiver.domain.repository import RepositoryRef

    github_client.list_repositories.return_value = [
        RepositoryRef("robertcrockett", "archive_test"),
        RepositoryRef("robertcrockett", "other"),
    ]
    github_client.get_file_handle.side_effect = GitHubAPIError(ErrorKind.NOT_FOUND, "Cannot find repository or file")
    github_client.archive_repository.return_value = True

    assert action_runner.run(make_inputs(valid_token), client_factory, reporter) == 0

    github_client.archive_repository.assert_called_once_with("robertcrockett", "archive_test")
    assert json.loads(read_outputs(output_file)["archived_repositories"]) == ["archive_test"]


def test_custom_readme_message_and_ignore_list(valid_token, reporter, client_factory, github_client):
    inputs = make_inputs(
        valid_token,
        github_repo="*",
        ignore_files="keep, also-keep",
        readme_message="Moved elsewhere."
    )
    with patch.object(action_runner, "ArchiverService") as service_cls:
        service_cls.return_value.archive_inactive.return_value = {}
        assert action_runner.run(inputs, client_factory, reporter) == 0

    service_cls.assert_called_once_with(github_client, notice="Moved elsewhere.")
    service_cls.return_value.archive_inactive.assert_called_once_with(
        "robertcrockett", 365.0, repo_filter="*", ignore=["keep", "also-keep"]
    )


def test_main_reads_runner_environment(monkeypatch, valid_token, output_file, clean_env):
    monkeypatch.setenv("INPUT_GITHUB_ORG_PAT_TOKEN", valid_token)
    monkeypatch.setenv("INPUT_GITHUB_ORG", "robertcrockett")
    monkeypatch.setenv("INPUT_GITHUB_REPO", "archive_test")
    monkeypatch.setenv("INPUT_GITHUB_REPO_MAX_INACTIVE_DAYS", "not-a-number")
    monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))

    with patch.object(action_runner, "GitHubRestClient") as client_cls:
        assert action_runner.main() == 1

    client_cls.assert_not_called()
