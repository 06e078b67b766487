"""GitHub REST API client for the archiving workflow, with error classification."""

import base64
import logging
from datetime import datetime
from typing import List, Optional, Dict, Any, Union

import requests

from repo_archiver.domain.errors import ErrorKind, GitHubAPIError
from repo_archiver.domain.repository import FileHandle, RepositoryRef

logger = logging.getLogger(__name__)


def _status_of(error: requests.RequestException) -> Optional[int]:
    """HTTP status of a failed call, or None when no response came back."""
    response = getattr(error, "response", None)
    if response is None:
        return None
    return response.status_code


def _rate_limit_remaining(error: requests.RequestException) -> Optional[str]:
    response = getattr(error, "response", None)
    if response is None:
        return None
    return response.headers.get("X-RateLimit-Remaining")


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class GitHubRestClient:
    """
    Client for the GitHub REST endpoints used when archiving repositories.

    One authenticated session is built per client and reused by every call.
    Each operation classifies its own failures into a GitHubAPIError; the
    classification rules differ per operation on purpose.
    """

    API_URL = "https://api.github.com"
    API_VERSION = "2022-11-28"
    PAGE_SIZE = 100
    TIMEOUT_SECONDS = 30

    def __init__(
        self,
        token: str,
        api_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: int = TIMEOUT_SECONDS
    ):
        """
        Initialize GitHub REST client.

        Args:
            token: GitHub personal access token
            api_url: Base URL of the REST API. Defaults to api.github.com.
            session: Pre-built session, mostly useful for tests
            timeout: Per-request timeout in seconds
        """
        self.api_url = (api_url or self.API_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": self.API_VERSION,
        })

    def close(self):
        """Close the underlying HTTP session."""
        self.session.close()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Issue a single request against the API.

        Raises:
            requests.HTTPError: If GitHub answers with a 4xx/5xx status
            requests.RequestException: If the request could not be sent
        """
        url = f"{self.api_url}{path}"
        logger.debug(f"{method} {url}")
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        if response.status_code >= 400:
            raise requests.HTTPError(
                f"{response.status_code} error for {method} {url}",
                response=response
            )
        return response

    def list_repositories(self, org: str) -> List[RepositoryRef]:
        """
        List every repository of an organization.

        Args:
            org: Organization login

        Returns:
            Repositories in the order GitHub returns them

        Raises:
            GitHubAPIError: UNKNOWN on any failure
        """
        repositories = []
        page = 1
        try:
            while True:
                response = self._request(
                    "GET",
                    f"/orgs/{org}/repos",
                    params={"per_page": self.PAGE_SIZE, "page": page}
                )
                items: List[Dict[str, Any]] = response.json()
                for item in items:
                    repositories.append(RepositoryRef(
                        owner=item.get("owner", {}).get("login", org),
                        name=item["name"],
                        archived=bool(item.get("archived", False)),
                        pushed_at=_parse_timestamp(item.get("pushed_at"))
                    ))
                if not items or "next" not in (response.links or {}):
                    break
                page += 1
        except requests.RequestException as e:
            logger.error(f"Listing repositories for {org} failed (status {_status_of(e)}): {e}")
            raise GitHubAPIError(ErrorKind.UNKNOWN, "Cannot find organization.") from e

        logger.info(f"Found {len(repositories)} repositories in {org}")
        return repositories

    def get_file_handle(self, owner: str, repo: str, path: str) -> FileHandle:
        """
        Fetch the metadata of a file and return its blob SHA.

        Raises:
            GitHubAPIError: RATE_LIMITED on a 403 with no calls remaining,
                UNAUTHORIZED on a 401, NOT_FOUND otherwise
        """
        try:
            response = self._request("GET", f"/repos/{owner}/{repo}/contents/{path}")
        except requests.RequestException as e:
            status = _status_of(e)
            logger.error(f"Fetching {owner}/{repo}/{path} failed (status {status}): {e}")
            # Rate limit must be checked before any other 403 handling
            if status == 403 and _rate_limit_remaining(e) == "0":
                raise GitHubAPIError(ErrorKind.RATE_LIMITED, "You have exceeded your rate limit.") from e
            elif status == 401:
                raise GitHubAPIError(ErrorKind.UNAUTHORIZED, "Bad credentials were provided.") from e
            else:
                raise GitHubAPIError(ErrorKind.NOT_FOUND, "Cannot find repository or file") from e

        data = response.json()
        # A directory path yields a listing instead of a single file
        if not isinstance(data, dict) or not data.get("sha"):
            logger.error(f"{owner}/{repo}/{path} is not a file")
            raise GitHubAPIError(ErrorKind.NOT_FOUND, "Cannot find repository or file")
        sha = str(data["sha"]).replace('"', "").replace("'", "")
        return FileHandle(path=path, sha=sha)

    def download_blob(self, owner: str, repo: str, sha: str) -> str:
        """
        Download a blob by its SHA.

        Returns:
            The base64 payload exactly as GitHub sends it

        Raises:
            GitHubAPIError: UNKNOWN on any failure
        """
        try:
            response = self._request("GET", f"/repos/{owner}/{repo}/git/blobs/{sha}")
        except requests.RequestException as e:
            logger.error(f"Downloading blob {sha} from {owner}/{repo} failed (status {_status_of(e)}): {e}")
            raise GitHubAPIError(ErrorKind.UNKNOWN, "Cannot download file.") from e

        return response.json()["content"]

    def update_file(
        self,
        owner: str,
        repo: str,
        handle: FileHandle,
        content: Union[str, bytes],
        message: str
    ) -> FileHandle:
        """
        Commit new content for an existing file.

        Args:
            owner: Repository owner
            repo: Repository name
            handle: Current path and blob SHA of the file
            content: New file content, text is encoded as UTF-8
            message: Commit message

        Returns:
            Handle pointing at the newly committed blob

        Raises:
            GitHubAPIError: FORBIDDEN on a 403, NOT_FOUND on a 404, UNKNOWN otherwise
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        payload = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "sha": handle.sha,
        }
        try:
            response = self._request(
                "PUT",
                f"/repos/{owner}/{repo}/contents/{handle.path}",
                json=payload
            )
        except requests.RequestException as e:
            status = _status_of(e)
            logger.error(f"Updating {owner}/{repo}/{handle.path} failed (status {status}): {e}")
            if status == 403:
                raise GitHubAPIError(ErrorKind.FORBIDDEN, "Access has been forbidden.") from e
            elif status == 404:
                raise GitHubAPIError(ErrorKind.NOT_FOUND, "Cannot find repository or file") from e
            else:
                raise GitHubAPIError(ErrorKind.UNKNOWN, "Cannot update file.") from e

        new_sha = response.json().get("content", {}).get("sha", handle.sha)
        return FileHandle(path=handle.path, sha=new_sha)

    def archive_repository(self, owner: str, repo: str) -> bool:
        """
        Set the archived flag on a repository.

        Archiving an already archived repository succeeds again.

        Returns:
            The archived flag reported back by GitHub

        Raises:
            GitHubAPIError: FORBIDDEN on a 403, NOT_FOUND on a 404, UNKNOWN otherwise
        """
        try:
            response = self._request("PATCH", f"/repos/{owner}/{repo}", json={"archived": True})
        except requests.RequestException as e:
            status = _status_of(e)
            logger.error(f"Archiving {owner}/{repo} failed (status {status}): {e}")
            if status == 403:
                raise GitHubAPIError(ErrorKind.FORBIDDEN, "Access has been forbidden.") from e
            elif status == 404:
                raise GitHubAPIError(ErrorKind.NOT_FOUND, "Repository cannot be found.") from e
            else:
                raise GitHubAPIError(
                    ErrorKind.UNKNOWN,
                    "An unknown error has occurred. The repository has not been archived."
                ) from e

        archived = response.json()["archived"]
        logger.info(f"Repository {owner}/{repo} archived: {archived}")
        return archived
